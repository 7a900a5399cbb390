"""
Base writer interface for the ZFS pool exporter.
"""

import logging
from abc import ABC, abstractmethod
from typing import Sequence

from zpool_exporter.histogram import HistogramSnapshot
from zpool_exporter.registry import MetricDescriptor

# Initialize logger
LOG = logging.getLogger(__name__)

class Writer(ABC):
    """
    Receives metric observations from the collectors.
    Label values are ordered to match descriptor.labels.
    """

    @abstractmethod
    def gauge(self, descriptor: MetricDescriptor, value: float, labels: Sequence[str]) -> None:
        pass

    @abstractmethod
    def untyped(self, descriptor: MetricDescriptor, value: float, labels: Sequence[str]) -> None:
        pass

    @abstractmethod
    def histogram(self, descriptor: MetricDescriptor, snapshot: HistogramSnapshot, labels: Sequence[str]) -> None:
        """
        Record a reconstructed histogram.

        Args:
            descriptor: Histogram descriptor
            snapshot: Cumulative buckets, count and approximate sum
            labels: Label values in descriptor order
        """
        pass
