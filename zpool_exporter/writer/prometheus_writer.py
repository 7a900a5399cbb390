"""
Prometheus metric family writer for the ZFS pool exporter.
"""

import logging
from typing import Dict, List, Sequence

from prometheus_client.core import GaugeMetricFamily, HistogramMetricFamily, Metric, UnknownMetricFamily
from prometheus_client.utils import floatToGoString

from zpool_exporter.histogram import HistogramSnapshot
from zpool_exporter.registry import GAUGE, HISTOGRAM, UNTYPED, MetricDescriptor
from zpool_exporter.writer.base import Writer

# Initialize logger
LOG = logging.getLogger(__name__)

_FAMILY_TYPES = {
    GAUGE: GaugeMetricFamily,
    UNTYPED: UnknownMetricFamily,
    HISTOGRAM: HistogramMetricFamily,
}


def new_family(descriptor: MetricDescriptor) -> Metric:
    """Create an empty metric family for a descriptor."""
    family_type = _FAMILY_TYPES[descriptor.kind]
    return family_type(descriptor.name, descriptor.documentation, labels=list(descriptor.labels))


class MetricFamilyWriter(Writer):
    """
    Writer that collects observations into prometheus_client metric families.
    One instance is used per scrape and then discarded.
    """

    def __init__(self):
        self._families: Dict[str, Metric] = {}
        self.samples_written = 0

    def _family(self, descriptor: MetricDescriptor, kind: str) -> Metric:
        if descriptor.kind != kind:
            raise ValueError(f"{descriptor.name} is a {descriptor.kind}, cannot record a {kind}")
        family = self._families.get(descriptor.name)
        if family is None:
            family = new_family(descriptor)
            self._families[descriptor.name] = family
        return family

    def gauge(self, descriptor: MetricDescriptor, value: float, labels: Sequence[str]) -> None:
        self._family(descriptor, GAUGE).add_metric(list(labels), float(value))
        self.samples_written += 1

    def untyped(self, descriptor: MetricDescriptor, value: float, labels: Sequence[str]) -> None:
        self._family(descriptor, UNTYPED).add_metric(list(labels), float(value))
        self.samples_written += 1

    def histogram(self, descriptor: MetricDescriptor, snapshot: HistogramSnapshot, labels: Sequence[str]) -> None:
        buckets = [(floatToGoString(bound), count) for bound, count in snapshot.buckets.items()]
        buckets.append(('+Inf', snapshot.count))
        self._family(descriptor, HISTOGRAM).add_metric(list(labels), buckets, snapshot.sum)
        self.samples_written += 1

    def families(self) -> List[Metric]:
        """Metric families in the order they were first written."""
        return list(self._families.values())
