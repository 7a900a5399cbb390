"""
Base pool data source interface for the ZFS pool exporter.
"""

import logging
from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Any, Dict, Mapping

from zpool_exporter.errors import SourceError

# Initialize logger
LOG = logging.getLogger(__name__)

class PoolSource(ABC):
    """
    Base class for all pool data sources.

    Both calls are made once per scrape and block until they return.
    """

    @abstractmethod
    def list_pools(self) -> Dict[str, Any]:
        """
        List imported pools.

        Returns:
            Mapping of pool name to an opaque, source specific handle

        Raises:
            SourceError: If the pools cannot be listed
        """
        pass

    @abstractmethod
    def get_pool_stats(self, pool_name: str) -> Dict[str, Any]:
        """
        Fetch the raw statistics record of one pool.

        Args:
            pool_name: Name returned by list_pools()

        Returns:
            Raw pool record (see models.PoolRecord.from_dict)

        Raises:
            SourceError: If the stats cannot be retrieved
        """
        pass

    def begin_pass(self) -> 'PoolSource':
        """
        Start a collection pass.

        Scrapes may run concurrently, so a pass must only use the source this
        returns. The default returns the source itself; sources that fetch
        every pool in one call return a PoolSnapshot of that fetch.
        """
        return self


class PoolSnapshot(PoolSource):
    """Pool records fetched for a single pass. Never modified after creation."""

    def __init__(self, pools: Mapping[str, Any], origin: str):
        """
        Args:
            pools: Pool name to raw pool record
            origin: Where the records came from, for error messages
        """
        self._pools = MappingProxyType(dict(pools))
        self.origin = origin

    def list_pools(self) -> Dict[str, Any]:
        return {name: name for name in self._pools}

    def get_pool_stats(self, pool_name: str) -> Dict[str, Any]:
        if pool_name not in self._pools:
            raise SourceError(f"Pool {pool_name} missing from {self.origin}")
        return self._pools[pool_name]
