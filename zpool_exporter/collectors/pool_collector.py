# -----------------------------------------------------------------------------
# Copyright (c) 2025 ZFS Pool Exporter
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

"""
Pool level reporting and the prometheus_client collector that drives a scrape.

Metrics may be reported for just pools (depth 0), for pools and top level
vdevs (depth 1), or for the whole vdev tree (depth 2 and deeper).
"""

import logging
import math
import os
import time
from typing import Callable, Iterator, List, Optional

from prometheus_client.core import Metric

from zpool_exporter.collectors.vdev_collector import VdevCollector
from zpool_exporter.errors import ZpoolExporterError
from zpool_exporter.identity import vdev_name
from zpool_exporter.models import PoolRecord
from zpool_exporter.registry import StatRegistry
from zpool_exporter.source.base import PoolSource
from zpool_exporter.writer.base import Writer
from zpool_exporter.writer.prometheus_writer import MetricFamilyWriter, new_family

LOG = logging.getLogger(__name__)

ROOT_VDEV_NAME = 'root'


class PoolCollector:
    """Reports pool wide stats and the pool's vdev tree."""

    def __init__(self, registry: StatRegistry, writer: Writer, depth: int = 1, full_path: bool = False):
        self.registry = registry
        self.writer = writer
        self.depth = depth
        self.vdevs = VdevCollector(registry, writer, full_path)

    def report_pool(self, pool: PoolRecord) -> None:
        registry = self.registry
        guid = str(pool.pool_guid)

        self.writer.gauge(registry.pool_load_time, pool.load_time, (pool.name, guid))
        self.writer.gauge(registry.pool_errors, pool.error_count, (pool.name, guid))
        self.writer.gauge(registry.pool_vdevs, pool.vdev_children, (pool.name, guid))
        self.writer.gauge(registry.pool_config_txg, pool.txg, (pool.name,))

        tree = pool.vdev_tree
        self.vdevs.report_vdev_stats(pool.name, ROOT_VDEV_NAME, tree)
        if self.depth > 0:
            for vdev in tree.children or ():
                name = vdev_name("", vdev)
                self.vdevs.report_vdev_stats(pool.name, name, vdev)
                if self.depth > 1:
                    self.vdevs.descend(pool.name, name, vdev, math.inf, 2)

        self._report_scan_stats(pool)

    def _report_scan_stats(self, pool: PoolRecord) -> None:
        if pool.scan_stats is None:
            return
        for descriptor, value in zip(self.registry.scan_stats, pool.scan_stats):
            self.writer.gauge(descriptor, value, (pool.name,))


def terminate(exc: BaseException) -> None:
    """
    Default fatal handler: exit the whole process.

    Scrapes run in the HTTP server thread, where sys.exit() would only end
    that thread.
    """
    logging.shutdown()
    os._exit(1)


class ZpoolCollector:
    """
    prometheus_client custom collector for ZFS pool statistics.

    Each scrape is one synchronous pass over every pool, working on the
    source returned by begin_pass() so concurrent scrapes share no state.
    Any error is fatal; no partial metrics document is ever returned.
    """

    def __init__(self, source: PoolSource, registry: StatRegistry, depth: int = 1, full_path: bool = False,
                 on_fatal: Optional[Callable[[BaseException], None]] = None):
        self.source = source
        self.registry = registry
        self.depth = depth
        self.full_path = full_path
        self.on_fatal = on_fatal or terminate

    def describe(self) -> Iterator[Metric]:
        # Lets registration skip a collect(), which would query the source
        for descriptor in self.registry.descriptors():
            yield new_family(descriptor)

    def collect_families(self) -> List[Metric]:
        """
        Run one collection pass.

        Returns:
            Metric families for all pools

        Raises:
            ZpoolExporterError: If the source fails or returns malformed stats
        """
        time_start = time.time()
        writer = MetricFamilyWriter()
        reporter = PoolCollector(self.registry, writer, self.depth, self.full_path)

        source = self.source.begin_pass()
        pools = source.list_pools()
        for pool_name in sorted(pools):
            raw = source.get_pool_stats(pool_name)
            reporter.report_pool(PoolRecord.from_dict(raw, name=pool_name))

        LOG.debug(f"Collected {writer.samples_written} samples for {len(pools)} pools "
                  f"in {time.time() - time_start:.3f}s")
        return writer.families()

    def collect(self) -> Iterator[Metric]:
        try:
            families = self.collect_families()
        except ZpoolExporterError as e:
            LOG.critical(f"Fatal error collecting ZFS pool metrics: {e}")
            self.on_fatal(e)
            return
        except Exception as e:
            LOG.exception(f"Unexpected error collecting ZFS pool metrics: {e}")
            self.on_fatal(e)
            return
        yield from families
