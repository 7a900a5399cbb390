# -----------------------------------------------------------------------------
# Copyright (c) 2025 ZFS Pool Exporter
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

"""
Metric descriptors built from the static stat tables.

build_registry() is called once at startup. The StatRegistry it returns is
immutable and shared by every scrape.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, Mapping, Optional, Tuple

from zpool_exporter.stats_schema import (
    EXTENDED_STAT_METRICS,
    EXTENDED_STATS,
    SCAN_STAT_HELP_PREFIX,
    SCAN_STAT_PREFIX,
    SCAN_STATS,
    VDEV_STAT_HELP_PREFIX,
    VDEV_STAT_PREFIX,
    VDEV_STATS,
    StatDefinition,
)

LOG = logging.getLogger(__name__)

GAUGE = 'gauge'
UNTYPED = 'untyped'
HISTOGRAM = 'histogram'

VDEV_LABELS = ('vdev', 'zpool', 'path')
EXTENDED_STAT_LABELS = ('type', 'vdev', 'zpool', 'path')
POOL_LABELS = ('zpool', 'guid')


@dataclass(frozen=True)
class MetricDescriptor:
    """Name, help text, ordered label names and kind of one metric."""
    name: str
    documentation: str
    labels: Tuple[str, ...]
    kind: str = GAUGE


@dataclass(frozen=True)
class VdevStatSlot:
    """
    A positional vdev stat entry paired with its descriptor.

    descriptor is None for skipped slots. variants holds the values of the
    extra dimension label, one per consumed slot.
    """
    descriptor: Optional[MetricDescriptor]
    variants: Tuple[str, ...] = ()

    @property
    def width(self) -> int:
        return len(self.variants) or 1


@dataclass(frozen=True)
class ExtendedStatDescriptor:
    """A vdev_stats_ex field mapped onto a shared descriptor and fixed 'type' label."""
    name: str
    descriptor: MetricDescriptor
    label: str


@dataclass(frozen=True)
class StatRegistry:
    vdev_stats: Tuple[VdevStatSlot, ...]
    scan_stats: Tuple[MetricDescriptor, ...]
    extended_stats: Mapping[str, ExtendedStatDescriptor]
    pool_load_time: MetricDescriptor
    pool_errors: MetricDescriptor
    pool_vdevs: MetricDescriptor
    pool_config_txg: MetricDescriptor
    vdev_children: MetricDescriptor
    vdev_nparity: MetricDescriptor

    def descriptors(self) -> Iterator[MetricDescriptor]:
        """Yield every distinct descriptor once, in a stable order."""
        seen = set()
        candidates = [slot.descriptor for slot in self.vdev_stats if slot.descriptor is not None]
        candidates.extend(self.scan_stats)
        candidates.extend(ext.descriptor for ext in self.extended_stats.values())
        candidates.extend([
            self.pool_load_time, self.pool_errors, self.pool_vdevs,
            self.pool_config_txg, self.vdev_children, self.vdev_nparity,
        ])
        for descriptor in candidates:
            if descriptor.name not in seen:
                seen.add(descriptor.name)
                yield descriptor


def _vdev_slot(definition: StatDefinition) -> VdevStatSlot:
    if not definition.name:
        return VdevStatSlot(None)
    labels = VDEV_LABELS
    if definition.variants:
        labels = VDEV_LABELS + (definition.dimension,)
    descriptor = MetricDescriptor(
        VDEV_STAT_PREFIX + definition.name,
        VDEV_STAT_HELP_PREFIX + definition.help,
        labels,
        UNTYPED,
    )
    return VdevStatSlot(descriptor, tuple(definition.variants))


def build_registry() -> StatRegistry:
    """
    Build the descriptor registry from the static stat tables.

    Returns:
        StatRegistry: Immutable registry shared by all collection passes
    """
    vdev_stats = tuple(_vdev_slot(d) for d in VDEV_STATS)

    scan_stats = tuple(
        MetricDescriptor(SCAN_STAT_PREFIX + d.name, SCAN_STAT_HELP_PREFIX + d.help, ('zpool',), GAUGE)
        for d in SCAN_STATS
    )

    shared = {
        key: MetricDescriptor(name, documentation, EXTENDED_STAT_LABELS, kind)
        for key, (name, documentation, kind) in EXTENDED_STAT_METRICS.items()
    }
    extended_stats = MappingProxyType({
        name: ExtendedStatDescriptor(name, shared[key], label)
        for name, key, label in EXTENDED_STATS
    })

    registry = StatRegistry(
        vdev_stats=vdev_stats,
        scan_stats=scan_stats,
        extended_stats=extended_stats,
        pool_load_time=MetricDescriptor(
            'zfs_pool_load_time_seconds',
            'The time when the pool was imported (often at system boot)', POOL_LABELS),
        pool_errors=MetricDescriptor('zfs_pool_errors', 'ZFS pool error count', POOL_LABELS),
        pool_vdevs=MetricDescriptor('zfs_pool_vdevs', 'ZFS pool top level vdev count', POOL_LABELS),
        # txg of the most recent configuration change or pool load
        pool_config_txg=MetricDescriptor(
            'zfs_pool_config_txg', 'ZFS pool configuration load or change txg', ('zpool',)),
        vdev_children=MetricDescriptor('zfs_vdev_children', 'Count of children of a vdev', ('vdev', 'zpool')),
        vdev_nparity=MetricDescriptor(
            'zfs_vdev_nparity', 'The parity level of a vdev (not always defined)', ('vdev', 'zpool')),
    )
    LOG.debug(f"Built stat registry with {sum(1 for _ in registry.descriptors())} descriptors")
    return registry
