# -----------------------------------------------------------------------------
# Copyright (c) 2025 ZFS Pool Exporter
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

"""
Per-vdev statistics: the node stat emitter and the vdev tree walker.
"""

import logging
import os

from zpool_exporter.errors import ExtendedStatShapeError
from zpool_exporter.histogram import decode_histogram
from zpool_exporter.identity import vdev_name
from zpool_exporter.models import VdevNode, decode_extended_stat
from zpool_exporter.registry import HISTOGRAM, StatRegistry
from zpool_exporter.writer.base import Writer

LOG = logging.getLogger(__name__)


class VdevCollector:
    """
    Reports vdev stats, basic and extended, for a vdev tree.

    The pool root, group vdevs and individual devices all carry vdev stats,
    but not every stat applies to every type. Everything present in the data
    is reported; inapplicable stats are normally 0.
    """

    def __init__(self, registry: StatRegistry, writer: Writer, full_path: bool = False):
        self.registry = registry
        self.writer = writer
        self.full_path = full_path

    def path_label(self, vdev: VdevNode) -> str:
        """Path label for a vdev: '' if it has none, else the basename unless full paths are wanted."""
        if vdev.path is None:
            return ""
        if self.full_path or vdev.type == 'file':
            return vdev.path
        return os.path.basename(vdev.path)

    def report_vdev_stats(self, pool_name: str, name: str, vdev: VdevNode) -> None:
        """
        Emit every statistic of a single vdev.

        Args:
            pool_name: Pool the vdev belongs to
            name: Resolved vdev name (see identity.vdev_name)
            vdev: The vdev

        Raises:
            ExtendedStatShapeError: If a known extended stat is malformed or does not fit its descriptor
        """
        registry = self.registry

        # IO stats bubble up from the leaf devices, so the number of
        # children is useful context for group vdevs.
        if vdev.children is not None:
            self.writer.gauge(registry.vdev_children, len(vdev.children), (name, pool_name))

        if vdev.nparity is not None:
            self.writer.gauge(registry.vdev_nparity, vdev.nparity, (name, pool_name))

        path = self.path_label(vdev)
        self._report_positional(pool_name, name, path, vdev.vdev_stats)
        self._report_extended(pool_name, name, path, vdev)

    def _report_positional(self, pool_name, name, path, raw_stats) -> None:
        # Entries with variants consume several raw slots, so the raw index
        # advances separately from the table.
        i = 0
        for slot in self.registry.vdev_stats:
            if i >= len(raw_stats):
                break
            if slot.descriptor is None:
                i += 1
                continue
            if not slot.variants:
                self.writer.untyped(slot.descriptor, raw_stats[i], (name, pool_name, path))
                i += 1
                continue
            for variant in slot.variants:
                if i >= len(raw_stats):
                    break
                self.writer.untyped(slot.descriptor, raw_stats[i], (name, pool_name, path, variant))
                i += 1

    def _report_extended(self, pool_name, name, path, vdev: VdevNode) -> None:
        for stat_name, raw_value in vdev.vdev_stats_ex.items():
            ext = self.registry.extended_stats.get(stat_name)
            if ext is None:
                LOG.debug(f"Ignoring unknown extended stat {stat_name} on {pool_name}/{name}")
                continue

            value = decode_extended_stat(stat_name, raw_value)
            labels = (ext.label, name, pool_name, path)
            is_histogram = isinstance(value, tuple)
            if is_histogram != (ext.descriptor.kind == HISTOGRAM):
                raise ExtendedStatShapeError(stat_name, value)

            if is_histogram:
                self.writer.histogram(ext.descriptor, decode_histogram(value), labels)
            else:
                self.writer.gauge(ext.descriptor, value, labels)

    def descend(self, pool_name: str, parent: str, vdev: VdevNode, max_depth: float, current_depth: int) -> None:
        """
        Report every child of a vdev and recurse below it.

        Args:
            pool_name: Pool being reported
            parent: Resolved name of vdev
            vdev: Vdev whose children are reported
            max_depth: Deepest level to report; math.inf walks the whole tree
            current_depth: Tree depth of vdev's children; 0 reports nothing
        """
        if current_depth == 0 or vdev.children is None:
            return
        for child in vdev.children:
            child_name = vdev_name(parent, child)
            self.report_vdev_stats(pool_name, child_name, child)
            if current_depth < max_depth:
                self.descend(pool_name, child_name, child, max_depth, current_depth + 1)
