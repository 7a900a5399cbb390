# -----------------------------------------------------------------------------
# Copyright (c) 2025 ZFS Pool Exporter
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

"""
Typed records for the pool statistics returned by a pool data source.

A data source hands back plain mappings shaped like the kernel's pool stats
nvlist. They are decoded once here into VdevNode and PoolRecord. Extended
stat values are the exception: their set of keys grows with every ZFS
release, so they are kept as read-only raw values and decoded by the vdev
collector once the stat name is known.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

from zpool_exporter.errors import ExtendedStatShapeError, StatsDecodeError

LOG = logging.getLogger(__name__)

ExtendedStatValue = Union[int, Tuple[int, ...]]


def _is_uint(value: Any) -> bool:
    # bool is an int subclass; JSON true/false are never counters
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _uint(raw: Mapping[str, Any], key: str, where: str) -> int:
    try:
        value = raw[key]
    except KeyError:
        raise StatsDecodeError(f"{where}: missing required key '{key}'") from None
    if not _is_uint(value):
        raise StatsDecodeError(f"{where}: '{key}' must be an unsigned integer, got {type(value).__name__}")
    return value


def _optional_uint(raw: Mapping[str, Any], key: str, where: str) -> Optional[int]:
    if key not in raw:
        return None
    return _uint(raw, key, where)


def _uint_array(value: Any, key: str, where: str) -> Tuple[int, ...]:
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise StatsDecodeError(f"{where}: '{key}' must be a sequence of unsigned integers")
    if not all(_is_uint(v) for v in value):
        raise StatsDecodeError(f"{where}: '{key}' contains a non unsigned integer entry")
    return tuple(value)


def decode_extended_stat(name: str, value: Any) -> ExtendedStatValue:
    """
    Decode one vdev_stats_ex entry.

    Args:
        name: Extended stat name, used for the error message
        value: Raw value from the data source

    Returns:
        The counter for scalar stats, or a tuple of bucket counts for histograms

    Raises:
        ExtendedStatShapeError: If the value is neither shape
    """
    if _is_uint(value):
        return value
    if isinstance(value, (list, tuple)) and all(_is_uint(v) for v in value):
        return tuple(value)
    raise ExtendedStatShapeError(name, value)


@dataclass(frozen=True)
class VdevNode:
    """One element of a pool's vdev tree: the root, a group or a leaf device."""

    type: str
    id: int = 0
    path: Optional[str] = None
    children: Optional[Tuple['VdevNode', ...]] = None
    nparity: Optional[int] = None
    draid_ndata: Optional[int] = None
    draid_nspares: Optional[int] = None
    vdev_stats: Tuple[int, ...] = ()
    vdev_stats_ex: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    scan_stats: Optional[Tuple[int, ...]] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any], where: str = "vdev_tree") -> 'VdevNode':
        """
        Build a node, and its children recursively, from a raw mapping.

        Args:
            raw: Mapping with the vdev nvlist keys (type, id, path, children, ...)
            where: Location of this node in the pool record, for error messages

        Raises:
            StatsDecodeError: If a key is missing or has the wrong shape
        """
        if not isinstance(raw, Mapping):
            raise StatsDecodeError(f"{where}: expected a mapping, got {type(raw).__name__}")

        vdev_type = raw.get('type')
        if not isinstance(vdev_type, str):
            raise StatsDecodeError(f"{where}: 'type' must be a string")

        path = raw.get('path')
        if path is not None and not isinstance(path, str):
            raise StatsDecodeError(f"{where}: 'path' must be a string")

        children = None
        if 'children' in raw:
            raw_children = raw['children']
            if not isinstance(raw_children, (list, tuple)):
                raise StatsDecodeError(f"{where}: 'children' must be a list")
            children = tuple(
                cls.from_dict(child, f"{where}/children[{i}]") for i, child in enumerate(raw_children)
            )

        raw_ex = raw.get('vdev_stats_ex', {})
        if not isinstance(raw_ex, Mapping):
            raise StatsDecodeError(f"{where}: 'vdev_stats_ex' must be a mapping")

        scan_stats = None
        if 'scan_stats' in raw:
            scan_stats = _uint_array(raw['scan_stats'], 'scan_stats', where)

        return cls(
            type=vdev_type,
            id=_optional_uint(raw, 'id', where) or 0,
            path=path,
            children=children,
            nparity=_optional_uint(raw, 'nparity', where),
            draid_ndata=_optional_uint(raw, 'draid_ndata', where),
            draid_nspares=_optional_uint(raw, 'draid_nspares', where),
            vdev_stats=_uint_array(raw.get('vdev_stats', ()), 'vdev_stats', where),
            vdev_stats_ex=MappingProxyType(dict(raw_ex)),
            scan_stats=scan_stats,
        )


@dataclass(frozen=True)
class PoolRecord:
    """Pool wide statistics plus the root of the vdev tree."""

    name: str
    pool_guid: int
    error_count: int
    vdev_children: int
    txg: int
    initial_load_time: Tuple[int, ...]
    vdev_tree: VdevNode
    scan_stats: Optional[Tuple[int, ...]] = None

    @property
    def load_time(self) -> int:
        return self.initial_load_time[0]

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any], name: Optional[str] = None) -> 'PoolRecord':
        """
        Decode a raw pool record.

        Args:
            raw: Pool stats mapping as returned by a PoolSource
            name: Pool name; defaults to the record's own 'name' key

        Returns:
            PoolRecord

        Raises:
            StatsDecodeError: If a required key is missing or malformed
        """
        if not isinstance(raw, Mapping):
            raise StatsDecodeError(f"pool record must be a mapping, got {type(raw).__name__}")
        name = name or raw.get('name')
        if not isinstance(name, str) or not name:
            raise StatsDecodeError("pool record has no name")
        where = f"pool {name}"

        if 'initial_load_time' not in raw:
            raise StatsDecodeError(f"{where}: missing required key 'initial_load_time'")
        load_time = _uint_array(raw['initial_load_time'], 'initial_load_time', where)
        if not load_time:
            raise StatsDecodeError(f"{where}: 'initial_load_time' is empty")

        if 'vdev_tree' not in raw:
            raise StatsDecodeError(f"{where}: missing required key 'vdev_tree'")
        vdev_tree = VdevNode.from_dict(raw['vdev_tree'], f"{where}/vdev_tree")

        # The kernel keeps scan progress on the root vdev; some dumpers hoist it
        scan_stats = vdev_tree.scan_stats
        if scan_stats is None and 'scan_stats' in raw:
            scan_stats = _uint_array(raw['scan_stats'], 'scan_stats', where)

        return cls(
            name=name,
            pool_guid=_uint(raw, 'pool_guid', where),
            error_count=_uint(raw, 'error_count', where),
            vdev_children=_uint(raw, 'vdev_children', where),
            txg=_uint(raw, 'txg', where),
            initial_load_time=load_time,
            vdev_tree=vdev_tree,
            scan_stats=scan_stats,
        )
