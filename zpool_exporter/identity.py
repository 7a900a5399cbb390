# -----------------------------------------------------------------------------
# Copyright (c) 2025 ZFS Pool Exporter
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

"""
Names for the vdev= label.

The name, *plus* the path label, is unique within a pool:

- a top level vdev is '<type>-<id>', e.g. 'mirror-0', 'disk-1', 'file-2';
- a nested vdev (seen while resilvering or replacing) is
  '<parent>/<type>-<id>', e.g. 'mirror-1/replacing-0';
- a disk or file inside a parent vdev carries the parent's name and is told
  apart by its path label.

raidz and draid names follow what 'zpool status' prints (libzfs
zpool_vdev_name()), so dashboards match the admin tooling.
"""

from zpool_exporter.models import VdevNode

LEAF_TYPES = ('disk', 'file')


def vdev_name(parent: str, vdev: VdevNode) -> str:
    """
    Resolve the display name of a vdev.

    Args:
        parent: Resolved name of the parent vdev, or '' for a top level vdev
        vdev: The vdev to name

    Returns:
        str: Name used for the vdev label
    """
    if vdev.type in LEAF_TYPES and parent:
        return parent
    prefix = f"{parent}/" if parent else ""

    if vdev.type == 'raidz':
        # parity level is fused into the type, e.g. raidz2-0
        return f"{prefix}{vdev.type}{_num(vdev.nparity)}-{vdev.id}"

    if vdev.type == 'draid':
        # https://openzfs.github.io/openzfs-docs/Basic%20Concepts/dRAID%20Howto.html
        children = len(vdev.children or ())
        return (f"{prefix}{vdev.type}{_num(vdev.nparity)}:{_num(vdev.draid_ndata)}d:"
                f"{children}c:{_num(vdev.draid_nspares)}s-{vdev.id}")

    # mirror, root, top level disk/file and anything unrecognised
    return f"{prefix}{vdev.type}-{vdev.id}"


def _num(value) -> int:
    return 0 if value is None else value
