# -----------------------------------------------------------------------------
# Copyright (c) 2025 ZFS Pool Exporter
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

"""
Static statistic tables for ZFS vdev and pool metrics.

VDEV_STATS follows the field order of the kernel's vdev_stat_t exactly; each
positional slot of a vdev's 'vdev_stats' array is matched against this table.
Do not reorder, insert or remove entries without checking the kernel layout.
"""

from typing import NamedTuple, Optional, Tuple


class StatDefinition(NamedTuple):
    """
    One entry of a positional stat table.

    An empty name marks a slot that is skipped. An entry with variants
    consumes one slot per variant, in order.
    """
    name: str = ''
    help: str = ''
    dimension: Optional[str] = None
    variants: Tuple[str, ...] = ()


SKIP = StatDefinition()

ZIO_TYPES = ('null', 'read', 'write', 'free', 'claim', 'ioctl')

VDEV_STATS: Tuple[StatDefinition, ...] = (
    SKIP,  # timestamp
    StatDefinition('state', 'state (see pool_state_t)'),
    SKIP,  # auxiliary state, only meaningful for pools that are not imported
    StatDefinition('space_allocated_bytes', 'allocated space in bytes'),
    StatDefinition('space_capacity_bytes', 'total capacity in bytes'),
    StatDefinition('space_deflated_capacity_bytes', 'deflated capacity in bytes'),
    StatDefinition('devsize_replaceable', 'replaceable device size'),
    StatDefinition('devsize_expandable', 'expandable device size'),
    StatDefinition('ops', 'I/O operations', 'type', ZIO_TYPES),
    StatDefinition('bytes', 'bytes processed', 'type', ZIO_TYPES),
    StatDefinition('errors', 'errors encountered', 'type', ('read', 'write', 'checksum', 'initialize')),
    StatDefinition('self_healed_bytes', 'bytes self-healed'),
    SKIP,  # removed from the kernel, slot kept for layout
    StatDefinition('scan_processed_bytes', 'bytes scanned'),
    StatDefinition('fragmentation', 'fragmentation'),
    StatDefinition('initialize_processed_bytes', 'bytes already initialized'),
    StatDefinition('initialize_estimated_bytes', 'estimated total number of bytes to initialize'),
    StatDefinition('initialize_state', 'initialize state (see initialize_state_t)'),
    StatDefinition('initialize_action_time', 'initialize time'),
    StatDefinition('checkpoint_space_bytes', 'checkpoint space in bytes'),
    StatDefinition('resilver_deferred', 'resilver deferred'),
    StatDefinition('slow_ios', 'slow I/O operations (30 seconds or more to complete)'),
    StatDefinition('trim_errors', 'trim errors'),
    StatDefinition('trim_unsupported', "doesn't support TRIM"),
    StatDefinition('trim_processed_bytes', 'TRIMmed bytes'),
    StatDefinition('trim_estimated_bytes', 'estimated bytes to TRIM'),
    StatDefinition('trim_state', 'trim state'),
    StatDefinition('trim_action_time', 'trim time'),
    StatDefinition('rebuild_processed_bytes', 'bytes already rebuilt'),
    StatDefinition('ashift_configured', 'configured ashift'),
    StatDefinition('ashift_logical', 'logical ashift'),
    StatDefinition('ashift_physical', 'physical ashift'),
    # OpenZFS 2.1 and later
    StatDefinition('noalloc_status', 'allocations halted?'),
    StatDefinition('physical_capacity_bytes', 'physical capacity'),
)

# struct pool_scan_stat, stored on the root vdev as 'scan_stats'
SCAN_STATS: Tuple[StatDefinition, ...] = (
    StatDefinition('scan_func', 'Pool scan function: 0 none, 1 scrub, 2 resilver, 3 rebuild (maybe)'),
    StatDefinition('scan_state', 'Pool scan state: 0 none, 1 scanning, 2 finished, 3 cancelled'),
    StatDefinition('scan_start_time_seconds', 'Pool scan start time'),
    StatDefinition('scan_end_time_seconds', 'Pool scan end time'),
    StatDefinition('scan_to_examine_bytes', 'Total bytes to scan'),
    StatDefinition('scan_examined_bytes', 'Total bytes examined'),
    StatDefinition('scan_to_process_bytes', 'Total bytes to process'),
    StatDefinition('scan_processed_bytes', 'Total bytes processed'),
    StatDefinition('scan_errors', 'Scan errors'),
    # not stored on disk
    StatDefinition('scan_pass_examined_bytes', 'Examined bytes per scan pass'),
    StatDefinition('scan_pass_start_seconds', 'Start time of a scan pass'),
    StatDefinition('scan_scrub_pause', 'Pause time of a scrub pass'),
    StatDefinition('scan_scrub_pause_time_spent', 'Cumulative time the scrub spent paused'),
    StatDefinition('scan_pass_issued_bytes', 'Issued bytes per scan pass'),
    StatDefinition('scan_issued_bytes', 'Total bytes checked by scanner'),
)

VDEV_STAT_PREFIX = 'zfs_vdev_'
VDEV_STAT_HELP_PREFIX = 'ZFS VDev '
SCAN_STAT_PREFIX = 'zfs_pool_'
SCAN_STAT_HELP_PREFIX = 'ZFS Pool Scan '

# Shared descriptors for extended stats: key -> (metric name, help, kind).
# ZFS has no histograms of physical disk IO; the 'individual' size
# histograms (*_ind_*) cover non-aggregated IO.
EXTENDED_STAT_METRICS = {
    'active_queue_length': ('zfs_vdev_queue_active_length',
                            'Number of ZIOs issued to disk and waiting to finish', 'gauge'),
    'pending_queue_length': ('zfs_vdev_queue_pending_length',
                             'Number of ZIOs pending to be issued to disk', 'gauge'),
    'queue_latency': ('zfs_vdev_queue_latency',
                      'Amount of time an IO request spent in the queue', 'histogram'),
    'zio_latency_total': ('zfs_vdev_zio_latency_total',
                          'Total ZIO latency including queuing and disk access time.', 'histogram'),
    'zio_latency_disk': ('zfs_vdev_latency_disk',
                         'Amount of time to read/write the disk', 'histogram'),
    'individual_io_size': ('zfs_vdev_io_size_individual',
                           "Size of the 'individual' non-aggregated I/O requests issued", 'histogram'),
    'aggregated_io_size': ('zfs_vdev_io_size_aggregated',
                           'Size of the aggregated I/O requests issued', 'histogram'),
}

# vdev_stats_ex field -> (shared descriptor key, value of the 'type' label).
# 'vdev_slow_ios' is also present but duplicates the positional slow_ios slot.
EXTENDED_STATS: Tuple[Tuple[str, str, str], ...] = (
    ('vdev_agg_scrub_histo', 'aggregated_io_size', 'scrub'),
    ('vdev_agg_trim_histo', 'aggregated_io_size', 'trim'),
    ('vdev_async_agg_r_histo', 'aggregated_io_size', 'async_read'),
    ('vdev_async_agg_w_histo', 'aggregated_io_size', 'async_write'),
    ('vdev_async_ind_r_histo', 'individual_io_size', 'async_read'),
    ('vdev_async_ind_w_histo', 'individual_io_size', 'async_write'),
    ('vdev_async_r_active_queue', 'active_queue_length', 'async_read'),
    ('vdev_async_r_lat_histo', 'queue_latency', 'async_read'),
    ('vdev_async_r_pend_queue', 'pending_queue_length', 'async_read'),
    ('vdev_async_scrub_active_queue', 'active_queue_length', 'scrub'),
    ('vdev_async_scrub_pend_queue', 'pending_queue_length', 'scrub'),
    ('vdev_async_trim_active_queue', 'active_queue_length', 'trim'),
    ('vdev_async_trim_pend_queue', 'pending_queue_length', 'trim'),
    ('vdev_async_w_active_queue', 'active_queue_length', 'async_write'),
    ('vdev_async_w_lat_histo', 'queue_latency', 'async_write'),
    ('vdev_async_w_pend_queue', 'pending_queue_length', 'async_write'),
    ('vdev_disk_r_lat_histo', 'zio_latency_disk', 'read'),
    ('vdev_disk_w_lat_histo', 'zio_latency_disk', 'write'),
    ('vdev_ind_scrub_histo', 'individual_io_size', 'scrub'),
    ('vdev_ind_trim_histo', 'individual_io_size', 'trim'),
    ('vdev_scrub_histo', 'queue_latency', 'scrub'),
    ('vdev_sync_agg_r_histo', 'aggregated_io_size', 'sync_read'),
    ('vdev_sync_agg_w_histo', 'aggregated_io_size', 'sync_write'),
    ('vdev_sync_ind_r_histo', 'individual_io_size', 'sync_read'),
    ('vdev_sync_ind_w_histo', 'individual_io_size', 'sync_write'),
    ('vdev_sync_r_active_queue', 'active_queue_length', 'sync_read'),
    ('vdev_sync_r_lat_histo', 'queue_latency', 'sync_read'),
    ('vdev_sync_r_pend_queue', 'pending_queue_length', 'sync_read'),
    ('vdev_sync_w_active_queue', 'active_queue_length', 'sync_write'),
    ('vdev_sync_w_lat_histo', 'queue_latency', 'sync_write'),
    ('vdev_sync_w_pend_queue', 'pending_queue_length', 'sync_write'),
    ('vdev_tot_r_lat_histo', 'zio_latency_total', 'read'),
    ('vdev_tot_w_lat_histo', 'zio_latency_total', 'write'),
    ('vdev_trim_histo', 'queue_latency', 'trim'),
    # OpenZFS 2.2 and later
    ('vdev_rebuild_active_queue', 'active_queue_length', 'rebuild'),
    ('vdev_rebuild_pend_queue', 'pending_queue_length', 'rebuild'),
    ('vdev_ind_rebuild_histo', 'individual_io_size', 'rebuild'),
    ('vdev_agg_rebuild_histo', 'aggregated_io_size', 'rebuild'),
    ('vdev_rebuild_histo', 'queue_latency', 'rebuild'),
)


def stat_slot_count(definitions: Tuple[StatDefinition, ...]) -> int:
    """
    Number of raw array slots covered by a positional stat table.

    Args:
        definitions: Positional stat table

    Returns:
        int: Slots consumed, counting each variant and each skipped entry
    """
    return sum(len(d.variants) or 1 for d in definitions)
