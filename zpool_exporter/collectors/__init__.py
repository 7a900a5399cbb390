"""
Collectors package for the ZFS pool exporter.

Available collectors:
- vdev_collector.py: per-vdev stats and the vdev tree walker
- pool_collector.py: pool level stats and the prometheus_client collector
"""
