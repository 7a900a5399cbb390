"""
Prometheus exporter for ZFS pool and vdev statistics.
"""

__version__ = "0.1.0"
