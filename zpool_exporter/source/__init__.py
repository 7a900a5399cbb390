"""
Pool data sources.

- base.py: PoolSource interface and the per-pass PoolSnapshot
- json_source.py: replays captured pool stats from a directory of JSON files
- command_source.py: runs an external helper that prints pool stats as JSON
"""
from zpool_exporter.source.base import PoolSnapshot, PoolSource
from zpool_exporter.source.command_source import CommandPoolSource
from zpool_exporter.source.json_source import JsonPoolSource

__all__ = [
    'PoolSource',
    'PoolSnapshot',
    'JsonPoolSource',
    'CommandPoolSource',
]
