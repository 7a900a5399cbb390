"""
JSON replay source: serves pool stats captured earlier as JSON files.
"""

import glob
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

from zpool_exporter.errors import SourceError
from zpool_exporter.source.base import PoolSnapshot, PoolSource

LOG = logging.getLogger(__name__)

class JsonPoolSource(PoolSource):
    """
    Reads every *.json file in a directory on each call; a collection pass
    reads them once through begin_pass().

    A file holds either a single pool record, named by its 'name' key (or the
    file name without extension), or a mapping of pool name to pool record.
    """

    def __init__(self, directory: str):
        """
        Initialize the JSON source.

        Args:
            directory: Directory containing captured pool stats
        """
        self.directory = directory

    def _read_file(self, file_path: str) -> Dict[str, Any]:
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except OSError as e:
            raise SourceError(f"Cannot read {file_path}: {e}") from e
        except json.JSONDecodeError as e:
            raise SourceError(f"Invalid JSON in file {file_path}: {e}") from e

    def _load(self) -> Dict[str, Dict[str, Any]]:
        if not os.path.isdir(self.directory):
            raise SourceError(f"JSON directory does not exist: {self.directory}")

        pools = {}
        for file_path in sorted(glob.glob(os.path.join(self.directory, '*.json'))):
            data = self._read_file(file_path)
            if not isinstance(data, dict):
                raise SourceError(f"{file_path}: expected a JSON object")
            if 'vdev_tree' in data:
                name = data.get('name') or Path(file_path).stem
                pools[name] = data
            else:
                pools.update(data)
            LOG.debug(f"Loaded pool stats from {file_path}")
        return pools

    def begin_pass(self) -> PoolSnapshot:
        return PoolSnapshot(self._load(), f"JSON files in {self.directory}")

    def list_pools(self) -> Dict[str, Any]:
        return {name: name for name in self._load()}

    def get_pool_stats(self, pool_name: str) -> Dict[str, Any]:
        pools = self._load()
        if pool_name not in pools:
            raise SourceError(f"Pool {pool_name} not found in {self.directory}")
        return pools[pool_name]
