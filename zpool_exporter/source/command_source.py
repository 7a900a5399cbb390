"""
External command source: runs a helper that dumps pool stats as JSON.

The helper (for example a small libzfs or ioctl based dumper) must print a
JSON object mapping pool name to pool stats record on stdout and exit 0.
"""

import json
import logging
import shlex
import subprocess
from typing import Any, Dict, List, Optional, Union

from zpool_exporter.errors import SourceError
from zpool_exporter.source.base import PoolSnapshot, PoolSource

LOG = logging.getLogger(__name__)

class CommandPoolSource(PoolSource):
    """Runs the helper once per pass and serves every pool of that pass from its output."""

    def __init__(self, command: Union[str, List[str]], timeout: Optional[float] = None):
        """
        Args:
            command: Helper command line, as a string or argument list
            timeout: Seconds to wait for the helper; None waits forever
        """
        self.command = shlex.split(command) if isinstance(command, str) else list(command)
        self.timeout = timeout

    def _run(self) -> Dict[str, Any]:
        cmd = ' '.join(self.command)
        try:
            result = subprocess.run(self.command, capture_output=True, text=True,
                                    check=True, timeout=self.timeout)
        except FileNotFoundError as e:
            raise SourceError(f"Pool stats helper not found: {self.command[0]}") from e
        except subprocess.TimeoutExpired as e:
            raise SourceError(f"Pool stats helper timed out after {self.timeout}s: {cmd}") from e
        except subprocess.CalledProcessError as e:
            raise SourceError(f"Pool stats helper failed with exit status {e.returncode}: {cmd}: "
                              f"{(e.stderr or '').strip()}") from e

        try:
            pools = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise SourceError(f"Pool stats helper printed invalid JSON: {e}") from e
        if not isinstance(pools, dict):
            raise SourceError("Pool stats helper must print a JSON object of pool name to stats")
        LOG.debug(f"Pool stats helper returned {len(pools)} pools")
        return pools

    def begin_pass(self) -> PoolSnapshot:
        return PoolSnapshot(self._run(), "pool stats helper output")

    def list_pools(self) -> Dict[str, Any]:
        return self.begin_pass().list_pools()

    def get_pool_stats(self, pool_name: str) -> Dict[str, Any]:
        return self.begin_pass().get_pool_stats(pool_name)
