#!/usr/bin/env python3

# -----------------------------------------------------------------------------
# Copyright (c) 2025 ZFS Pool Exporter
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

"""
Entry point for the ZFS pool exporter.

Exports ZFS pool and vdev statistics as Prometheus metrics. Metrics may be
reported for just pools, for pools and top level vdevs, or for pools, vdevs
and disks.

The application is laid out as:
- source: fetch raw pool stats (JSON replay directory or helper command)
- models: decode raw pool stats into typed records
- collectors: map records onto metric descriptors
- writer: build prometheus_client metric families for each scrape
"""

import argparse
import logging
import os
import sys
import time

from prometheus_client import CollectorRegistry, PlatformCollector, ProcessCollector, generate_latest, start_http_server

from zpool_exporter.collectors.pool_collector import ZpoolCollector
from zpool_exporter.config import Settings
from zpool_exporter.registry import build_registry
from zpool_exporter.source import CommandPoolSource, JsonPoolSource

FORMAT = '%(asctime)s - %(levelname)s - %(funcName)s - %(lineno)d - %(message)s'
DATEFMT = '%Y-%m-%dT%H:%M:%SZ'


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Export ZFS pool and vdev statistics as Prometheus metrics")
    parser.add_argument('--config', type=str, default=None,
        help='Path to YAML config file. Overrides environment variables; CLI flags override it.')
    parser.add_argument('--listenAddress', type=str, default=None,
        help='Address the exporter should listen on. Default: 0.0.0.0')
    parser.add_argument('--port', type=int, default=None,
        help='Port for the Prometheus metrics server. Default: 9700')
    parser.add_argument('--depth', type=int, default=None,
        help='Depth of the vdev tree to report on. 0 is the pool, 1 is top level vdevs, 2 is devices too. Default: 1')
    parser.add_argument('--fullPath', action='store_true', default=None,
        help='Report the full path of disks instead of the last path component.')
    parser.add_argument('--fromJson', type=str, default=None,
        help='Directory of captured pool stats JSON files to serve instead of live data.')
    parser.add_argument('--sourceCommand', type=str, default=None,
        help='Helper command that prints a JSON object of pool name to pool stats.')
    parser.add_argument('--sourceTimeout', type=float, default=None,
        help='Seconds to wait for --sourceCommand. Default: wait forever.')
    parser.add_argument('--logfile', type=str, default=None,
        help='Path to log file. If not provided, logs to console only.')
    parser.add_argument('--loglevel', type=str, choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'], default=None,
        help='Log level for both console and file output. Default: INFO')
    parser.add_argument('--dump', action='store_true', default=False,
        help='Collect once, print the metrics in text exposition format and exit.')
    return parser


def configure_logging(log_level: int, logfile: str = None) -> None:
    if logfile:
        logfile_dir = os.path.dirname(logfile) if os.path.dirname(logfile) else '.'
        if os.path.exists(logfile_dir) and os.access(logfile_dir, os.W_OK):
            try:
                logging.basicConfig(filename=logfile, level=log_level, format=FORMAT, datefmt=DATEFMT)
                logging.info('Logging to file: ' + logfile)
                return
            except OSError as e:
                logging.basicConfig(level=log_level, format=FORMAT, datefmt=DATEFMT)
                logging.error(f'Failed to configure file logging to {logfile}: {e}')
        else:
            logging.basicConfig(level=log_level, format=FORMAT, datefmt=DATEFMT)
            logging.error(f'Logfile directory {logfile_dir} does not exist or is not writable')
        logging.warning('Falling back to console logging only')
    else:
        logging.basicConfig(level=log_level, format=FORMAT, datefmt=DATEFMT)


def apply_cli_overrides(settings: Settings, cmd: argparse.Namespace) -> Settings:
    """Copy every flag given on the command line over the loaded settings."""
    overrides = {
        'listen_address': cmd.listenAddress,
        'port': cmd.port,
        'depth': cmd.depth,
        'full_path': cmd.fullPath,
        'from_json': cmd.fromJson,
        'source_command': cmd.sourceCommand,
        'source_timeout': cmd.sourceTimeout,
        'log_level': cmd.loglevel,
        'log_file': cmd.logfile,
    }
    for key, value in overrides.items():
        if value is not None:
            setattr(settings, key, value)
    return settings


def create_source(settings: Settings):
    if settings.from_json:
        return JsonPoolSource(settings.from_json)
    return CommandPoolSource(settings.source_command, timeout=settings.source_timeout)


def _exit_dump(exc: BaseException) -> None:
    sys.exit(1)


def main(argv=None):
    CMD = build_parser().parse_args(argv)

    try:
        settings = apply_cli_overrides(Settings(config_file=CMD.config), CMD)
    except (ValueError, TypeError) as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)

    log_level = getattr(logging, str(settings.log_level).upper(), None)
    if not isinstance(log_level, int):
        print(f"Error: unknown log level {settings.log_level}", file=sys.stderr)
        sys.exit(1)
    configure_logging(log_level, settings.log_file)
    LOG = logging.getLogger(__name__)

    # Validate arguments
    if settings.depth < 0:
        LOG.error("--depth must be a non-negative integer.")
        sys.exit(1)
    if settings.from_json and settings.source_command:
        LOG.error("Use either --fromJson or --sourceCommand, not both.")
        sys.exit(1)
    if not settings.from_json and not settings.source_command:
        LOG.error("No pool data source configured: set --fromJson or --sourceCommand.")
        sys.exit(1)

    source = create_source(settings)
    stat_registry = build_registry()

    if CMD.dump:
        collector = ZpoolCollector(source, stat_registry, settings.depth, settings.full_path, on_fatal=_exit_dump)
        dump_registry = CollectorRegistry()
        dump_registry.register(collector)
        sys.stdout.write(generate_latest(dump_registry).decode('utf-8'))
        return

    collector = ZpoolCollector(source, stat_registry, settings.depth, settings.full_path)
    prometheus_registry = CollectorRegistry()
    ProcessCollector(registry=prometheus_registry)
    PlatformCollector(registry=prometheus_registry)
    prometheus_registry.register(collector)

    try:
        start_http_server(settings.port, addr=settings.listen_address, registry=prometheus_registry)
    except OSError as e:
        LOG.error(f"Failed to listen on {settings.listen_address}:{settings.port}: {e}")
        sys.exit(1)
    LOG.info(f"Serving ZFS metrics on {settings.listen_address}:{settings.port} (depth {settings.depth})")

    try:
        while True:
            time.sleep(3600)
    except KeyboardInterrupt:
        LOG.info("Interrupted by user. Exiting gracefully.")


if __name__ == "__main__":
    main()
