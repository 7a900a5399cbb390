# -----------------------------------------------------------------------------
# Copyright (c) 2025 ZFS Pool Exporter
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

"""
Exception hierarchy for the ZFS pool exporter.

Every error raised here is fatal for the scrape that hit it: the collector
never reports a partial metrics document.
"""


class ZpoolExporterError(Exception):
    """Base class for all exporter errors."""


class SourceError(ZpoolExporterError):
    """The pool data source could not list pools or return pool statistics."""


class StatsDecodeError(ZpoolExporterError):
    """A pool record or vdev node did not have the expected shape."""


class ExtendedStatShapeError(StatsDecodeError):
    """
    An extended statistic held something other than an unsigned integer or a
    sequence of unsigned integers.
    """

    def __init__(self, name: str, value):
        self.name = name
        self.value = value
        super().__init__(f"invalid type encountered for extended stat {name}: {type(value).__name__}")
