# -----------------------------------------------------------------------------
# Copyright (c) 2025 ZFS Pool Exporter
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

"""
Reconstruction of Prometheus histograms from ZFS power-of-two bucket arrays.

ZFS exports only per-bucket counts, never the sum of observed values. The sum
reported here is the same approximation 'zpool iostat' uses: every
observation in bucket i is assumed to sit at 1.5 * 2**i.
"""

import math
from typing import Dict, NamedTuple, Sequence

# Latency histograms have 37 buckets of nanoseconds; everything else
# (request sizes, queue depths) is unitless.
LATENCY_BUCKETS = 37
NANOSECONDS_PER_SECOND = 1_000_000_000


class HistogramSnapshot(NamedTuple):
    buckets: Dict[float, int]
    count: int
    sum: float


def decode_histogram(histo: Sequence[int]) -> HistogramSnapshot:
    """
    Convert raw bucket counts to cumulative Prometheus buckets.

    Args:
        histo: Count per power-of-two bucket; bucket i has upper bound 2**i

    Returns:
        HistogramSnapshot: Cumulative count per upper bound (in seconds for
        latency histograms), total count and approximate sum
    """
    divisor = NANOSECONDS_PER_SECOND if len(histo) == LATENCY_BUCKETS else 1.0

    buckets = {}
    count = 0
    acc = 0.0
    for i, value in enumerate(histo):
        count += value
        buckets[math.ldexp(1.0, i) / divisor] = count
        midpoint = math.ldexp(1.5, i)
        acc += value * midpoint

    return HistogramSnapshot(buckets, count, acc / divisor)
