#!/usr/bin/env python3
"""
Latency and block cadence classification.

Band edges are compared in decimal arithmetic so that values sitting exactly
on a boundary (0.025s, 12.0 * 0.8 = 9.6s) land in the documented band.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Iterable

from rpc_health.config import (
    LATENCY_BANDS_MS,
    EXPECTED_BLOCK_TIME,
    BLOCK_TIME_FAST_RATIO,
    BLOCK_TIME_GOOD_RATIO,
    BLOCK_TIME_SLOW_RATIO,
)
from rpc_health.core.models import BlockTimeTier, LatencyTier


def _dec(value: float) -> Decimal:
    return Decimal(str(value))


def calculate_average(values: Iterable[float]) -> float:
    """Average of the given values; 0.0 for an empty input."""
    items = [float(v) for v in values]
    if not items:
        return 0.0
    return sum(items) / len(items)


def classify_latency(seconds: float) -> LatencyTier:
    """Classify an average response time.

    Zero means no measurement was taken, not an instant response.
    """
    if seconds == 0 or not math.isfinite(seconds):
        return LatencyTier.INVALID

    latency_ms = _dec(seconds) * 1000
    if latency_ms < LATENCY_BANDS_MS['excellent']:
        return LatencyTier.EXCELLENT
    if latency_ms < LATENCY_BANDS_MS['good']:
        return LatencyTier.GOOD
    if latency_ms < LATENCY_BANDS_MS['acceptable']:
        return LatencyTier.ACCEPTABLE
    if latency_ms < LATENCY_BANDS_MS['slow']:
        return LatencyTier.SLOW
    return LatencyTier.VERY_SLOW


def classify_block_time(seconds: float, expected: float = EXPECTED_BLOCK_TIME) -> BlockTimeTier:
    """Classify block production cadence relative to the chain's target block time."""
    if seconds == 0 or not math.isfinite(seconds):
        return BlockTimeTier.INVALID

    value = _dec(seconds)
    target = _dec(expected)
    if value < target * _dec(BLOCK_TIME_FAST_RATIO):
        return BlockTimeTier.EXCELLENT
    if value <= target * _dec(BLOCK_TIME_GOOD_RATIO):
        return BlockTimeTier.GOOD
    if value <= target * _dec(BLOCK_TIME_SLOW_RATIO):
        return BlockTimeTier.SLOW
    return BlockTimeTier.VERY_SLOW
