#!/usr/bin/env python3
"""
Rate Limit Detector Module
Heuristic throttling classification for one endpoint's burst of probes.
"""

import logging
from typing import Iterable, List

from rpc_health.config import (
    RATE_LIMIT_HTTP_STATUSES,
    RATE_LIMIT_RPC_ERROR_CODES,
    RATE_LIMIT_BEACON_ERROR_CODES,
    FAILURE_RATE_THRESHOLD,
    SLOW_AVERAGE_SECONDS,
)
from rpc_health.core.classifiers import calculate_average
from rpc_health.core.models import Layer, RateLimitStatus, RateLimitVerdict, Sample, SampleSet

logger = logging.getLogger(__name__)


def _throttling_error_codes(layer: Layer) -> frozenset:
    if layer is Layer.CONSENSUS:
        return RATE_LIMIT_BEACON_ERROR_CODES
    return RATE_LIMIT_RPC_ERROR_CODES


def _format_status(status) -> str:
    # curl reports a failed transport as 000
    return "000" if status is None else str(status)


def failure_rate(samples: SampleSet) -> float:
    """Fraction of samples without an HTTP 200; 0.0 for an empty set."""
    if not samples:
        return 0.0
    failed = sum(1 for s in samples if not s.succeeded)
    return failed / len(samples)


def detect_rate_limit(samples: Iterable[Sample], layer: Layer = Layer.EXECUTION) -> RateLimitVerdict:
    """Classify a burst of probes against one endpoint.

    Rules are evaluated in priority order and the first match wins:
    explicit throttling signals (DETECTED), a failure rate above 20%
    (LIKELY), an average response time above 3s (POSSIBLE), else NONE.
    """
    samples = tuple(samples)
    count = len(samples)
    avg_time = calculate_average(s.elapsed_seconds for s in samples)
    rate = failure_rate(samples)

    if not samples:
        logger.debug(f"{layer.value}: no samples to classify")
        return RateLimitVerdict(RateLimitStatus.NONE, "No samples collected")

    error_codes = _throttling_error_codes(layer)
    throttled_status = any(s.http_status in RATE_LIMIT_HTTP_STATUSES for s in samples)
    json_errors: List[int] = [
        s.rpc_error_code for s in samples
        if s.rpc_error_code is not None and s.rpc_error_code in error_codes
    ]

    if throttled_status or json_errors:
        details = "HTTP codes: " + " ".join(_format_status(s.http_status) for s in samples)
        if json_errors:
            details += ", JSON errors: " + " ".join(str(c) for c in json_errors)
        status = RateLimitStatus.DETECTED
    elif rate > FAILURE_RATE_THRESHOLD:
        details = f"High failure rate: {rate * 100:.2f}%"
        status = RateLimitStatus.LIKELY
    elif avg_time > SLOW_AVERAGE_SECONDS:
        details = f"Slow average response time: {avg_time:.4f}s"
        status = RateLimitStatus.POSSIBLE
    else:
        details = "All tests passed"
        status = RateLimitStatus.NONE

    logger.info(
        f"{layer.value} rate limiting: {status.value} "
        f"(avg {avg_time:.4f}s, failure rate {rate * 100:.2f}%, {count} samples)"
    )
    return RateLimitVerdict(
        status=status,
        details=details,
        failure_rate=rate,
        average_seconds=avg_time,
        sample_count=count,
    )
