#!/usr/bin/env python3
"""
Verdict calculation.

The calculator is a short-circuiting decision sequence: four hard overrides
are checked in a fixed order, and only when none fires is a weighted score
accumulated. It is evaluated exactly once per report.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from rpc_health.config import (
    CRITICAL_BLOCK_AGE,
    STALE_BLOCK_AGE,
    FRESH_BLOCK_AGE,
    STALE_PENALTY,
    EXPECTED_BLOCK_TIME,
    L1_LATENCY_POINTS,
    CONSENSUS_LATENCY_POINTS,
    BLOCK_TIME_POINTS,
    L1_RATE_LIMIT_POINTS,
    CONSENSUS_RATE_LIMIT_POINTS,
    FRESHNESS_POINTS,
    TIER_THRESHOLDS,
    CRITICAL_REASONS,
)
from rpc_health.core.classifiers import classify_block_time, classify_latency
from rpc_health.core.models import (
    BlockStatus,
    BlockTimeTier,
    ConsensusStatus,
    LatencyTier,
    RateLimitStatus,
    VerdictInputs,
    VerdictReport,
    VerdictTier,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoringPolicy:
    """Thresholds that gate the verdict. Defaults match the node standard."""
    critical_block_age: Optional[int] = CRITICAL_BLOCK_AGE  # None disables the gate
    stale_block_age: int = STALE_BLOCK_AGE
    fresh_block_age: int = FRESH_BLOCK_AGE
    stale_penalty: int = STALE_PENALTY
    expected_block_time: float = EXPECTED_BLOCK_TIME


DEFAULT_POLICY = ScoringPolicy()


def _latency_points(tier: LatencyTier, table: Dict[str, int]) -> int:
    if tier is LatencyTier.INVALID:
        return 0
    return table[tier.name.lower()]


def _block_time_points(seconds: float, expected: float) -> int:
    if not seconds or seconds <= 0:
        return 0
    tier = classify_block_time(seconds, expected)
    if tier is BlockTimeTier.INVALID:
        return 0
    return BLOCK_TIME_POINTS[tier.name.lower()]


def _rate_limit_points(status: RateLimitStatus, table: Dict[str, int]) -> int:
    return table[status.name.lower()]


def apply_freshness(score: int, age: int, policy: ScoringPolicy = DEFAULT_POLICY) -> int:
    """Stale penalty then freshness bonus, as one step.

    The penalty is floored at zero before the bonus is added, so a stale
    node always keeps the +1 for having served a block at all.
    """
    if age > policy.stale_block_age:
        logger.warning(f"L1 block age {age}s is stale; applying -{policy.stale_penalty}")
        score = max(score - policy.stale_penalty, 0)

    if age <= policy.fresh_block_age:
        return score + FRESHNESS_POINTS['fresh']
    if age <= policy.stale_block_age:
        return score + FRESHNESS_POINTS['recent']
    return score + FRESHNESS_POINTS['old']


def tier_for_score(score: int) -> VerdictTier:
    if score >= TIER_THRESHOLDS['best']:
        return VerdictTier.BEST
    if score >= TIER_THRESHOLDS['good']:
        return VerdictTier.GOOD
    if score >= TIER_THRESHOLDS['acceptable']:
        return VerdictTier.ACCEPTABLE
    return VerdictTier.WORST


def _critical_reason(inputs: VerdictInputs, policy: ScoringPolicy) -> Optional[str]:
    age = inputs.block_age_seconds
    if policy.critical_block_age is not None and (age is None or age > policy.critical_block_age):
        return CRITICAL_REASONS['block_age']
    if not inputs.consensus_status.functional:
        return CRITICAL_REASONS['consensus']
    if inputs.l1_rate_limit is RateLimitStatus.DETECTED and inputs.avg_l1_latency_seconds == 0:
        return CRITICAL_REASONS['l1_failed']
    if inputs.consensus_rate_limit is RateLimitStatus.DETECTED and inputs.avg_consensus_latency_seconds == 0:
        return CRITICAL_REASONS['consensus_failed']
    return None


def calculate_verdict(inputs: VerdictInputs, policy: ScoringPolicy = DEFAULT_POLICY) -> VerdictReport:
    """Turn aggregated measurements into a score and verdict tier.

    A critical failure short-circuits to score 0 and WORST. Otherwise the
    weighted points (L1 latency 35, consensus latency 20, cadence 20,
    L1 rate limiting 12, consensus rate limiting 7) are summed, the
    freshness adjustment is applied, and the result is clamped to 0..100.
    """
    reason = _critical_reason(inputs, policy)
    if reason is not None:
        logger.warning(f"CRITICAL: {reason}; node automatically fails")
        return VerdictReport(score=0, tier=VerdictTier.WORST, critical_failure_reason=reason)

    points = {
        'l1_latency': _latency_points(classify_latency(inputs.avg_l1_latency_seconds), L1_LATENCY_POINTS),
        'consensus_latency': _latency_points(
            classify_latency(inputs.avg_consensus_latency_seconds), CONSENSUS_LATENCY_POINTS
        ),
        'block_time': _block_time_points(inputs.avg_block_time_seconds, policy.expected_block_time),
        'l1_rate_limit': _rate_limit_points(inputs.l1_rate_limit, L1_RATE_LIMIT_POINTS),
        'consensus_rate_limit': _rate_limit_points(inputs.consensus_rate_limit, CONSENSUS_RATE_LIMIT_POINTS),
    }
    subtotal = sum(points.values())

    # Age is None only when the critical gate is disabled; treat it as maximally stale.
    age = inputs.block_age_seconds
    if age is None:
        age = policy.stale_block_age + 1
    adjusted = apply_freshness(subtotal, age, policy)
    points['freshness'] = adjusted - subtotal

    score = min(max(adjusted, 0), 100)
    tier = tier_for_score(score)
    logger.debug(f"Verdict points: {points} -> {score} ({tier.value})")
    return VerdictReport(score=score, tier=tier, points=points)


def block_status(age: Optional[int], consensus: ConsensusStatus,
                 policy: ScoringPolicy = DEFAULT_POLICY) -> BlockStatus:
    """Freshness label for the latest block, taking consensus health into account."""
    if not consensus.functional:
        return BlockStatus.CONSENSUS_FAILED
    if age is None or age > policy.stale_block_age:
        return BlockStatus.STALE
    return BlockStatus.FRESH
