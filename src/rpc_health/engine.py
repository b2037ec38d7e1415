#!/usr/bin/env python3
"""
Health Engine Module
Main engine class that runs every classifier over one run's measurements.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from rpc_health.config import DEFAULT_PROFILE
from rpc_health.core.classifiers import calculate_average, classify_block_time, classify_latency
from rpc_health.core.consensus import normalize_slot, validate_consensus
from rpc_health.core.models import (
    BlockObservation,
    BlockStatus,
    BlockTimeTier,
    ChainMetadata,
    ConsensusStatus,
    LatencyTier,
    Layer,
    RateLimitVerdict,
    SampleSet,
    VerdictInputs,
    VerdictReport,
)
from rpc_health.core.profile_models import ChainProfile
from rpc_health.core.rate_limit import detect_rate_limit
from rpc_health.core.verdict import ScoringPolicy, block_status, calculate_verdict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MeasurementBundle:
    """Everything the collector sampled during one run."""
    l1_rate_limit_samples: SampleSet = ()
    consensus_rate_limit_samples: SampleSet = ()
    l1_latency_samples: Tuple[float, ...] = ()
    consensus_latency_samples: Tuple[float, ...] = ()
    block_times: Tuple[float, ...] = ()
    latest_block: BlockObservation = field(default_factory=BlockObservation.missing)
    finalized_slot: Optional[str] = None
    head_slot: Optional[str] = None
    metadata: ChainMetadata = field(default_factory=ChainMetadata)


@dataclass(frozen=True)
class HealthAssessment:
    """The verdict plus every per-metric classification needed to render a breakdown."""
    report: VerdictReport
    profile_key: str
    l1_latency_seconds: float
    consensus_latency_seconds: float
    block_time_seconds: float
    l1_latency_tier: LatencyTier
    consensus_latency_tier: LatencyTier
    block_time_tier: BlockTimeTier
    l1_rate_limit: RateLimitVerdict
    consensus_rate_limit: RateLimitVerdict
    consensus: ConsensusStatus
    block_status: BlockStatus
    latest_block: BlockObservation
    finalized_slot: Optional[str] = None
    head_slot: Optional[str] = None
    metadata: ChainMetadata = field(default_factory=ChainMetadata)

    @property
    def score(self) -> int:
        return self.report.score

    @property
    def tier(self):
        return self.report.tier

    def to_dict(self) -> Dict[str, Any]:
        return {
            'profile': self.profile_key,
            'report': self.report.to_dict(),
            'latency': {
                'l1_seconds': self.l1_latency_seconds,
                'l1_tier': self.l1_latency_tier.value,
                'consensus_seconds': self.consensus_latency_seconds,
                'consensus_tier': self.consensus_latency_tier.value,
            },
            'block_time': {
                'seconds': self.block_time_seconds,
                'tier': self.block_time_tier.value,
            },
            'rate_limit': {
                'l1': {'status': self.l1_rate_limit.status.value, 'details': self.l1_rate_limit.details},
                'consensus': {
                    'status': self.consensus_rate_limit.status.value,
                    'details': self.consensus_rate_limit.details,
                },
            },
            'consensus': {
                'finality': self.consensus.beacon_finality_working,
                'head': self.consensus.beacon_head_working,
                'functional': self.consensus.functional,
                'finalized_slot': self.finalized_slot,
                'head_slot': self.head_slot,
            },
            'block': {
                'number': self.latest_block.block_number,
                'age_seconds': self.latest_block.age_seconds,
                'status': self.block_status.value,
            },
            'metadata': self.metadata.to_dict(),
        }


class HealthEngine:
    """Runs the classifiers and the verdict calculator for a chain profile."""

    def __init__(self, profile: Optional[ChainProfile] = None, policy: Optional[ScoringPolicy] = None):
        if profile is None:
            from rpc_health.profiles import get_profile
            profile = get_profile(DEFAULT_PROFILE)
        self.profile = profile
        if policy is None:
            policy = profile.scoring_policy() if profile is not None else ScoringPolicy()
        self.policy = policy

        logger.debug(
            f"Initialized engine for profile {self.profile_key} "
            f"(expected block time {self.policy.expected_block_time}s, "
            f"critical age {self.policy.critical_block_age})"
        )

    @property
    def profile_key(self) -> str:
        return self.profile.profile_key if self.profile is not None else "custom"

    def evaluate(self, bundle: MeasurementBundle) -> HealthAssessment:
        """Score one run's measurements. Never raises for degraded data."""
        consensus = validate_consensus(bundle.finalized_slot, bundle.head_slot)
        l1_limit = detect_rate_limit(bundle.l1_rate_limit_samples, Layer.EXECUTION)
        cons_limit = detect_rate_limit(bundle.consensus_rate_limit_samples, Layer.CONSENSUS)

        avg_l1 = calculate_average(bundle.l1_latency_samples)
        avg_cons = calculate_average(bundle.consensus_latency_samples)
        avg_block = calculate_average(bundle.block_times)
        age = bundle.latest_block.age_seconds

        inputs = VerdictInputs(
            block_age_seconds=age,
            consensus_status=consensus,
            l1_rate_limit=l1_limit.status,
            l1_rate_limit_details=l1_limit.details,
            consensus_rate_limit=cons_limit.status,
            consensus_rate_limit_details=cons_limit.details,
            avg_l1_latency_seconds=avg_l1,
            avg_consensus_latency_seconds=avg_cons,
            avg_block_time_seconds=avg_block,
        )
        report = calculate_verdict(inputs, self.policy)

        assessment = HealthAssessment(
            report=report,
            profile_key=self.profile_key,
            l1_latency_seconds=avg_l1,
            consensus_latency_seconds=avg_cons,
            block_time_seconds=avg_block,
            l1_latency_tier=classify_latency(avg_l1),
            consensus_latency_tier=classify_latency(avg_cons),
            block_time_tier=classify_block_time(avg_block, self.policy.expected_block_time),
            l1_rate_limit=l1_limit,
            consensus_rate_limit=cons_limit,
            consensus=consensus,
            block_status=block_status(age, consensus, self.policy),
            latest_block=bundle.latest_block,
            finalized_slot=normalize_slot(bundle.finalized_slot),
            head_slot=normalize_slot(bundle.head_slot),
            metadata=bundle.metadata,
        )
        logger.info(f"Verdict for {self.profile_key}: {report.score}/100 ({report.tier.label})")
        return assessment
