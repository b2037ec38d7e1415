#!/usr/bin/env python3
"""
Core models and report schemas for RPC Health.

Everything here is created fresh per evaluation and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple


class Layer(str, Enum):
    EXECUTION = "execution"
    CONSENSUS = "consensus"


class LatencyTier(str, Enum):
    INVALID = "Invalid"
    EXCELLENT = "Excellent"
    GOOD = "Good"
    ACCEPTABLE = "Acceptable"
    SLOW = "Slow"
    VERY_SLOW = "Very Slow"


class BlockTimeTier(str, Enum):
    INVALID = "Invalid"
    EXCELLENT = "Excellent"
    GOOD = "Good"
    SLOW = "Slow"
    VERY_SLOW = "Very Slow"


class RateLimitStatus(str, Enum):
    NONE = "NONE"
    POSSIBLE = "POSSIBLE"
    LIKELY = "LIKELY"
    DETECTED = "DETECTED"


class VerdictTier(str, Enum):
    BEST = "BEST"
    GOOD = "GOOD"
    ACCEPTABLE = "ACCEPTABLE"
    WORST = "WORST"

    @property
    def label(self) -> str:
        if self is VerdictTier.WORST:
            return "NOT SUITABLE"
        return self.value


class BlockStatus(str, Enum):
    FRESH = "FRESH"
    STALE = "STALE"
    CONSENSUS_FAILED = "CONSENSUS_FAILED"


@dataclass(frozen=True)
class Sample:
    """One probe measurement. A missing status means the transport failed."""
    elapsed_seconds: float
    http_status: Optional[int] = None
    rpc_error_code: Optional[int] = None

    def __post_init__(self):
        if self.elapsed_seconds < 0:
            object.__setattr__(self, "elapsed_seconds", 0.0)

    @property
    def succeeded(self) -> bool:
        return self.http_status == 200


# Ordered by request time; empty is allowed.
SampleSet = Tuple[Sample, ...]


def sample_set(samples: Sequence[Sample]) -> SampleSet:
    return tuple(samples)


@dataclass(frozen=True)
class RateLimitVerdict:
    status: RateLimitStatus
    details: str
    failure_rate: float = 0.0
    average_seconds: float = 0.0
    sample_count: int = 0

    @property
    def detected(self) -> bool:
        return self.status is RateLimitStatus.DETECTED


@dataclass(frozen=True)
class ConsensusStatus:
    beacon_finality_working: bool
    beacon_head_working: bool

    @property
    def functional(self) -> bool:
        return self.beacon_finality_working and self.beacon_head_working


@dataclass(frozen=True)
class BlockObservation:
    block_number: Optional[int]
    timestamp_unix: Optional[int]
    age_seconds: Optional[int] = None

    @classmethod
    def observed(cls, block_number: int, timestamp_unix: int, now: int) -> "BlockObservation":
        return cls(block_number, timestamp_unix, int(now) - int(timestamp_unix))

    @classmethod
    def missing(cls) -> "BlockObservation":
        return cls(None, None, None)

    @property
    def valid(self) -> bool:
        return self.age_seconds is not None


@dataclass(frozen=True)
class VerdictInputs:
    block_age_seconds: Optional[int]
    consensus_status: ConsensusStatus
    l1_rate_limit: RateLimitStatus
    consensus_rate_limit: RateLimitStatus
    avg_l1_latency_seconds: float
    avg_consensus_latency_seconds: float
    avg_block_time_seconds: float = 0.0
    l1_rate_limit_details: str = ""
    consensus_rate_limit_details: str = ""


@dataclass(frozen=True)
class VerdictReport:
    score: int
    tier: VerdictTier
    critical_failure_reason: Optional[str] = None
    points: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "points", MappingProxyType(dict(self.points)))

    @property
    def critical(self) -> bool:
        return self.critical_failure_reason is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "tier": self.tier.value,
            "critical_failure_reason": self.critical_failure_reason,
            "points": dict(self.points),
        }


@dataclass(frozen=True)
class ChainMetadata:
    """Informational node facts shown alongside the verdict; never scored."""
    chain_id: Optional[int] = None
    client_version: Optional[str] = None
    finalized_block: Optional[int] = None
    syncing: Optional[bool] = None
    consensus_client: Optional[str] = None
    peer_count: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
