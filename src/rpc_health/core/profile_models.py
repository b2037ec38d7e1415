#!/usr/bin/env python3
"""
Profile models for chain-specific scoring settings.

These dataclasses define a minimal, dependency-free schema for authoring
JSON/YAML descriptors that describe a chain's block cadence and the block
age limits used when judging freshness.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from rpc_health.config import (
    EXPECTED_BLOCK_TIME,
    BLOCK_TIME_SPAN,
    STALE_BLOCK_AGE,
    CRITICAL_BLOCK_AGE,
)
from rpc_health.core.verdict import ScoringPolicy


@dataclass
class ChainProfile:
    schema_version: int
    profile_key: str
    display_name: str
    description: str = ""
    chain_ids: List[int] = field(default_factory=list)
    expected_block_time: float = EXPECTED_BLOCK_TIME  # seconds
    block_span: int = BLOCK_TIME_SPAN  # blocks between cadence samples
    stale_after: int = STALE_BLOCK_AGE
    critical_block_age: Optional[int] = CRITICAL_BLOCK_AGE
    aliases: List[str] = field(default_factory=list)

    def scoring_policy(self, critical_block_age: Optional[int] = None) -> ScoringPolicy:
        """ScoringPolicy for this chain; an explicit critical age overrides the profile's."""
        return ScoringPolicy(
            critical_block_age=critical_block_age if critical_block_age is not None else self.critical_block_age,
            stale_block_age=self.stale_after,
            expected_block_time=self.expected_block_time,
        )


def _coerce_optional_int(value) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


def from_dict(data: dict) -> ChainProfile:
    """Create a ChainProfile from a dict with minimal validation."""
    schema_version = int(data.get("schema_version", 1))
    profile_key = str(data["profile_key"]).strip()
    display_name = str(data.get("display_name", profile_key)).strip()
    desc = str(data.get("description", "")).strip()
    chain_ids = [int(c, 0) if isinstance(c, str) else int(c) for c in data.get("chain_ids", [])]
    expected = float(data.get("expected_block_time", EXPECTED_BLOCK_TIME))
    if expected <= 0:
        raise ValueError(f"expected_block_time must be positive, got {expected}")
    block_span = int(data.get("block_span", BLOCK_TIME_SPAN))
    stale_after = int(data.get("stale_after", STALE_BLOCK_AGE))
    critical = _coerce_optional_int(data.get("critical_block_age", CRITICAL_BLOCK_AGE))
    aliases = [str(a) for a in data.get("aliases", []) if a]

    return ChainProfile(
        schema_version=schema_version,
        profile_key=profile_key,
        display_name=display_name,
        description=desc,
        chain_ids=chain_ids,
        expected_block_time=expected,
        block_span=max(block_span, 1),
        stale_after=stale_after,
        critical_block_age=critical,
        aliases=aliases,
    )
