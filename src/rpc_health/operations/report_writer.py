#!/usr/bin/env python3
"""
Report Writer Module
Renders an assessment as the flat key/value report and saves it to disk.
"""

import os
import time
import logging
from typing import List, Optional

from rpc_health.config import APP_NAME, APP_VERSION, ERROR_MESSAGES, STATUS_MESSAGES
from rpc_health.core.models import LatencyTier, VerdictTier
from rpc_health.engine import HealthAssessment

logger = logging.getLogger(__name__)

TIER_ICONS = {
    VerdictTier.BEST: STATUS_MESSAGES['best'],
    VerdictTier.GOOD: STATUS_MESSAGES['good'],
    VerdictTier.ACCEPTABLE: STATUS_MESSAGES['acceptable'],
    VerdictTier.WORST: STATUS_MESSAGES['worst'],
}


def _latency_line(seconds: float, tier: LatencyTier) -> str:
    if tier is LatencyTier.INVALID:
        return "unavailable"
    return f"{seconds:.4f}s ({seconds * 1000:.1f}ms) {tier.value}"


def _optional(value, default: str = "unknown") -> str:
    return default if value is None else str(value)


def render_report(assessment: HealthAssessment, *, generated_at: Optional[float] = None) -> str:
    """Render the flat `key: value` report for one assessment."""
    report = assessment.report
    meta = assessment.metadata
    block = assessment.latest_block
    stamp = time.strftime('%Y-%m-%d %H:%M:%S', time.localtime(generated_at or time.time()))

    lines: List[str] = [
        f"# {APP_NAME} v{APP_VERSION} report",
        f"generated: {stamp}",
        f"profile: {assessment.profile_key}",
        f"score: {report.score}/100",
        f"verdict: {TIER_ICONS[report.tier]} {report.tier.label}",
        f"critical_failure: {report.critical_failure_reason or 'none'}",
        "",
        "[basic]",
        f"chain_id: {_optional(meta.chain_id)}",
        f"client: {_optional(meta.client_version)}",
        f"latest_block: {_optional(block.block_number)}",
        f"block_age: {_optional(block.age_seconds)}s",
        f"block_status: {assessment.block_status.value}",
        f"finalized_block: {_optional(meta.finalized_block, 'not supported')}",
        "",
        "[performance]",
        f"l1_latency: {_latency_line(assessment.l1_latency_seconds, assessment.l1_latency_tier)}",
        f"consensus_latency: {_latency_line(assessment.consensus_latency_seconds, assessment.consensus_latency_tier)}",
    ]

    if assessment.block_time_seconds > 0:
        lines.append(
            f"block_time: {assessment.block_time_seconds:.2f}s/block {assessment.block_time_tier.value}"
        )
    else:
        lines.append("block_time: unable to calculate")

    lines += [
        "",
        "[rate_limiting]",
        f"l1: {assessment.l1_rate_limit.status.value}",
        f"l1_details: {assessment.l1_rate_limit.details}",
        f"consensus: {assessment.consensus_rate_limit.status.value}",
        f"consensus_details: {assessment.consensus_rate_limit.details}",
        "",
        "[consensus]",
        f"functional: {'yes' if assessment.consensus.functional else 'no'}",
        f"finalized_slot: {assessment.finalized_slot or 'none'}",
        f"head_slot: {assessment.head_slot or 'none'}",
        f"syncing: {_optional(meta.syncing)}",
        f"client: {_optional(meta.consensus_client)}",
        f"peers: {_optional(meta.peer_count)}",
    ]

    if report.points:
        lines += ["", "[points]"]
        lines += [f"{name}: {value}" for name, value in report.points.items()]

    return "\n".join(lines) + "\n"


class ReportWriter:
    """Saves flat reports, never raising on filesystem errors."""

    def save(self, assessment: HealthAssessment, output_file: str) -> bool:
        """Write the flat report to output_file. Returns False if it could not be written."""
        if not output_file:
            return False

        text = render_report(assessment)
        try:
            os.makedirs(os.path.dirname(output_file) or '.', exist_ok=True)
            with open(output_file, 'w', encoding='utf-8') as f:
                f.write(text)
            logger.info(f"Report saved to {output_file}")
            return True
        except OSError as e:
            logger.error(ERROR_MESSAGES['report_write_failed'].format(file=output_file, error=e))
            return False
