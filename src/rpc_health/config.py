#!/usr/bin/env python3
"""
RPC Health Configuration Module
"""

# Application Information
APP_NAME = "RPC Health"
APP_VERSION = "3.2.0"
APP_DESCRIPTION = "Score execution and consensus RPC endpoints for node operation"

# Default Settings
DEFAULT_PROFILE = "ethereum"

# Blocks between the two cadence observations
BLOCK_TIME_SPAN = 10

# Latency bands in milliseconds, first match wins
LATENCY_BANDS_MS = {
    'excellent': 25,
    'good': 50,
    'acceptable': 200,
    'slow': 500,
}

# Block cadence deviation bands around the expected block time
EXPECTED_BLOCK_TIME = 12.0
BLOCK_TIME_FAST_RATIO = 0.8
BLOCK_TIME_GOOD_RATIO = 1.2
BLOCK_TIME_SLOW_RATIO = 1.5

# Rate limiting
RATE_LIMIT_HTTP_STATUSES = frozenset({429, 503, 402, 403})
RATE_LIMIT_RPC_ERROR_CODES = frozenset({-32029, -33000, -33200, -32005})
RATE_LIMIT_BEACON_ERROR_CODES = frozenset({429, 503})
FAILURE_RATE_THRESHOLD = 0.20
SLOW_AVERAGE_SECONDS = 3.0

# Block age thresholds (seconds)
CRITICAL_BLOCK_AGE = 20
STALE_BLOCK_AGE = 30
FRESH_BLOCK_AGE = 15
STALE_PENALTY = 30

# Points awarded per classification
L1_LATENCY_POINTS = {
    'excellent': 35,
    'good': 30,
    'acceptable': 20,
    'slow': 10,
    'very_slow': 5,
}
CONSENSUS_LATENCY_POINTS = {
    'excellent': 20,
    'good': 15,
    'acceptable': 10,
    'slow': 5,
    'very_slow': 5,
}
BLOCK_TIME_POINTS = {
    'excellent': 20,
    'good': 15,
    'slow': 10,
    'very_slow': 5,
}
L1_RATE_LIMIT_POINTS = {
    'none': 12,
    'possible': 8,
    'likely': 4,
    'detected': 0,
}
CONSENSUS_RATE_LIMIT_POINTS = {
    'none': 7,
    'possible': 5,
    'likely': 2,
    'detected': 0,
}
FRESHNESS_POINTS = {
    'fresh': 5,
    'recent': 3,
    'old': 1,
}

# Verdict tier cut-offs (inclusive lower bounds)
TIER_THRESHOLDS = {
    'best': 90,
    'good': 75,
    'acceptable': 60,
}

# Critical failure reasons
CRITICAL_REASONS = {
    'block_age': "block production exceeded 20s",
    'consensus': "consensus layer failed",
    'l1_failed': "L1 RPC completely failed",
    'consensus_failed': "consensus RPC completely failed",
}

# Status messages
STATUS_MESSAGES = {
    'best': '🥇',
    'good': '🥈',
    'acceptable': '🥉',
    'worst': '❌',
}

# Error messages
ERROR_MESSAGES = {
    'measurement_not_found': "❌ Measurement file not found: {file}",
    'measurement_invalid': "❌ Invalid measurement file {file}: {error}",
    'unknown_profile': "❌ Unknown chain profile '{profile}'. Available: {available}",
    'yaml_unavailable': "⚠️  PyYAML is not installed; cannot read {file}",
    'report_write_failed': "❌ Could not write report to {file}: {error}",
    'interrupted': "⚠️  Operation interrupted by user.",
}

