#!/usr/bin/env python3
"""
Adapters to map already-fetched JSON-RPC and beacon API payloads to engine models.

The collector owns the transport. It hands over status codes, elapsed times and
decoded bodies; nothing here performs I/O or raises on malformed payloads.
"""

from __future__ import annotations

import math
import re
from typing import Any, Dict, Optional

from rpc_health.core.models import BlockObservation, Layer, Sample

_HEX_QUANTITY = re.compile(r"^0x[0-9a-fA-F]+$")


def parse_hex_quantity(value: Any) -> Optional[int]:
    """Decode a JSON-RPC hex quantity ("0x1a" -> 26). Plain ints pass through."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if not isinstance(value, str) or not _HEX_QUANTITY.match(value.strip()):
        return None
    return int(value.strip(), 16)


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.lstrip("-").isdigit():
            return int(text)
        return parse_hex_quantity(text)
    return None


def parse_error_code(value: Any) -> Optional[int]:
    """Integer error code from a decimal or hex value; None when it is not numeric."""
    return _as_int(value)


def _dig(payload: Any, *path: str) -> Any:
    node = payload
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def rpc_error_code(body: Any) -> Optional[int]:
    """error.code from a JSON-RPC response body."""
    return _as_int(_dig(body, "error", "code"))


def beacon_error_code(body: Any) -> Optional[int]:
    """Top-level code from a beacon API error body, e.g. {"code": 429, "message": ...}."""
    return _as_int(_dig(body, "code"))


def to_sample(http_status: Any, elapsed_seconds: Any, body: Any = None,
              layer: Layer = Layer.EXECUTION) -> Sample:
    """Build a Sample from one probe's raw outcome.

    A missing or zero status ("000" from curl) is a transport failure and is
    recorded as an undefined status.
    """
    status = _as_int(http_status)
    if status == 0:
        status = None
    try:
        elapsed = max(float(elapsed_seconds or 0), 0.0)
    except (TypeError, ValueError):
        elapsed = 0.0
    if not math.isfinite(elapsed):
        elapsed = 0.0
    if layer is Layer.CONSENSUS:
        code = beacon_error_code(body)
    else:
        code = rpc_error_code(body)
    return Sample(elapsed_seconds=elapsed, http_status=status, rpc_error_code=code)


def _result(payload: Any) -> Any:
    # Accept either the full JSON-RPC envelope or just its result
    if isinstance(payload, dict) and "result" in payload:
        return payload.get("result")
    return payload


def block_observation(payload: Any, now: int) -> BlockObservation:
    """BlockObservation from an eth_getBlockByNumber response; age is None when the block is unusable."""
    block = _result(payload)
    number = _as_int(_dig(block, "number"))
    timestamp = _as_int(_dig(block, "timestamp"))
    if number is None or timestamp is None:
        return BlockObservation.missing()
    return BlockObservation.observed(number, timestamp, now)


def average_block_time(current: BlockObservation, previous: BlockObservation) -> Optional[float]:
    """Seconds per block between two observations, or None if not measurable."""
    if None in (current.block_number, current.timestamp_unix,
                previous.block_number, previous.timestamp_unix):
        return None
    span = current.block_number - previous.block_number
    elapsed = current.timestamp_unix - previous.timestamp_unix
    if span <= 0 or elapsed <= 0:
        return None
    return elapsed / span


def beacon_slot(payload: Any) -> Optional[str]:
    """data.header.message.slot from /eth/v1/beacon/headers/{head,finalized}."""
    slot = _dig(payload, "data", "header", "message", "slot")
    if slot is None:
        return None
    return str(slot)


def sync_state(payload: Any) -> Optional[bool]:
    """data.is_syncing from /eth/v1/node/syncing."""
    value = _dig(payload, "data", "is_syncing")
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    return None


def node_identity(payload: Any) -> Dict[str, Any]:
    """Client name and peer count from /eth/v1/node/identity, when the client reports them."""
    data = _dig(payload, "data") or {}
    if not isinstance(data, dict):
        data = {}
    client = data.get("client_name")
    return {
        "client_name": str(client) if client not in (None, "", "null") else None,
        "peer_count": _as_int(data.get("peer_count")),
    }


def chain_id(payload: Any) -> Optional[int]:
    """Decimal chain id from an eth_chainId response."""
    return parse_hex_quantity(_result(payload))


def client_version(payload: Any) -> Optional[str]:
    """Client version string from a web3_clientVersion response."""
    result = _result(payload)
    if isinstance(result, str) and result and result != "null":
        return result
    return None
