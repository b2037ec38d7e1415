#!/usr/bin/env python3
"""
Measurement Loader Module
Reads a collector's JSON/YAML measurement dump into a MeasurementBundle.

Expected layout (every section optional):

    now: 1700000100
    l1:
      chain_id: "0x1"
      client_version: "Geth/v1.14.0"
      finalized_block: "0x12a05f0"
      rate_limit_samples:
        - {status: 200, elapsed: 0.012}
        - {status: 200, elapsed: 0.015, body: {"error": {"code": -32005}}}
      latency_samples: [0.011, 0.010]
      block_times: [12.0, 11.8]
      block_pairs:
        - current: {number: "0x10", timestamp: "0x6553f164"}
          previous: {number: "0x6", timestamp: "0x6553f0ec"}
      latest_block: {number: "0x10", timestamp: "0x6553f164"}
    consensus:
      rate_limit_samples: [...]
      latency_samples: [...]
      finalized_slot: "8123456"
      head_slot: "8123520"
      syncing: false
      client_name: lighthouse
      peer_count: 72
"""

import os
import json
import math
import time
import logging
from typing import Any, Dict, List, Optional, Tuple

from rpc_health.config import ERROR_MESSAGES
from rpc_health.core import adapters
from rpc_health.core.models import BlockObservation, ChainMetadata, Layer, Sample
from rpc_health.engine import MeasurementBundle

# Optional YAML support for measurement files (.yaml/.yml)
try:
    import yaml  # type: ignore
except ImportError:  # pragma: no cover - optional dependency
    yaml = None  # type: ignore

logger = logging.getLogger(__name__)


class MeasurementError(ValueError):
    """Raised when a measurement file cannot be read or has the wrong shape."""


def read_measurement_file(path: str) -> Dict[str, Any]:
    """Read a JSON or YAML measurement file into a mapping."""
    if not os.path.isfile(path):
        raise MeasurementError(ERROR_MESSAGES['measurement_not_found'].format(file=path))

    ext = os.path.splitext(path)[1].lower()
    try:
        with open(path, 'r', encoding='utf-8') as fh:
            if ext in ('.yaml', '.yml'):
                if yaml is None:
                    raise MeasurementError(ERROR_MESSAGES['yaml_unavailable'].format(file=path))
                data = yaml.safe_load(fh)
            else:
                data = json.load(fh)
    except MeasurementError:
        raise
    except Exception as e:
        raise MeasurementError(ERROR_MESSAGES['measurement_invalid'].format(file=path, error=e)) from e

    if not isinstance(data, dict):
        raise MeasurementError(
            ERROR_MESSAGES['measurement_invalid'].format(file=path, error="top level must be a mapping")
        )
    return data


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise MeasurementError(f"Section '{name}' must be a mapping")
    return value


def _list(section: Dict[str, Any], name: str) -> List[Any]:
    value = section.get(name) or []
    if not isinstance(value, list):
        raise MeasurementError(f"'{name}' must be a list")
    return value


def _floats(section: Dict[str, Any], name: str) -> Tuple[float, ...]:
    out = []
    for value in _list(section, name):
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise MeasurementError(f"'{name}' contains a non-numeric value: {value!r}")
        if not math.isfinite(number):
            raise MeasurementError(f"'{name}' contains a non-finite value: {value!r}")
        out.append(number)
    return tuple(out)


def _samples(section: Dict[str, Any], layer: Layer) -> Tuple[Sample, ...]:
    samples = []
    for i, raw in enumerate(_list(section, 'rate_limit_samples'), 1):
        if not isinstance(raw, dict):
            raise MeasurementError(f"{layer.value} sample #{i} must be a mapping")
        sample = adapters.to_sample(raw.get('status'), raw.get('elapsed'), raw.get('body'), layer)
        if raw.get('error_code') is not None:
            code = adapters.parse_error_code(raw['error_code'])
            if code is None:
                raise MeasurementError(
                    f"{layer.value} sample #{i} has a non-numeric error_code: {raw['error_code']!r}"
                )
            sample = Sample(sample.elapsed_seconds, sample.http_status, code)
        samples.append(sample)
    return tuple(samples)


def _block(raw: Any, now: int) -> BlockObservation:
    if raw is None:
        return BlockObservation.missing()
    return adapters.block_observation(raw, now)


def _block_times(section: Dict[str, Any], now: int) -> Tuple[float, ...]:
    times = list(_floats(section, 'block_times'))
    for pair in _list(section, 'block_pairs'):
        if not isinstance(pair, dict):
            raise MeasurementError("'block_pairs' entries must be mappings")
        rate = adapters.average_block_time(_block(pair.get('current'), now), _block(pair.get('previous'), now))
        if rate is not None:
            times.append(rate)
        else:
            logger.debug(f"Skipping unusable block pair: {pair}")
    return tuple(times)


def _metadata(l1: Dict[str, Any], consensus: Dict[str, Any]) -> ChainMetadata:
    identity = adapters.node_identity({'data': consensus})
    syncing = consensus.get('syncing')
    if not isinstance(syncing, bool):
        syncing = adapters.sync_state({'data': {'is_syncing': syncing}})
    finalized = l1.get('finalized_block')
    return ChainMetadata(
        chain_id=adapters.chain_id(l1.get('chain_id')),
        client_version=adapters.client_version(l1.get('client_version')),
        finalized_block=adapters.parse_hex_quantity(finalized) if finalized is not None else None,
        syncing=syncing,
        consensus_client=identity['client_name'],
        peer_count=identity['peer_count'],
    )


def bundle_from_dict(data: Dict[str, Any], now: Optional[int] = None) -> MeasurementBundle:
    """Build a MeasurementBundle from an already-parsed measurement mapping."""
    if now is None:
        now = data.get('now')
    if now is None:
        now = int(time.time())
    try:
        now = int(now)
    except (TypeError, ValueError):
        raise MeasurementError(f"'now' must be a unix timestamp, got {now!r}")

    l1 = _section(data, 'l1')
    consensus = _section(data, 'consensus')

    bundle = MeasurementBundle(
        l1_rate_limit_samples=_samples(l1, Layer.EXECUTION),
        consensus_rate_limit_samples=_samples(consensus, Layer.CONSENSUS),
        l1_latency_samples=_floats(l1, 'latency_samples'),
        consensus_latency_samples=_floats(consensus, 'latency_samples'),
        block_times=_block_times(l1, now),
        latest_block=_block(l1.get('latest_block'), now),
        finalized_slot=consensus.get('finalized_slot'),
        head_slot=consensus.get('head_slot'),
        metadata=_metadata(l1, consensus),
    )
    logger.debug(
        f"Loaded measurements: {len(bundle.l1_rate_limit_samples)} L1 probes, "
        f"{len(bundle.consensus_rate_limit_samples)} consensus probes, "
        f"{len(bundle.block_times)} block time samples"
    )
    return bundle


def load_measurements(path: str, now: Optional[int] = None) -> MeasurementBundle:
    """Load a measurement file (JSON, or YAML when PyYAML is installed)."""
    data = read_measurement_file(path)
    logger.info(f"Read measurements from {path}")
    return bundle_from_dict(data, now=now)
