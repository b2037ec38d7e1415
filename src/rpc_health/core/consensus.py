#!/usr/bin/env python3
"""
Consensus functionality validation from beacon header slots.
"""

import logging
from typing import Optional, Union

from rpc_health.core.models import ConsensusStatus

logger = logging.getLogger(__name__)

Slot = Union[str, int, None]


def slot_present(slot: Slot) -> bool:
    """A slot counts only if it is non-null and non-empty ("null" is jq's rendering of a missing field)."""
    if slot is None:
        return False
    text = str(slot).strip()
    return bool(text) and text != "null"


def validate_consensus(finalized_slot: Slot, head_slot: Slot) -> ConsensusStatus:
    """Both finality and head must be served for the consensus client to count as functional."""
    status = ConsensusStatus(
        beacon_finality_working=slot_present(finalized_slot),
        beacon_head_working=slot_present(head_slot),
    )
    if not status.functional:
        logger.warning(
            f"Consensus not functional (finality: {status.beacon_finality_working}, "
            f"head: {status.beacon_head_working})"
        )
    return status


def normalize_slot(slot: Slot) -> Optional[str]:
    return str(slot).strip() if slot_present(slot) else None
