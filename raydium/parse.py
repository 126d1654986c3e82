"""
CLMM event orchestrator.

parse_events() turns one transaction's metadata into the ordered list of
typed events the target program emitted. It is a pure function: no I/O,
no shared mutable state, safe to call from any number of threads/tasks.

Failure policy:
  - MetadataError (bad index in the metadata) propagates; the caller
    logs it and moves on to the next transaction.
  - DecodeError on a single candidate is swallowed; the rest of the
    transaction still decodes. Transactions are permissionless input, so
    garbage self-invocation data is expected.
  - Unknown discriminators are skipped unless keep_unknown=True, in which
    case they surface as UnknownEvent.
"""
import logging

from chainstream.types import TransactionMetadata
from raydium.decoder import decode_payload
from raydium.errors import DecodeError
from raydium.events import SwapEvent
from raydium.scanner import RawCandidate, scan, scan_logs

logger = logging.getLogger("clmm_parse")


def _decode_candidates(
    candidates: list[RawCandidate],
    tx: TransactionMetadata,
    keep_unknown: bool,
) -> list:
    events = []
    for candidate in candidates:
        try:
            event = decode_payload(candidate.payload, tx.account_keys, keep_unknown)
        except DecodeError as e:
            logger.debug(
                f"[skip] {tx.signature[:16]}.. at {candidate.source_order}: {e}"
            )
            continue
        if event is not None:
            events.append(event)
    return events


def parse_events(
    target_program: str,
    tx: TransactionMetadata,
    keep_unknown: bool = False,
) -> list:
    """
    Events emitted by `target_program` via self-invocation, in execution order.

    Returns [] for transactions that never touch the program.
    Raises MetadataError for structurally inconsistent metadata.
    """
    return _decode_candidates(scan(tx, target_program), tx, keep_unknown)


def parse_log_events(
    target_program: str,
    tx: TransactionMetadata,
    keep_unknown: bool = False,
) -> list:
    """Same as parse_events but reads "Program data:" log lines instead."""
    return _decode_candidates(scan_logs(tx, target_program), tx, keep_unknown)


def leading_swap(events: list) -> SwapEvent | None:
    """The transaction's first event if it is a swap, else None."""
    if events and isinstance(events[0], SwapEvent):
        return events[0]
    return None
