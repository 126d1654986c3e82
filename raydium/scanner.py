"""
Account key resolution and candidate extraction.

Primary source: Anchor emit_cpi! self-invocations. A program that wants to
log an event calls itself with the event bytes as instruction data; the
call does nothing but leaves the payload in the transaction's inner
instructions, where no log truncation can drop it.

Fallback source: "Program data: <base64>" log lines written by emit!,
attributed to a program by replaying the invoke/success stack.
"""
import base64
import binascii
import logging
import re
from dataclasses import dataclass

from chainstream.types import TransactionMetadata
from raydium.errors import IndexOutOfRange

logger = logging.getLogger("clmm_scanner")

_INVOKE_RE = re.compile(r"^Program (\S+) invoke \[(\d+)\]$")
_EXIT_RE = re.compile(r"^Program (\S+) (success|failed)")
_DATA_PREFIX = "Program data: "
_LOG_TRUNCATED = "Log truncated"


@dataclass(frozen=True)
class RawCandidate:
    source_order: tuple[int, int]   # (outer instruction, position within group)
    payload: bytes


def resolve(account_keys, index: int) -> str:
    """Address at `index`; negative indices are rejected, not wrapped."""
    if not 0 <= index < len(account_keys):
        raise IndexOutOfRange(index, len(account_keys))
    return account_keys[index]


def scan(tx: TransactionMetadata, target_program: str) -> list[RawCandidate]:
    """
    Self-invocation payloads of `target_program`, in execution order.

    Only inner groups whose outer instruction invoked the target are
    considered. Raises IndexOutOfRange on structurally broken metadata.
    """
    keys = tx.account_keys
    if target_program not in keys:
        return []

    candidates = []
    for group in tx.inner_calls:
        if not 0 <= group.index < len(tx.instructions):
            raise IndexOutOfRange(group.index, len(tx.instructions), "outer instruction")
        outer_program = resolve(keys, tx.instructions[group.index].program_index)
        for position, call in enumerate(group.calls):
            program = resolve(keys, call.program_index)
            for account_index in call.accounts:
                resolve(keys, account_index)
            if outer_program == target_program and program == target_program:
                candidates.append(RawCandidate((group.index, position), call.data))

    # feeds usually send groups in order already; sort is stable either way
    candidates.sort(key=lambda c: c.source_order)
    return candidates


def scan_logs(tx: TransactionMetadata, target_program: str) -> list[RawCandidate]:
    """
    "Program data:" payloads written while `target_program` was executing.

    source_order is (outer instruction ordinal, log line number). Lines that
    are not valid base64 are skipped. Scanning stops at "Log truncated".
    """
    if target_program not in tx.account_keys:
        return []

    candidates = []
    stack: list[str] = []
    outer = -1
    for line_no, line in enumerate(tx.log_messages):
        if line == _LOG_TRUNCATED:
            logger.debug(f"[logs] {tx.signature[:16]}.. truncated at line {line_no}")
            break

        if line.startswith(_DATA_PREFIX):
            if not stack or stack[-1] != target_program:
                continue
            encoded = line[len(_DATA_PREFIX):].split(" ", 1)[0]
            try:
                payload = base64.b64decode(encoded, validate=True)
            except (binascii.Error, ValueError):
                logger.debug(f"[logs] {tx.signature[:16]}.. bad base64 at line {line_no}")
                continue
            candidates.append(RawCandidate((outer, line_no), payload))
            continue

        m = _INVOKE_RE.match(line)
        if m:
            if m.group(2) == "1":
                outer += 1
                stack.clear()
            stack.append(m.group(1))
            continue

        m = _EXIT_RE.match(line)
        if m and stack and stack[-1] == m.group(1):
            stack.pop()

    return candidates
