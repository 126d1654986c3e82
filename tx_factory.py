"""
Test factories: addresses, CLMM event payloads and transaction metadata.
"""
import base58

from chainstream.types import (
    CallRecord,
    CompiledInstruction,
    InnerCallGroup,
    TransactionMetadata,
)
from raydium.constants import EVENT_IX_TAG, RAYDIUM_CLMM_PROGRAM
from raydium.events import SwapEvent

PROGRAM = RAYDIUM_CLMM_PROGRAM
TOKEN_PROGRAM = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"


def key(n: int) -> str:
    """Deterministic 32-byte address."""
    return base58.b58encode(bytes([n]) * 32).decode("utf-8")


POOL = key(7)
ACCOUNT_A = key(1)
ACCOUNT_B = key(2)


def make_swap(**overrides) -> SwapEvent:
    """SwapEvent with sane defaults."""
    defaults = dict(
        pool_state=POOL,
        sender=ACCOUNT_A,
        token_account_0=ACCOUNT_A,
        token_account_1=ACCOUNT_B,
        amount_0=1000,
        transfer_fee_0=0,
        amount_1=995,
        transfer_fee_1=0,
        zero_for_one=True,
        sqrt_price_x64=18446744073709551616,  # 1.0 in Q64.64
        liquidity=5_000_000,
        tick=0,
    )
    defaults.update(overrides)
    return SwapEvent(**defaults)


def cpi_payload(event, tagged: bool = True) -> bytes:
    """emit_cpi! instruction data for `event`."""
    body = event.encode()
    return EVENT_IX_TAG + body if tagged else body


def sample_event(cls, seed: int = 1):
    """Instance of any CLMM event class with every field populated."""
    values = {}
    for i, (name, ftype) in enumerate(cls.SCHEMA):
        values[name] = _sample_value(ftype, seed + i)
    return cls(**values)


def _sample_value(ftype, n: int):
    if isinstance(ftype, tuple):
        inner, count = ftype
        return tuple(_sample_value(inner, n + j) for j in range(count))
    return {
        "pubkey": key(n % 250 + 3),
        "u8": n % 256,
        "u16": 60 + n,
        "u32": 2500 + n,
        "i32": -887272 + n,
        "u64": 10**12 + n,
        "i64": -(10**12) - n,
        "u128": 2**100 + n,
        "bool": n % 2 == 0,
    }[ftype]


def make_tx(
    calls,
    account_keys=(PROGRAM, ACCOUNT_A, ACCOUNT_B),
    outer_program_index: int = 0,
    signature: str = "5igSig1111111111111111111111111111111111111",
    groups=None,
    log_messages=(),
) -> TransactionMetadata:
    """
    One outer instruction invoking account_keys[outer_program_index] with a
    single inner group made of `calls` (list of (program_index, data)).
    Pass `groups` to control the inner groups directly.
    """
    if groups is None:
        groups = (
            InnerCallGroup(
                index=0,
                calls=tuple(
                    CallRecord(program_index=p, accounts=(), data=d) for p, d in calls
                ),
            ),
        )
    return TransactionMetadata(
        signature=signature,
        account_keys=tuple(account_keys),
        instructions=(CompiledInstruction(program_index=outer_program_index),),
        inner_calls=tuple(groups),
        log_messages=tuple(log_messages),
    )
