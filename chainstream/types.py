"""
Transaction metadata as delivered by the ChainStream feed.

Only the parts the event decoder needs are kept: the account key table,
outer instructions, inner call groups and log lines. Everything is built
once per notification and never mutated afterwards.

Input is the Solana JSON-RPC transaction object in "json" encoding
(base58 or ["<b64>", "base64"] instruction data):

    {
      "signature": "...", "slot": 123,
      "transaction": {"signatures": [...], "message": {
          "accountKeys": [...],
          "instructions": [{"programIdIndex": 3, "accounts": [..], "data": "<b58>"}]}},
      "meta": {"err": null, "logMessages": [...],
               "loadedAddresses": {"writable": [...], "readonly": [...]},
               "innerInstructions": [{"index": 0, "instructions": [...]}]}
    }

"jsonParsed" is accepted too: account keys come as {"pubkey": ...} objects
that already list lookup-table addresses, and instructions name their
program and accounts by address ("programId", "accounts": [<address>, ...]).
These are mapped back to indices into the key table. Fully parsed
instructions have no raw data and decode with empty data.
"""
import base64
from dataclasses import dataclass, field

import base58


@dataclass(frozen=True)
class CompiledInstruction:
    """Top-level instruction; indices point into account_keys."""

    program_index: int
    accounts: tuple[int, ...] = ()
    data: bytes = b""


@dataclass(frozen=True)
class CallRecord:
    """One inner (CPI) call."""

    program_index: int
    accounts: tuple[int, ...] = ()
    data: bytes = b""
    stack_height: int | None = None


@dataclass(frozen=True)
class InnerCallGroup:
    index: int                          # outer instruction that produced these calls
    calls: tuple[CallRecord, ...] = ()


@dataclass(frozen=True)
class TransactionMetadata:
    signature: str
    account_keys: tuple[str, ...] = ()
    instructions: tuple[CompiledInstruction, ...] = ()
    inner_calls: tuple[InnerCallGroup, ...] = ()
    log_messages: tuple[str, ...] = ()
    slot: int = 0
    err: object = field(default=None, compare=False)

    @classmethod
    def from_json(cls, value: dict) -> "TransactionMetadata":
        """
        Build from a transaction notification's `value` object.
        Raises ValueError if the shape is not a transaction.
        """
        if not isinstance(value, dict):
            raise ValueError(f"transaction must be an object, got {type(value).__name__}")
        try:
            tx = value["transaction"]
            message = tx["message"]
            meta = value.get("meta") or tx.get("meta") or {}

            raw_keys = message.get("accountKeys", [])
            keys = [_key_str(k) for k in raw_keys]
            # jsonParsed key lists already include lookup-table addresses
            if not any(isinstance(k, dict) for k in raw_keys):
                loaded = meta.get("loadedAddresses") or {}
                keys.extend(loaded.get("writable", []))
                keys.extend(loaded.get("readonly", []))

            instructions = tuple(
                CompiledInstruction(**_instruction_fields(ix, keys))
                for ix in message.get("instructions", [])
            )

            inner = tuple(
                InnerCallGroup(
                    index=int(group["index"]),
                    calls=tuple(
                        CallRecord(
                            **_instruction_fields(ix, keys),
                            stack_height=ix.get("stackHeight"),
                        )
                        for ix in group.get("instructions", [])
                    ),
                )
                for group in (meta.get("innerInstructions") or [])
            )

            signature = value.get("signature")
            if signature is None:
                sigs = tx.get("signatures") or [""]
                signature = sigs[0]

            return cls(
                signature=signature,
                account_keys=tuple(keys),
                instructions=instructions,
                inner_calls=inner,
                log_messages=tuple(meta.get("logMessages") or ()),
                slot=int(value.get("slot", 0)),
                err=meta.get("err"),
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"malformed transaction: {e!r}") from e


def _key_str(key) -> str:
    # jsonParsed encoding gives {"pubkey": ..., "signer": ..., "writable": ...}
    if isinstance(key, dict):
        return key["pubkey"]
    return str(key)


def _decode_data(data) -> bytes:
    # ["<b64>", "base64"] appears when the feed is asked for base64 data
    if isinstance(data, list) and len(data) == 2 and data[1] == "base64":
        return base64.b64decode(data[0])
    if not isinstance(data, str):
        raise TypeError(f"instruction data must be a string, got {type(data).__name__}")
    return base58.b58decode(data)


def _key_index(keys: list, ref) -> int:
    # jsonParsed instructions name accounts by address instead of index
    if isinstance(ref, str):
        try:
            return keys.index(ref)
        except ValueError:
            raise ValueError(f"{ref} is not in the account key table") from None
    return int(ref)


def _instruction_fields(ix: dict, keys: list) -> dict:
    program = ix["programIdIndex"] if "programIdIndex" in ix else ix["programId"]
    return dict(
        program_index=_key_index(keys, program),
        accounts=tuple(_key_index(keys, a) for a in ix.get("accounts", [])),
        # fully parsed instructions (e.g. SPL Token) carry no raw data
        data=_decode_data(ix.get("data", "")),
    )
