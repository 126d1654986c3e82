"""
Fixed-width Borsh field codec.

Every CLMM event field is one of a handful of fixed-size little-endian
types. A schema is an ordered tuple of (name, type) pairs; arrays are
written as (type, count). Decoding reads exactly the schema width and
ignores anything after it.
"""
import struct

import base58

from raydium.constants import PUBKEY_SIZE
from raydium.errors import InvalidField, Truncated

# type -> (struct format, size); u128 and pubkey are handled separately
_SCALARS = {
    "u8": ("<B", 1),
    "u16": ("<H", 2),
    "u32": ("<I", 4),
    "i32": ("<i", 4),
    "u64": ("<Q", 8),
    "i64": ("<q", 8),
}

_SIZES = {name: size for name, (_, size) in _SCALARS.items()}
_SIZES.update({"bool": 1, "u128": 16, "pubkey": PUBKEY_SIZE})


def type_size(ftype) -> int:
    if isinstance(ftype, tuple):
        inner, count = ftype
        return type_size(inner) * count
    return _SIZES[ftype]


def schema_size(schema) -> int:
    return sum(type_size(ftype) for _, ftype in schema)


class Reader:
    """Cursor over a payload. Raises Truncated instead of short-reading."""

    def __init__(self, data: bytes, offset: int = 0):
        self.data = data
        self.offset = offset

    @property
    def remaining(self) -> int:
        return len(self.data) - self.offset

    def take(self, n: int) -> bytes:
        if self.remaining < n:
            raise Truncated(self.offset + n, len(self.data))
        chunk = self.data[self.offset:self.offset + n]
        self.offset += n
        return chunk

    def read(self, name: str, ftype):
        if isinstance(ftype, tuple):
            inner, count = ftype
            return tuple(self.read(name, inner) for _ in range(count))
        if ftype == "pubkey":
            return base58.b58encode(self.take(PUBKEY_SIZE)).decode("utf-8")
        if ftype == "u128":
            return int.from_bytes(self.take(16), "little")
        if ftype == "bool":
            raw = self.take(1)[0]
            if raw > 1:
                raise InvalidField(name, f"bool byte must be 0 or 1, got {raw}")
            return raw == 1
        fmt, size = _SCALARS[ftype]
        return struct.unpack(fmt, self.take(size))[0]


def decode_fields(schema, data: bytes) -> dict:
    """Decode `schema` from the start of `data`. Trailing bytes are ignored."""
    needed = schema_size(schema)
    if len(data) < needed:
        raise Truncated(needed, len(data))
    reader = Reader(data)
    return {name: reader.read(name, ftype) for name, ftype in schema}


def encode_value(ftype, value) -> bytes:
    if isinstance(ftype, tuple):
        inner, count = ftype
        if len(value) != count:
            raise ValueError(f"expected {count} items, got {len(value)}")
        return b"".join(encode_value(inner, v) for v in value)
    if ftype == "pubkey":
        raw = base58.b58decode(value)
        if len(raw) != PUBKEY_SIZE:
            raise ValueError(f"pubkey {value} decodes to {len(raw)} bytes")
        return raw
    if ftype == "u128":
        return int(value).to_bytes(16, "little")
    if ftype == "bool":
        return b"\x01" if value else b"\x00"
    fmt, _ = _SCALARS[ftype]
    return struct.pack(fmt, value)


def encode_fields(schema, values: dict) -> bytes:
    return b"".join(encode_value(ftype, values[name]) for name, ftype in schema)
