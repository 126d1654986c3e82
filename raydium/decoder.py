"""
Discriminator dispatch + per-kind decode.

classify() maps the leading 8-byte tag of a self-invocation payload to an
EventKind (exact byte match, no wildcards); decode() hands the remainder to
that kind's fixed-layout decoder. The dispatch table is closed: adding a
kind means adding an EventKind member and an event class, nothing else.
"""
from raydium.constants import DISCRIMINATOR_SIZE, EVENT_IX_TAG
from raydium.errors import Truncated
from raydium.events import EVENT_TYPES, EventKind, UnknownEvent

# discriminator bytes -> kind
DISCRIMINATOR_TABLE: dict[bytes, EventKind] = {
    cls.kind.discriminator: cls.kind for cls in EVENT_TYPES
}

# kind -> event class
DECODERS = {cls.kind: cls for cls in EVENT_TYPES}


def strip_event_tag(payload: bytes) -> bytes:
    """Drop the emit_cpi! event-ix tag if the payload carries one."""
    if payload[:len(EVENT_IX_TAG)] == EVENT_IX_TAG:
        return payload[len(EVENT_IX_TAG):]
    return payload


def classify(payload: bytes) -> tuple[EventKind, bytes]:
    """
    Return (kind, remainder) for a candidate payload.

    Raises Truncated if fewer than 8 discriminator bytes are present.
    Unmatched discriminators give EventKind.UNKNOWN, not an error.
    """
    body = strip_event_tag(payload)
    if len(body) < DISCRIMINATOR_SIZE:
        raise Truncated(DISCRIMINATOR_SIZE, len(body))
    disc = bytes(body[:DISCRIMINATOR_SIZE])
    kind = DISCRIMINATOR_TABLE.get(disc, EventKind.UNKNOWN)
    return kind, body[DISCRIMINATOR_SIZE:]


def decode(kind: EventKind, remainder: bytes, account_keys=()):
    """Decode `remainder` as `kind`. Raises Truncated / InvalidField."""
    return DECODERS[kind].decode(remainder, account_keys)


def decode_payload(payload: bytes, account_keys=(), keep_unknown: bool = False):
    """
    classify + decode in one step.

    Returns the typed event, an UnknownEvent (keep_unknown=True) or None
    for an unrecognised discriminator. DecodeError propagates.
    """
    kind, remainder = classify(payload)
    if kind is EventKind.UNKNOWN:
        if not keep_unknown:
            return None
        body = strip_event_tag(payload)
        return UnknownEvent(
            discriminator=bytes(body[:DISCRIMINATOR_SIZE]),
            payload=bytes(remainder),
        )
    return decode(kind, remainder, account_keys)
