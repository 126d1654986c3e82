"""
Error taxonomy for the CLMM event decoder.

MetadataError: the transaction itself is structurally inconsistent.
               Fatal for that transaction, propagated to the caller.
DecodeError:   one candidate payload is malformed.
               Scoped to that candidate, swallowed by the orchestrator.
"""


class MetadataError(Exception):
    """Structural error in transaction metadata."""


class IndexOutOfRange(MetadataError):
    def __init__(self, index: int, size: int, what: str = "account key"):
        self.index = index
        self.size = size
        super().__init__(f"{what} index {index} out of range (table size {size})")


class DecodeError(Exception):
    """Payload-level error for a single candidate."""


class Truncated(DecodeError):
    def __init__(self, needed: int, available: int):
        self.needed = needed
        self.available = available
        super().__init__(f"payload truncated: need {needed} bytes, have {available}")


class InvalidField(DecodeError):
    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"invalid field {field!r}: {reason}")
