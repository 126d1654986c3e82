"""
Raydium CLMM program id and Anchor event discriminators.

Anchor events are identified by the first 8 bytes of
sha256("event:<EventName>"). When emitted through emit_cpi! the program
invokes itself with instruction data:

    [8B event-ix tag][8B event discriminator][borsh event fields...]

The tables below are built once at import and never mutated.
"""
import hashlib

# ═══════════════════════════════════════════════════════════════
#  PROGRAM IDS
# ═══════════════════════════════════════════════════════════════

RAYDIUM_CLMM_PROGRAM = "CAMMCzo5YL8w4VFF8KVHrK22GGUsp5VTaW7grrKgrWqK"

# ═══════════════════════════════════════════════════════════════
#  ANCHOR LAYOUT
# ═══════════════════════════════════════════════════════════════

DISCRIMINATOR_SIZE = 8
PUBKEY_SIZE = 32

# Little-endian bytes of Anchor EVENT_IX_TAG (0x1d9acb512ea545e4)
EVENT_IX_TAG = bytes.fromhex("e445a52e51cb9a1d")


def event_discriminator(name: str) -> bytes:
    """Anchor discriminator for an #[event] struct name."""
    return hashlib.sha256(f"event:{name}".encode()).digest()[:DISCRIMINATOR_SIZE]


# ═══════════════════════════════════════════════════════════════
#  CLMM EVENT NAMES (order as declared in the program's events.rs)
# ═══════════════════════════════════════════════════════════════

CLMM_EVENT_NAMES = (
    "ConfigChangeEvent",
    "CreatePersonalPositionEvent",
    "IncreaseLiquidityEvent",
    "DecreaseLiquidityEvent",
    "LiquidityCalculateEvent",
    "CollectPersonalFeeEvent",
    "UpdateRewardInfosEvent",
    "PoolCreatedEvent",
    "CollectProtocolFeeEvent",
    "SwapEvent",
    "LiquidityChangeEvent",
)

EVENT_DISCRIMINATORS: dict[str, bytes] = {
    name: event_discriminator(name) for name in CLMM_EVENT_NAMES
}
