"""
Typed Raydium CLMM events.

One frozen dataclass per #[event] struct in the CLMM program. Field order
and widths mirror the on-chain Borsh layout and must not be reordered:
SCHEMA is the wire layout, the dataclass fields are just the names.
"""
from dataclasses import asdict, dataclass
from enum import Enum

from raydium.constants import EVENT_DISCRIMINATORS
from raydium.layout import decode_fields, encode_fields, schema_size


class EventKind(Enum):
    CONFIG_CHANGE = "ConfigChangeEvent"
    CREATE_PERSONAL_POSITION = "CreatePersonalPositionEvent"
    INCREASE_LIQUIDITY = "IncreaseLiquidityEvent"
    DECREASE_LIQUIDITY = "DecreaseLiquidityEvent"
    LIQUIDITY_CALCULATE = "LiquidityCalculateEvent"
    COLLECT_PERSONAL_FEE = "CollectPersonalFeeEvent"
    UPDATE_REWARD_INFOS = "UpdateRewardInfosEvent"
    POOL_CREATED = "PoolCreatedEvent"
    COLLECT_PROTOCOL_FEE = "CollectProtocolFeeEvent"
    SWAP = "SwapEvent"
    LIQUIDITY_CHANGE = "LiquidityChangeEvent"
    UNKNOWN = "Unknown"

    @property
    def discriminator(self) -> bytes | None:
        return EVENT_DISCRIMINATORS.get(self.value)


class ClmmEvent:
    """Shared decode/encode for fixed-layout events."""

    kind: EventKind
    SCHEMA: tuple = ()

    @classmethod
    def size(cls) -> int:
        return schema_size(cls.SCHEMA)

    @classmethod
    def decode(cls, remainder: bytes, account_keys=()):
        # CLMM events carry full pubkeys, account_keys is not consulted
        return cls(**decode_fields(cls.SCHEMA, remainder))

    def encode(self) -> bytes:
        """Discriminator + fields, i.e. the payload after the event-ix tag."""
        return self.kind.discriminator + encode_fields(self.SCHEMA, asdict(self))


# ── Trading ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class SwapEvent(ClmmEvent):
    pool_state: str
    sender: str
    token_account_0: str      # sender's account for token_0
    token_account_1: str      # sender's account for token_1
    amount_0: int
    transfer_fee_0: int
    amount_1: int
    transfer_fee_1: int
    zero_for_one: bool        # True = token_0 in, token_1 out
    sqrt_price_x64: int
    liquidity: int
    tick: int

    kind = EventKind.SWAP
    SCHEMA = (
        ("pool_state", "pubkey"),
        ("sender", "pubkey"),
        ("token_account_0", "pubkey"),
        ("token_account_1", "pubkey"),
        ("amount_0", "u64"),
        ("transfer_fee_0", "u64"),
        ("amount_1", "u64"),
        ("transfer_fee_1", "u64"),
        ("zero_for_one", "bool"),
        ("sqrt_price_x64", "u128"),
        ("liquidity", "u128"),
        ("tick", "i32"),
    )

    @property
    def direction_arrow(self) -> str:
        return "->" if self.zero_for_one else "<-"

    def pair(self) -> str:
        """Directional pair, e.g. 'A -> B' when token_0 flowed in."""
        return f"{self.token_account_0} {self.direction_arrow} {self.token_account_1}"

@dataclass(frozen=True)
class LiquidityChangeEvent(ClmmEvent):
    pool_state: str
    tick: int
    tick_lower: int
    tick_upper: int
    liquidity_before: int
    liquidity_after: int

    kind = EventKind.LIQUIDITY_CHANGE
    SCHEMA = (
        ("pool_state", "pubkey"),
        ("tick", "i32"),
        ("tick_lower", "i32"),
        ("tick_upper", "i32"),
        ("liquidity_before", "u128"),
        ("liquidity_after", "u128"),
    )


# ── Positions ───────────────────────────────────────────────────

@dataclass(frozen=True)
class CreatePersonalPositionEvent(ClmmEvent):
    pool_state: str
    minter: str
    nft_owner: str
    tick_lower_index: int
    tick_upper_index: int
    liquidity: int
    deposit_amount_0: int
    deposit_amount_1: int
    deposit_amount_0_transfer_fee: int
    deposit_amount_1_transfer_fee: int

    kind = EventKind.CREATE_PERSONAL_POSITION
    SCHEMA = (
        ("pool_state", "pubkey"),
        ("minter", "pubkey"),
        ("nft_owner", "pubkey"),
        ("tick_lower_index", "i32"),
        ("tick_upper_index", "i32"),
        ("liquidity", "u128"),
        ("deposit_amount_0", "u64"),
        ("deposit_amount_1", "u64"),
        ("deposit_amount_0_transfer_fee", "u64"),
        ("deposit_amount_1_transfer_fee", "u64"),
    )


@dataclass(frozen=True)
class IncreaseLiquidityEvent(ClmmEvent):
    position_nft_mint: str
    liquidity: int
    amount_0: int
    amount_1: int
    amount_0_transfer_fee: int
    amount_1_transfer_fee: int

    kind = EventKind.INCREASE_LIQUIDITY
    SCHEMA = (
        ("position_nft_mint", "pubkey"),
        ("liquidity", "u128"),
        ("amount_0", "u64"),
        ("amount_1", "u64"),
        ("amount_0_transfer_fee", "u64"),
        ("amount_1_transfer_fee", "u64"),
    )


@dataclass(frozen=True)
class DecreaseLiquidityEvent(ClmmEvent):
    position_nft_mint: str
    liquidity: int
    decrease_amount_0: int
    decrease_amount_1: int
    fee_amount_0: int
    fee_amount_1: int
    reward_amounts: tuple
    transfer_fee_0: int
    transfer_fee_1: int

    kind = EventKind.DECREASE_LIQUIDITY
    SCHEMA = (
        ("position_nft_mint", "pubkey"),
        ("liquidity", "u128"),
        ("decrease_amount_0", "u64"),
        ("decrease_amount_1", "u64"),
        ("fee_amount_0", "u64"),
        ("fee_amount_1", "u64"),
        ("reward_amounts", ("u64", 3)),
        ("transfer_fee_0", "u64"),
        ("transfer_fee_1", "u64"),
    )


@dataclass(frozen=True)
class LiquidityCalculateEvent(ClmmEvent):
    pool_liquidity: int
    pool_sqrt_price_x64: int
    pool_tick: int
    calc_amount_0: int
    calc_amount_1: int
    trade_fee_owed_0: int
    trade_fee_owed_1: int
    transfer_fee_0: int
    transfer_fee_1: int

    kind = EventKind.LIQUIDITY_CALCULATE
    SCHEMA = (
        ("pool_liquidity", "u128"),
        ("pool_sqrt_price_x64", "u128"),
        ("pool_tick", "i32"),
        ("calc_amount_0", "u64"),
        ("calc_amount_1", "u64"),
        ("trade_fee_owed_0", "u64"),
        ("trade_fee_owed_1", "u64"),
        ("transfer_fee_0", "u64"),
        ("transfer_fee_1", "u64"),
    )


# ── Fees & rewards ──────────────────────────────────────────────

@dataclass(frozen=True)
class CollectPersonalFeeEvent(ClmmEvent):
    position_nft_mint: str
    recipient_token_account_0: str
    recipient_token_account_1: str
    amount_0: int
    amount_1: int

    kind = EventKind.COLLECT_PERSONAL_FEE
    SCHEMA = (
        ("position_nft_mint", "pubkey"),
        ("recipient_token_account_0", "pubkey"),
        ("recipient_token_account_1", "pubkey"),
        ("amount_0", "u64"),
        ("amount_1", "u64"),
    )


@dataclass(frozen=True)
class CollectProtocolFeeEvent(ClmmEvent):
    pool_state: str
    recipient_token_account_0: str
    recipient_token_account_1: str
    amount_0: int
    amount_1: int

    kind = EventKind.COLLECT_PROTOCOL_FEE
    SCHEMA = (
        ("pool_state", "pubkey"),
        ("recipient_token_account_0", "pubkey"),
        ("recipient_token_account_1", "pubkey"),
        ("amount_0", "u64"),
        ("amount_1", "u64"),
    )


@dataclass(frozen=True)
class UpdateRewardInfosEvent(ClmmEvent):
    reward_growth_global_x64: tuple

    kind = EventKind.UPDATE_REWARD_INFOS
    SCHEMA = (
        ("reward_growth_global_x64", ("u128", 3)),
    )


# ── Pool & config admin ─────────────────────────────────────────

@dataclass(frozen=True)
class PoolCreatedEvent(ClmmEvent):
    token_mint_0: str
    token_mint_1: str
    tick_spacing: int
    pool_state: str
    sqrt_price_x64: int
    tick: int
    token_vault_0: str
    token_vault_1: str

    kind = EventKind.POOL_CREATED
    SCHEMA = (
        ("token_mint_0", "pubkey"),
        ("token_mint_1", "pubkey"),
        ("tick_spacing", "u16"),
        ("pool_state", "pubkey"),
        ("sqrt_price_x64", "u128"),
        ("tick", "i32"),
        ("token_vault_0", "pubkey"),
        ("token_vault_1", "pubkey"),
    )


@dataclass(frozen=True)
class ConfigChangeEvent(ClmmEvent):
    index: int
    owner: str
    protocol_fee_rate: int
    trade_fee_rate: int
    tick_spacing: int
    fund_fee_rate: int
    fund_owner: str

    kind = EventKind.CONFIG_CHANGE
    SCHEMA = (
        ("index", "u16"),
        ("owner", "pubkey"),
        ("protocol_fee_rate", "u32"),
        ("trade_fee_rate", "u32"),
        ("tick_spacing", "u16"),
        ("fund_fee_rate", "u32"),
        ("fund_owner", "pubkey"),
    )


@dataclass(frozen=True)
class UnknownEvent:
    """Self-invocation payload whose discriminator is not in the table."""

    discriminator: bytes
    payload: bytes

    kind = EventKind.UNKNOWN


EVENT_TYPES = (
    ConfigChangeEvent,
    CreatePersonalPositionEvent,
    IncreaseLiquidityEvent,
    DecreaseLiquidityEvent,
    LiquidityCalculateEvent,
    CollectPersonalFeeEvent,
    UpdateRewardInfosEvent,
    PoolCreatedEvent,
    CollectProtocolFeeEvent,
    SwapEvent,
    LiquidityChangeEvent,
)
