"""
ChainStream subscription requests.

Each request is a single frozen value validated when it is built; there are
no mutating builder chains. `params()` renders the JSON-RPC params object
the server expects (camelCase, unset filter fields omitted).
"""
from dataclasses import dataclass
from enum import Enum

import base58


class ParamsError(ValueError):
    """Invalid subscription parameters."""


class Network(Enum):
    SOLANA_MAINNET = "solana-mainnet"
    SOLANA_TESTNET = "solana-testnet"


def _network(value) -> Network:
    if isinstance(value, Network):
        return value
    try:
        return Network(value)
    except ValueError as e:
        raise ParamsError(f"unknown network {value!r}") from e


def _check_keys(name: str, keys) -> tuple[str, ...] | None:
    if keys is None:
        return None
    keys = tuple(keys)
    if not keys:
        raise ParamsError(f"{name} must not be empty (use None to leave it unset)")
    for key in keys:
        try:
            raw = base58.b58decode(key)
        except ValueError as e:
            raise ParamsError(f"{name}: {key!r} is not base58") from e
        if len(raw) != 32:
            raise ParamsError(f"{name}: {key!r} is not a 32-byte address")
    return keys


@dataclass(frozen=True)
class AccountKeyFilter:
    """Transaction account-key selector. At least one list must be set."""

    all: tuple[str, ...] | None = None
    one_of: tuple[str, ...] | None = None
    exclude: tuple[str, ...] | None = None

    def __post_init__(self):
        # frozen: normalise via object.__setattr__
        for name in ("all", "one_of", "exclude"):
            object.__setattr__(self, name, _check_keys(name, getattr(self, name)))
        if self.all is None and self.one_of is None and self.exclude is None:
            raise ParamsError("account key filter has no selector")
        included = set(self.all or ()) | set(self.one_of or ())
        clash = included & set(self.exclude or ())
        if clash:
            raise ParamsError(f"keys both included and excluded: {sorted(clash)}")

    def to_json(self) -> dict:
        out = {}
        if self.exclude is not None:
            out["exclude"] = list(self.exclude)
        if self.all is not None:
            out["all"] = list(self.all)
        if self.one_of is not None:
            out["oneOf"] = list(self.one_of)
        return out


@dataclass(frozen=True)
class TransactionSubscription:
    network: Network = Network.SOLANA_MAINNET
    verified: bool = False
    exclude_votes: bool | None = None
    account_keys: AccountKeyFilter | None = None

    subscribe_method = "transactionsSubscribe"
    unsubscribe_method = "transactionsUnsubscribe"

    def __post_init__(self):
        object.__setattr__(self, "network", _network(self.network))

    @classmethod
    def for_program(cls, program: str, **kwargs) -> "TransactionSubscription":
        """Transactions that mention `program` in their account keys."""
        return cls(account_keys=AccountKeyFilter(one_of=(program,)), **kwargs)

    def params(self) -> dict:
        tx_filter = {}
        if self.exclude_votes is not None:
            tx_filter["excludeVotes"] = self.exclude_votes
        if self.account_keys is not None:
            tx_filter["accountKeys"] = self.account_keys.to_json()
        return {
            "network": self.network.value,
            "verified": self.verified,
            "filter": tx_filter,
        }


@dataclass(frozen=True)
class BlockSubscription:
    network: Network = Network.SOLANA_MAINNET
    verified: bool = False

    subscribe_method = "blocksSubscribe"
    unsubscribe_method = "blocksUnsubscribe"

    def __post_init__(self):
        object.__setattr__(self, "network", _network(self.network))

    def params(self) -> dict:
        return {"network": self.network.value, "verified": self.verified}


@dataclass(frozen=True)
class SlotSubscription(BlockSubscription):
    subscribe_method = "slotUpdatesSubscribe"
    unsubscribe_method = "slotUpdatesUnsubscribe"
