"""
Glue shared by the swap drivers: logging, request/client construction,
per-transaction decode with error isolation, and the pair tally.
"""
import logging
import sys
from collections import Counter

import config
from chainstream.client import ChainStreamClient
from chainstream.methods import AccountKeyFilter, TransactionSubscription
from chainstream.types import TransactionMetadata
from raydium.errors import MetadataError
from raydium.events import SwapEvent
from raydium.parse import parse_events, parse_log_events

logger = logging.getLogger("swap_feed")

PARSERS = {"cpi": parse_events, "logs": parse_log_events}


def setup_logging():
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        format="%(asctime)s | %(name)-14s | %(levelname)-5s | %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stdout,
    )
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def require_token() -> str:
    if not config.SYNDICA_TOKEN:
        sys.exit("SYNDICA_TOKEN env var not set, use `export SYNDICA_TOKEN=<your_token>`")
    return config.SYNDICA_TOKEN


def build_request(program: str = None) -> TransactionSubscription:
    return TransactionSubscription(
        network=config.CHAINSTREAM_NETWORK,
        verified=config.CHAINSTREAM_VERIFIED,
        exclude_votes=config.CHAINSTREAM_EXCLUDE_VOTES,
        account_keys=AccountKeyFilter(one_of=(program or config.TARGET_PROGRAM,)),
    )


def build_client(token: str) -> ChainStreamClient:
    return ChainStreamClient(
        token=token,
        url=config.CHAINSTREAM_WSS,
        ping_interval=config.WS_PING_INTERVAL_S or None,
        max_msg_size=config.WS_MAX_MSG_SIZE,
        max_backoff=config.RECONNECT_MAX_BACKOFF_S,
    )


def decode_transaction(
    tx: TransactionMetadata,
    program: str = None,
    source: str = None,
    keep_unknown: bool = None,
) -> list:
    """Decoded events, or [] if the metadata was structurally broken."""
    program = program or config.TARGET_PROGRAM
    source = source or config.EVENT_SOURCE
    if keep_unknown is None:
        keep_unknown = config.KEEP_UNKNOWN_EVENTS
    if source not in PARSERS:
        raise ValueError(f"unknown event source {source!r}")
    parser = PARSERS[source]
    try:
        return parser(program, tx, keep_unknown=keep_unknown)
    except MetadataError as e:
        logger.error(f"Error parsing program event: {e} -- sig: {tx.signature}")
        return []


def format_swap(swap: SwapEvent, signature: str) -> str:
    return f"{swap.pair()} -- sig: {signature}"


class PairCounter:
    """Occurrences of each directional token-account pair."""

    def __init__(self):
        self.pairs: Counter = Counter()
        self.transactions: int = 0

    def record(self, swap: SwapEvent | None):
        self.transactions += 1
        if swap is not None:
            self.pairs[swap.pair()] += 1

    def top(self, n: int = 20) -> list[tuple[str, int]]:
        return self.pairs.most_common(n)

    def report(self) -> str:
        lines = [f"Pairs ({len(self.pairs)} distinct / {self.transactions} txs):"]
        lines.extend(f"  {count:>6}  {pair}" for pair, count in self.top())
        return "\n".join(lines)
