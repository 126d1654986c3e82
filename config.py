"""
Settings for the swap stream drivers, read from the environment and .env.
"""
import os
from dotenv import load_dotenv

load_dotenv()


# ── ChainStream ─────────────────────────────────────────────────
# Get a token from the Syndica dashboard, then: export SYNDICA_TOKEN=<token>
SYNDICA_TOKEN = os.getenv("SYNDICA_TOKEN", "")
CHAINSTREAM_WSS = os.getenv("CHAINSTREAM_WSS", "wss://chainstream.api.syndica.io")
CHAINSTREAM_NETWORK = os.getenv("CHAINSTREAM_NETWORK", "solana-mainnet")
CHAINSTREAM_VERIFIED = os.getenv("CHAINSTREAM_VERIFIED", "false").lower() == "true"
CHAINSTREAM_EXCLUDE_VOTES = os.getenv("CHAINSTREAM_EXCLUDE_VOTES", "true").lower() == "true"

# ── WebSocket ───────────────────────────────────────────────────
# Heartbeat matters on low-traffic programs; set 0 to disable.
WS_PING_INTERVAL_S = float(os.getenv("WS_PING_INTERVAL_S", "30"))
WS_MAX_MSG_SIZE = int(os.getenv("WS_MAX_MSG_SIZE", "0"))  # 0 = no limit
RECONNECT_MAX_BACKOFF_S = float(os.getenv("RECONNECT_MAX_BACKOFF_S", "30"))

# ── Decoder ─────────────────────────────────────────────────────
# Raydium CLMM by default; any program using Anchor emit_cpi! works.
TARGET_PROGRAM = os.getenv(
    "TARGET_PROGRAM", "CAMMCzo5YL8w4VFF8KVHrK22GGUsp5VTaW7grrKgrWqK"
)
# "cpi" = self-invocation inner instructions, "logs" = Program data: lines
EVENT_SOURCES = ("cpi", "logs")
EVENT_SOURCE = os.getenv("EVENT_SOURCE", "cpi").lower()
if EVENT_SOURCE not in EVENT_SOURCES:
    raise ValueError(f"EVENT_SOURCE must be one of {EVENT_SOURCES}, got {EVENT_SOURCE!r}")
KEEP_UNKNOWN_EVENTS = os.getenv("KEEP_UNKNOWN_EVENTS", "false").lower() == "true"

# ── Pair counter ────────────────────────────────────────────────
PAIR_REPORT_INTERVAL_S = float(os.getenv("PAIR_REPORT_INTERVAL_S", "1"))

# ── Logging ────────────────────────────────────────────────────
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
