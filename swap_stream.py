"""
Print the first CLMM swap of every transaction that touches the program.

Usage:
    export SYNDICA_TOKEN=<your_token>
    python swap_stream.py
Output:
    <token_account_0> -> <token_account_1> -- sig: <signature>
"""
import asyncio
import logging
import signal as signal_module

import swap_feed
from raydium.parse import leading_swap

logger = logging.getLogger("swap_stream")


async def run(client, request):
    async for tx in client.transactions(request):
        swap = leading_swap(swap_feed.decode_transaction(tx))
        if swap is not None:
            print(swap_feed.format_swap(swap, tx.signature), flush=True)


async def main():
    swap_feed.setup_logging()
    token = swap_feed.require_token()
    request = swap_feed.build_request()
    client = swap_feed.build_client(token)

    task = asyncio.create_task(run(client, request), name="swap_stream")
    loop = asyncio.get_running_loop()
    for sig in (signal_module.SIGINT, signal_module.SIGTERM):
        loop.add_signal_handler(sig, task.cancel)

    try:
        await task
    except asyncio.CancelledError:
        logger.info("Shutting down...")
    finally:
        await client.close()


if __name__ == "__main__":
    asyncio.run(main())
