"""
Tally directional CLMM swap pairs and log the running counts.

Usage:
    export SYNDICA_TOKEN=<your_token>
    PAIR_REPORT_INTERVAL_S=5 python swap_stream_count.py
Ctrl-C prints the final tally and exits.
"""
import asyncio
import logging
import signal as signal_module

import config
import swap_feed
from raydium.parse import leading_swap

logger = logging.getLogger("pair_count")


async def consume(client, request, counter: swap_feed.PairCounter):
    async for tx in client.transactions(request):
        counter.record(leading_swap(swap_feed.decode_transaction(tx)))
    logger.error("Transaction stream ended")


async def report_loop(counter: swap_feed.PairCounter, client):
    while True:
        await asyncio.sleep(config.PAIR_REPORT_INTERVAL_S)
        logger.info(counter.report())
        logger.info(f"Stream: {client.stats()}")


async def main():
    swap_feed.setup_logging()
    token = swap_feed.require_token()
    request = swap_feed.build_request()
    client = swap_feed.build_client(token)
    counter = swap_feed.PairCounter()

    tasks = [
        asyncio.create_task(consume(client, request, counter), name="consume"),
        asyncio.create_task(report_loop(counter, client), name="report"),
    ]
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal_module.SIGINT, signal_module.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    stopper = asyncio.create_task(stop.wait(), name="stop")
    done, _ = await asyncio.wait(tasks + [stopper], return_when=asyncio.FIRST_COMPLETED)
    for task in done:
        if task is not stopper and task.exception():
            logger.error(f"Task {task.get_name()} crashed: {task.exception()!r}")

    logger.info("Shutting down...")
    for task in tasks + [stopper]:
        task.cancel()
    await asyncio.gather(*tasks, stopper, return_exceptions=True)
    await client.close()
    logger.info(counter.report())
    logger.info(f"Stream: {client.stats()}")


if __name__ == "__main__":
    asyncio.run(main())
