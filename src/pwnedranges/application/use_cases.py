from __future__ import annotations
import asyncio, time
from collections import deque
from dataclasses import dataclass
from typing import Iterable, Iterator

from ..domain.models import RunStats
from ..domain.value_types import ShardKey
from ..log import get_logger
from ..ports.fetch import RangeFetcher
from ..ports.progress import NullProgress, ProgressReporter
from ..ports.storage import RecordSink

logger = get_logger(__name__)

_DONE = object()   # producer finished; nothing follows on the relay


@dataclass(slots=True, frozen=True)
class _Failed:
    error: BaseException


def _launch(fetcher: RangeFetcher, keys: Iterator[ShardKey]) -> asyncio.Task | None:
    key = next(keys, None)
    if key is None:
        return None
    return asyncio.create_task(fetcher.fetch(key), name=f"range-{key}")


async def _abandon(tasks: Iterable[asyncio.Task]) -> None:
    tasks = list(tasks)
    for t in tasks:
        t.cancel()
    # only waits for the cancellations to land, never for the requests
    await asyncio.gather(*tasks, return_exceptions=True)


async def _produce_ordered(
    fetcher: RangeFetcher, keys: Iterator[ShardKey], relay: asyncio.Queue,
    concurrency: int, progress: ProgressReporter,
) -> None:
    """Hand results over strictly in key order; later completions wait at the head."""
    window: deque[asyncio.Task] = deque()
    try:
        while len(window) < concurrency and (t := _launch(fetcher, keys)) is not None:
            window.append(t)
        while window:
            key, body = await window[0]
            window.popleft()
            if (t := _launch(fetcher, keys)) is not None:
                window.append(t)
            await relay.put((key, body))
            progress.advance(1)
    finally:
        await _abandon(window)


async def _produce_unordered(
    fetcher: RangeFetcher, keys: Iterator[ShardKey], relay: asyncio.Queue,
    concurrency: int, progress: ProgressReporter,
) -> None:
    """Hand results over as they complete; a freed slot always takes the next key."""
    completed: asyncio.Queue[asyncio.Task] = asyncio.Queue()
    running: set[asyncio.Task] = set()

    def launch() -> bool:
        t = _launch(fetcher, keys)
        if t is None:
            return False
        running.add(t)
        t.add_done_callback(completed.put_nowait)
        return True

    try:
        while len(running) < concurrency and launch():
            pass
        while running:
            t = await completed.get()
            running.discard(t)
            key, body = t.result()
            launch()
            await relay.put((key, body))
            progress.advance(1)
    finally:
        await _abandon(running)


async def _produce(
    fetcher: RangeFetcher, keys: Iterable[ShardKey], relay: asyncio.Queue, *,
    ordered: bool, concurrency: int, progress: ProgressReporter,
) -> None:
    run = _produce_ordered if ordered else _produce_unordered
    try:
        await run(fetcher, iter(keys), relay, concurrency, progress)
    except Exception as e:
        # queued behind every result already relayed, so the consumer drains those first
        await relay.put(_Failed(e))
        return
    await relay.put(_DONE)


async def run_pipeline(
    *,
    fetcher: RangeFetcher,
    sink: RecordSink,
    shard_keys: Iterable[ShardKey],
    ordered: bool = False,
    concurrency: int = 1000,
    relay_capacity: int = 1000,
    progress: ProgressReporter | None = None,
) -> RunStats:
    """
    Fetch every shard, push (key, body) through a bounded relay, write it to `sink`.

    The producer task keeps up to `concurrency` fetches in flight; a full relay
    suspends it. The first fatal error stops new launches, abandons what is in
    flight and is re-raised here after the already-relayed results have been
    written. The sink is flushed exactly once, only on success.
    """
    if concurrency < 1:
        raise ValueError(f"concurrency must be >= 1 (got {concurrency})")
    if relay_capacity < 1:
        raise ValueError(f"relay_capacity must be >= 1 (got {relay_capacity})")

    relay: asyncio.Queue = asyncio.Queue(maxsize=relay_capacity)
    t0 = time.monotonic()
    producer = asyncio.create_task(_produce(
        fetcher, shard_keys, relay,
        ordered=ordered, concurrency=concurrency, progress=progress or NullProgress(),
    ))

    shards = records = 0
    try:
        while True:
            item = await relay.get()
            if item is _DONE:
                break
            if isinstance(item, _Failed):
                logger.error("aborting run after %d shards: %s", shards, item.error)
                raise item.error
            key, body = item
            records += sink.write(key, body)
            shards += 1
        sink.flush()
    finally:
        if not producer.done():
            producer.cancel()
        await asyncio.gather(producer, return_exceptions=True)

    stats = RunStats(shards=shards, records=records, ordered=ordered,
                     elapsed_s=time.monotonic() - t0)
    logger.info("wrote %d records from %d shards in %.1fs", records, shards, stats.elapsed_s)
    return stats
