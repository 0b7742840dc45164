import asyncio, os, sys
import click
from pydantic import ValidationError
from rich.console import Console

from .adapters.output_sink import STDOUT, open_sink
from .adapters.progress_rich import RichProgress
from .adapters.range_httpx import HttpxRangeFetcher
from .application.planning import iter_shard_keys, total_shards
from .application.retry import RetryingFetcher
from .application.use_cases import run_pipeline
from .config import Settings
from .domain.errors import RangeError, SinkError
from .domain.models import RunStats
from .log import get_logger, setup_logging

__version__ = "0.1.0"

console = Console(stderr=True)
logger = get_logger(__name__)


def build_fetcher(settings: Settings) -> HttpxRangeFetcher:
    return HttpxRangeFetcher(
        settings.base_url,
        timeout_s=settings.timeout_s,
        concurrency=settings.concurrency,
        http2=settings.http2,
        keepalive_expiry_s=settings.keepalive_expiry_s,
        user_agent=settings.user_agent,
    )


async def download(settings: Settings, *, output: str, fmt: str, ordered: bool) -> RunStats:
    """Build fetcher and sink, run every shard through the pipeline, close both."""
    fetcher = build_fetcher(settings)
    try:
        sink = open_sink(output, fmt)
        try:
            pipeline = dict(
                fetcher=RetryingFetcher(fetcher, attempts=settings.max_attempts),
                sink=sink,
                shard_keys=iter_shard_keys(),
                ordered=ordered,
                concurrency=settings.concurrency,
                relay_capacity=settings.relay_capacity,
            )
            # stdout carries the data, so the bar only shows up for file output
            if output == STDOUT:
                stats = await run_pipeline(**pipeline)
            else:
                with RichProgress(total_shards(), description=os.path.basename(output), console=console) as progress:
                    stats = await run_pipeline(progress=progress, **pipeline)
        except BaseException:
            # the run error is the one to report, not a failed close behind it
            try:
                sink.close()
            except SinkError as e:
                logger.warning("could not close %s after a failed run: %s", output, e)
            raise
        sink.close()
        return stats
    finally:
        await fetcher.aclose()


@click.command()
@click.version_option(__version__, prog_name="pwnedranges")
@click.option("-o", "--output", default=STDOUT, show_default=True,
              help="Where to write the dataset: '-' for stdout, otherwise a file path")
@click.option("-f", "--format", "fmt", type=click.Choice(["text", "binary"]), default="text",
              show_default=True, help="Output format. Only affects file output.")
@click.option("-s", "--sorted/--unsorted", "ordered", default=False, show_default=True,
              help="Emit ranges in key order instead of completion order")
@click.option("--concurrency", type=int, default=None, help="Max in-flight requests [env PWNEDRANGES_CONCURRENCY, 1000]")
@click.option("--relay-capacity", type=int, default=None, help="Results buffered ahead of the writer [1000]")
@click.option("--attempts", type=int, default=None, help="Attempts per range before giving up [10]")
@click.option("--timeout", "timeout_s", type=float, default=None, help="Per-request timeout in seconds [5]")
@click.option("--base-url", type=str, default=None, help="Range endpoint; the key is appended to it")
@click.option("--log-level", type=str, default=None, help="DEBUG, INFO, WARNING, ...")
def cli(output, fmt, ordered, concurrency, relay_capacity, attempts, timeout_s, base_url, log_level):
    """Download every Pwned Passwords SHA-1 range (00000 … FFFFF) into one dataset."""
    overrides = {
        "concurrency": concurrency, "relay_capacity": relay_capacity, "max_attempts": attempts,
        "timeout_s": timeout_s, "base_url": base_url, "log_level": log_level,
    }
    try:
        settings = Settings(**{k: v for k, v in overrides.items() if v is not None})
    except ValidationError as e:
        raise click.UsageError(str(e))
    setup_logging(settings.log_level, console=console)

    try:
        stats = asyncio.run(download(settings, output=output, fmt=fmt, ordered=ordered))
    except RangeError as e:
        raise click.ClickException(str(e))

    console.print(
        f"[bold]done[/]: {stats.records:,} records from {stats.shards:,} ranges "
        f"• {stats.elapsed_s:.2f}s ({'sorted' if stats.ordered else 'unsorted'})"
    )


def main() -> None:
    """Console entry point: exit straight away on success, skipping interpreter teardown."""
    try:
        cli.main(standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except click.Abort:
        click.echo("Aborted!", err=True)
        sys.exit(1)
    sys.stdout.flush()
    sys.stderr.flush()
    os._exit(0)


if __name__ == "__main__":
    main()
