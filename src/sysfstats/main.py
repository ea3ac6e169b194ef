"""
sysfstats entry point.

Usage:
    sysfstats run                       Collect now, then every 24h forever
    sysfstats once --sink jsonl         One round right now
    sysfstats --mock show               Dry run against a fake sysfs tree
    sysfstats history --db stats.db     Reports kept by the sqlite sink
"""

from __future__ import annotations

import logging
from functools import partial

import click
from rich.console import Console

from sysfstats import __version__
from sysfstats.collection import run_round
from sysfstats.collector.file_source import ReadOnlyFileSource, SysfsFileSource
from sysfstats.collector.sysfs_collectors import default_collectors
from sysfstats.config import CollectorConfig, ConfigError, load_config
from sysfstats.dashboard.terminal import print_history, print_round
from sysfstats.mock.fake_sysfs import FakeSysfsTree
from sysfstats.scheduler import Scheduler
from sysfstats.sink.base import MetricsSink
from sysfstats.sink.http_sink import HttpSink
from sysfstats.sink.jsonl_sink import JsonlSink
from sysfstats.sink.memory_sink import MemorySink
from sysfstats.sink.sqlite_sink import SqliteSink

log = logging.getLogger("sysfstats")


def build_sink(config: CollectorConfig) -> MetricsSink:
    if config.sink == "sqlite":
        return SqliteSink(db_path=config.db_path)
    if config.sink == "jsonl":
        return JsonlSink()
    return HttpSink(config.sink_url, timeout_seconds=config.sink_timeout_seconds)


def _apply_sink_options(config: CollectorConfig, sink, url, db):
    if sink:
        config.sink = sink
    if url:
        config.sink_url = url
    if db:
        config.db_path = db


_sink_options = [
    click.option("--sink", type=click.Choice(["http", "sqlite", "jsonl"]), default=None,
                 help="Where to send readings (default: from config, else http)"),
    click.option("--url", default=None, help="Stats service URL for the http sink"),
    click.option("--db", default=None, help="SQLite database path for the sqlite sink"),
]


def sink_options(func):
    for option in reversed(_sink_options):
        func = option(func)
    return func


@click.group()
@click.version_option(version=__version__, prog_name="sysfstats")
@click.option("--config", "config_path", default=None, type=click.Path(dir_okay=False),
              help="JSON config file")
@click.option("--mock", is_flag=True, default=False, help="Read from a generated fake sysfs tree")
@click.option("--verbose", is_flag=True, default=False, help="Enable debug logging")
@click.pass_context
def cli(ctx, config_path: str, mock: bool, verbose: bool):
    """sysfstats - device-health counters from sysfs to a stats service."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        config = load_config(config_path) if config_path else CollectorConfig()
    except ConfigError as e:
        raise click.ClickException(str(e))

    if mock:
        tree = FakeSysfsTree(paths=config.paths).populate()
        config.sysfs_root = tree.root
        ctx.call_on_close(tree.cleanup)
        log.info("Using fake sysfs tree at %s", tree.root)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@cli.command()
@sink_options
@click.option("--no-delay", is_flag=True, default=False, help="Skip the startup delay")
@click.pass_context
def run(ctx, sink: str, url: str, db: str, no_delay: bool):
    """Collect once, then every interval until the timer fails."""
    config: CollectorConfig = ctx.obj["config"]
    _apply_sink_options(config, sink, url, db)

    metrics_sink = build_sink(config)
    files = SysfsFileSource(root=config.sysfs_root)
    collectors = default_collectors(config.paths)

    scheduler = Scheduler(
        partial(run_round, metrics_sink, files, collectors),
        startup_delay=0 if no_delay else config.startup_delay_seconds,
        interval=config.interval_seconds,
    )
    log.info("Reporting to %s every %.0fs", metrics_sink.name(), config.interval_seconds)
    scheduler.run()
    # Only reached when the timer failed; collection has stopped for good
    raise SystemExit(1)


@cli.command()
@sink_options
@click.pass_context
def once(ctx, sink: str, url: str, db: str):
    """Run a single collection round right now."""
    config: CollectorConfig = ctx.obj["config"]
    _apply_sink_options(config, sink, url, db)

    metrics_sink = build_sink(config)
    summary = run_round(metrics_sink, SysfsFileSource(root=config.sysfs_root),
                        default_collectors(config.paths))
    if not summary.sink_available:
        raise SystemExit(1)


@cli.command()
@click.pass_context
def show(ctx):
    """Read and parse every node without reporting or resetting anything."""
    config: CollectorConfig = ctx.obj["config"]

    files = ReadOnlyFileSource(SysfsFileSource(root=config.sysfs_root))
    summary = run_round(MemorySink(), files, default_collectors(config.paths))
    print_round(summary, Console(), title="Current readings (dry run)")


@cli.command()
@click.option("--db", default=None, help="SQLite database path")
@click.option("--limit", default=20, show_default=True, help="Number of reports to show")
@click.pass_context
def history(ctx, db: str, limit: int):
    """Show the most recent reports kept by the sqlite sink."""
    config: CollectorConfig = ctx.obj["config"]
    rows = SqliteSink(db_path=db or config.db_path).history(limit=limit)
    print_history(rows, Console())


if __name__ == "__main__":
    cli()
