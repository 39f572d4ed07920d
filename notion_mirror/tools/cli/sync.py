"""
Bidirectional sync commands.
"""
from __future__ import annotations

from pathlib import Path

from typer import Context, Exit, Option

from ...core.exceptions import MissingTitlePropertyError
from ...sync import SyncEngine, SyncStats, run_daemon
from ...sync.daemon import MIN_INTERVAL
from ._utils import MainTyper, get_root_context, logger

app = MainTyper(
    "sync",
    help="Bidirectional sync between Notion and the local mirror",
)


@app.command()
def once(
    ctx: Context,
    root_dir: Path
    | None = Option(
        None,
        "--dir",
        help="Sync root folder, overriding --sync-dir",
        file_okay=False,
    ),
):
    """
    Run one sync pass over all databases visible to the integration
    """
    engine = _create_engine(ctx, root_dir)

    try:
        stats = engine.sync_all_databases()
    except Exception as e:
        logger.error(f"Sync failed: {e}")
        raise Exit(code=1)

    logger.info(f"Sync completed in '{engine.root}': {_format_stats(stats)}")


@app.command("db")
def db_(
    ctx: Context,
    database_id: str = Option(..., "--id", help="Database id"),
    root_dir: Path
    | None = Option(
        None,
        "--dir",
        help="Sync root folder, overriding --sync-dir",
        file_okay=False,
    ),
):
    """
    Run one sync pass over a single database
    """
    engine = _create_engine(ctx, root_dir)

    try:
        stats = engine.sync_database(database_id)
    except MissingTitlePropertyError as e:
        logger.error(str(e))
        raise Exit(code=1)

    logger.info(f"Synced database {database_id}: {_format_stats(stats)}")


@app.command()
def run(
    ctx: Context,
    root_dir: Path
    | None = Option(
        None,
        "--dir",
        help="Sync root folder, overriding --sync-dir",
        file_okay=False,
    ),
    interval: float = Option(
        60.0,
        help=f"Seconds between the start of passes, at least {MIN_INTERVAL:g}",
    ),
):
    """
    Run sync passes in a loop until interrupted
    """
    engine = _create_engine(ctx, root_dir)
    interval = max(MIN_INTERVAL, interval)

    logger.info(
        f"Sync daemon started in '{engine.root}', interval {interval:g}s"
    )

    try:
        run_daemon(engine, interval, logger=logger)
    except KeyboardInterrupt:
        logger.info("Sync daemon stopped")


def _create_engine(ctx: Context, root_dir: Path | None) -> SyncEngine:
    root_context = get_root_context(ctx)
    root = root_dir or root_context.instance.sync_dir
    return SyncEngine(root_context.session, root, logger=logger)


def _format_stats(stats: SyncStats) -> str:
    return (
        f"{stats.database_count} databases, {stats.pull_count} pulled, "
        f"{stats.push_count} pushed, {stats.discard_count} discarded, "
        f"{stats.fail_count} failed"
    )
