#!/usr/bin/env python3
"""
Gazette - Main Entry Point
Weekly market digest: ask the LLM, archive the answer, post it to Telegram.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from dataclasses import replace
from datetime import date
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from common.watchtower import Watchtower, WatchtowerHandler
from gazette.config import Config, ConfigError, load_config
from gazette.pipeline import DigestRun, default_steps, run_digest, telegram_step
from gazette.providers import ProviderError, create_provider
from gazette.segmenter import split_digest
from gazette.storage import format_date, read_digest, today_utc
from gazette.telegram import DeliveryError
from gazette.vcs import CommitError

console = Console()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
log = logging.getLogger("gazette")

# Failures that end a run with exit status 1.
RUN_ERRORS = (ConfigError, ProviderError, DeliveryError, CommitError, OSError)


def _init_watchtower(config: Config, run_id: str) -> WatchtowerHandler | None:
    """Mirror log records into the Watchtower database. Returns the handler or None."""
    if not config.watchtower_enabled:
        return None
    db_path = Path(config.data_dir).expanduser() / "watchtower.db"
    try:
        wt = Watchtower(db_path)
    except OSError as e:
        log.warning("Watchtower disabled, cannot open %s: %s", db_path, e)
        return None
    handler = WatchtowerHandler(wt, source="gazette", run_id=run_id)
    logging.getLogger().addHandler(handler)
    log.info("Watchtower logging enabled (%s)", db_path)
    return handler


def _close_watchtower(handler: WatchtowerHandler | None) -> None:
    if handler is None:
        return
    logging.getLogger().removeHandler(handler)
    handler.close()


def _parse_date(ctx, param, value: str | None) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise click.BadParameter("expected YYYY-MM-DD") from None


def _fail(error: Exception) -> None:
    log.error("%s: %s", type(error).__name__, error)
    console.print(f"[red]Error:[/red] {error}")
    sys.exit(1)


@click.group()
def cli():
    """Gazette - weekly market digest."""


@cli.command()
@click.option('--send/--no-send', default=None, help='Deliver to Telegram (overrides TELEGRAM_ENABLED)')
@click.option('--commit/--no-commit', default=None, help='git commit the digest (overrides GIT_COMMIT)')
@click.option('--date', 'run_date', callback=_parse_date, help='Run date, YYYY-MM-DD (default: today, UTC)')
def run(send, commit, run_date):
    """Generate this week's digest, save it, then deliver/commit it."""
    run_date = run_date or today_utc()
    try:
        config = load_config(telegram_enabled=send, git_commit=commit)
    except ConfigError as e:
        _fail(e)

    handler = _init_watchtower(config, format_date(run_date))
    try:
        provider = create_provider(config)
        result = asyncio.run(
            run_digest(config, provider, default_steps(config), run_date=run_date)
        )
    except RUN_ERRORS as e:
        _fail(e)
    finally:
        _close_watchtower(handler)

    console.print(f"[green]✓[/green] Digest for {result.run_id} saved to [bold]{result.path}[/bold]")
    console.print(f"[dim]{len(result.text)} chars[/dim]")


@cli.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
def send(path):
    """Deliver an existing digest file to Telegram."""
    try:
        config = load_config(telegram_enabled=True, require_openai=False)
    except ConfigError as e:
        _fail(e)

    try:
        run_date = date.fromisoformat(path.stem)
    except ValueError:
        run_date = today_utc()

    handler = _init_watchtower(config, format_date(run_date))
    try:
        digest = DigestRun(run_date=run_date, text=read_digest(path), path=path)
        asyncio.run(telegram_step(config)(digest))
    except RUN_ERRORS as e:
        _fail(e)
    finally:
        _close_watchtower(handler)

    console.print(f"[green]✓[/green] Delivered {path}")


@cli.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--threshold', type=int, default=None, help='Segment size threshold (default: SEGMENT_THRESHOLD)')
@click.option('--hard-limit', type=int, default=None, help='Channel hard limit (default: SEGMENT_HARD_LIMIT)')
def split(path, threshold, hard_limit):
    """Preview how a digest file would be segmented (no network)."""
    try:
        config = load_config(telegram_enabled=False, require_openai=False)
    except ConfigError as e:
        _fail(e)

    try:
        seg_config = replace(
            config.segmenter,
            threshold=config.segmenter.threshold if threshold is None else threshold,
            hard_limit=config.segmenter.hard_limit if hard_limit is None else hard_limit,
        )
    except ValueError as e:
        raise click.BadParameter(str(e)) from None

    segments = split_digest(read_digest(path), seg_config)

    table = Table(title=f"{path.name}: {len(segments)} segment(s)")
    table.add_column("Part", justify="right")
    table.add_column("Chars", justify="right")
    table.add_column("Sent", justify="right")
    table.add_column("Starts with")
    for s in segments:
        preview = s.text[:60].replace("\n", " ")
        table.add_row(str(s.index), str(len(s.text)), str(len(s.render())), preview)
    console.print(table)


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
