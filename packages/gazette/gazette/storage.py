from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from pathlib import Path

log = logging.getLogger(__name__)


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def format_date(run_date: date) -> str:
    """ISO ``YYYY-MM-DD``; used for file names, commit messages and run ids."""
    return run_date.isoformat()


def digest_path(output_dir: str | Path, run_date: date) -> Path:
    return Path(output_dir).expanduser() / f"{format_date(run_date)}.md"


def write_digest(content: str, output_dir: str | Path, run_date: date) -> Path:
    """Write *content* plus a trailing newline to ``<output_dir>/YYYY-MM-DD.md``.

    An existing file for the same date is overwritten.
    """
    path = digest_path(output_dir, run_date)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content + "\n", encoding="utf-8")
    log.info("Wrote digest to %s (%d chars)", path, len(content))
    return path


def read_digest(path: str | Path) -> str:
    """Read a saved digest back, dropping the single trailing newline added on write."""
    text = Path(path).expanduser().read_text(encoding="utf-8")
    return text[:-1] if text.endswith("\n") else text
