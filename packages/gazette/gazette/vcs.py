from __future__ import annotations

import logging
import subprocess
from datetime import date
from pathlib import Path

from gazette.storage import format_date

log = logging.getLogger(__name__)


class CommitError(RuntimeError):
    """git add / git commit exited non-zero (or git is missing)."""


def commit_message(run_date: date) -> str:
    return f"Add weekly summary for {format_date(run_date)}"


def _git(args: list[str], repo_dir: str | Path) -> None:
    try:
        subprocess.run(
            ["git", *args],
            cwd=str(Path(repo_dir).expanduser()),
            check=True,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as e:
        raise CommitError("git executable not found") from e
    except subprocess.CalledProcessError as e:
        detail = (e.stderr or e.stdout or "").strip()
        raise CommitError(f"git {args[0]} failed (exit {e.returncode}): {detail}") from e


def git_commit(path: str | Path, run_date: date, repo_dir: str | Path = ".") -> None:
    """Stage exactly *path* and commit it with a dated message."""
    target = str(Path(path).expanduser().resolve())
    _git(["add", "--", target], repo_dir)
    _git(["commit", "-m", commit_message(run_date), "--", target], repo_dir)
    log.info("Committed %s", path)
