"""Dated digest files and the git commit step."""

import subprocess
from datetime import date

import pytest

from gazette import vcs
from gazette.storage import digest_path, format_date, read_digest, write_digest
from gazette.vcs import CommitError, commit_message, git_commit


def test_format_date():
    assert format_date(date(2025, 1, 5)) == "2025-01-05"


def test_write_creates_directory_and_adds_newline(tmp_dir):
    out = tmp_dir / "nested" / "summaries"
    path = write_digest("# Огляд", out, date(2025, 3, 7))

    assert path == out / "2025-03-07.md"
    assert path.read_text(encoding="utf-8") == "# Огляд\n"


def test_write_overwrites_same_day(tmp_dir):
    write_digest("first", tmp_dir, date(2025, 3, 7))
    path = write_digest("second", tmp_dir, date(2025, 3, 7))
    assert path.read_text(encoding="utf-8") == "second\n"


def test_read_digest_round_trip(tmp_dir):
    path = write_digest("line one\nline two", tmp_dir, date(2025, 3, 7))
    assert read_digest(path) == "line one\nline two"


def test_digest_path(tmp_dir):
    assert digest_path(tmp_dir, date(2024, 12, 31)).name == "2024-12-31.md"


# ---------------------------------------------------------------------------
# git
# ---------------------------------------------------------------------------

@pytest.fixture
def git_calls(monkeypatch):
    calls = []

    def fake_run(args, **kwargs):
        calls.append((args, kwargs))
        return subprocess.CompletedProcess(args, 0, "", "")

    monkeypatch.setattr(vcs.subprocess, "run", fake_run)
    return calls


def test_commit_message():
    assert commit_message(date(2025, 10, 20)) == "Add weekly summary for 2025-10-20"


def test_git_commit_stages_only_the_file(tmp_dir, git_calls):
    path = tmp_dir / "2025-10-20.md"
    git_commit(path, date(2025, 10, 20), repo_dir=tmp_dir)

    target = str(path.resolve())
    assert [c[0] for c in git_calls] == [
        ["git", "add", "--", target],
        ["git", "commit", "-m", "Add weekly summary for 2025-10-20", "--", target],
    ]
    assert all(c[1]["cwd"] == str(tmp_dir) for c in git_calls)
    assert all(c[1]["check"] is True for c in git_calls)


def test_git_failure_raises_commit_error(tmp_dir, monkeypatch):
    def fake_run(args, **kwargs):
        raise subprocess.CalledProcessError(128, args, stderr="fatal: not a git repository")

    monkeypatch.setattr(vcs.subprocess, "run", fake_run)
    with pytest.raises(CommitError, match="not a git repository"):
        git_commit(tmp_dir / "x.md", date(2025, 1, 1), repo_dir=tmp_dir)


def test_missing_git_raises_commit_error(tmp_dir, monkeypatch):
    def fake_run(args, **kwargs):
        raise FileNotFoundError("git")

    monkeypatch.setattr(vcs.subprocess, "run", fake_run)
    with pytest.raises(CommitError, match="not found"):
        git_commit(tmp_dir / "x.md", date(2025, 1, 1), repo_dir=tmp_dir)
