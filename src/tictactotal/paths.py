"""Path and provenance helpers for exported records.

Environment variables take precedence; otherwise paths resolve against the
nearest git checkout, falling back to the current working directory.
"""

from __future__ import annotations

import os
import subprocess
from pathlib import Path


def _find_git_root(start: Path) -> Path | None:
    for cur in [start, *start.parents][:6]:
        if (cur / ".git").exists():
            return cur
    return None


def repo_root() -> Path:
    """Order: env var T3_REPO_ROOT -> nearest parent containing .git -> CWD."""
    env = os.getenv("T3_REPO_ROOT")
    if env:
        return Path(env)
    git_root = _find_git_root(Path(__file__).resolve())
    return git_root if git_root is not None else Path.cwd()


def data_dir() -> Path:
    p = os.getenv("T3_DATA_DIR")
    return Path(p) if p else repo_root() / "data"


def _git(*args: str) -> str | None:
    try:
        out = subprocess.check_output(
            ["git", "-C", str(repo_root()), *args],
            stderr=subprocess.DEVNULL,
            text=True,
            timeout=2.0,
        )
    except (OSError, subprocess.SubprocessError):
        return None
    return out


def git_commit() -> str | None:
    out = _git("rev-parse", "HEAD")
    return out.strip() if out else None


def git_is_dirty() -> bool | None:
    """True if the checkout has uncommitted changes, None when git is unavailable."""
    out = _git("status", "--porcelain")
    return None if out is None else len(out.strip()) > 0
