# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Mirrowel

"""Git branch and tag lookup for the current working directory."""

import subprocess
from pathlib import Path
from typing import Optional, Union

PathLike = Union[str, Path]


def current_branch(cwd: Optional[PathLike] = None) -> str:
    """Branch name from .git/HEAD, or "" outside a repo or on a detached HEAD."""
    head = Path(cwd or ".") / ".git" / "HEAD"
    try:
        content = head.read_text(encoding="utf-8").strip()
    except OSError:
        return ""
    prefix = "ref: refs/heads/"
    if content.startswith(prefix):
        return content[len(prefix):]
    return ""


def current_tag(cwd: Optional[PathLike] = None, timeout: float = 2.0) -> str:
    """First tag pointing at HEAD, or "" when HEAD is untagged."""
    try:
        result = subprocess.run(
            ["git", "tag", "--points-at", "HEAD"],
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except (subprocess.TimeoutExpired, OSError):
        return ""
    if result.returncode != 0:
        return ""
    # Several tags may point at HEAD; take the first
    return result.stdout.strip().split("\n", 1)[0]
