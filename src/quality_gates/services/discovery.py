"""Bounded discovery of recently modified source files.

Used when a validation run is started without an explicit changed-file
list.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)

_SKIPPED_DIRS = frozenset({"node_modules", "dist", "build", "coverage", ".git", ".next"})


def discover_recent_files(
    root: str | Path,
    extensions: Iterable[str],
    limit: int = 10,
) -> list[str]:
    """Return up to *limit* source files under *root*, newest first.

    Parameters
    ----------
    root:
        Directory to scan.  A missing directory yields an empty list.
    extensions:
        File suffixes to include, e.g. ``(".tsx", ".ts")``.
    limit:
        Maximum number of paths returned.
    """
    base = Path(root)
    if not base.is_dir():
        logger.warning("discover_recent_files: %s is not a directory", base)
        return []

    suffixes = set(extensions)
    candidates: list[tuple[float, str]] = []
    for dirpath, dirnames, filenames in os.walk(base):
        # prune in place so skipped trees are never entered
        dirnames[:] = [d for d in dirnames if d not in _SKIPPED_DIRS]
        for filename in filenames:
            path = Path(dirpath, filename)
            if path.suffix in suffixes and path.is_file():
                candidates.append((path.stat().st_mtime, str(path)))

    # newest first, path as tie-break so the selection is deterministic
    candidates.sort(key=lambda item: (-item[0], item[1]))
    selected = [p for _, p in candidates[:limit]]
    logger.debug("discover_recent_files: %d of %d files selected", len(selected), len(candidates))
    return selected
