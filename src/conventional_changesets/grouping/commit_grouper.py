"""
Folding of commits into logical units.

Non-conventional commits (merge commits, fixups, "wip") carry no release
intent of their own, but the files they touch still belong to the
conventional commit they accompany. :func:`group_commits` therefore
attaches every such commit to the nearest conventional commit, so that
file impact detection later sees the whole range of changes.
"""

from __future__ import annotations

import re
from typing import Iterable, List

from .group_model import Commit, LogicalUnit


# Conventional Commit types recognised when grouping.
COMMIT_TYPES = (
    "feat",
    "feature",
    "fix",
    "perf",
    "revert",
    "docs",
    "style",
    "chore",
    "refactor",
    "test",
    "build",
    "ci",
)

_CONVENTIONAL_RE = re.compile(r"^(?:%s)(?:\(.*\))?!?:" % "|".join(COMMIT_TYPES))


def is_conventional_commit(message: str) -> bool:
    """Return True if ``message`` starts with a recognised type prefix.

    The prefix is a known type, an optional parenthesised scope, an
    optional ``!`` breaking marker and a colon, e.g. ``feat(api)!:``.
    """
    return _CONVENTIONAL_RE.match(message) is not None


def group_commits(commits: Iterable[Commit]) -> List[LogicalUnit]:
    """Partition ``commits`` (oldest first) into logical units.

    The first commit always opens a unit, conventional or not. After that:

    - a conventional commit opens a new unit when the current unit is
      already labelled with a conventional message;
    - a conventional commit relabels the current unit when its message is
      not conventional, and joins it;
    - a non-conventional commit joins the current unit unchanged.

    Returns
    -------
    List[LogicalUnit]
        Units in source order; each unit's hashes keep source order.
    """
    units: List[LogicalUnit] = []
    for commit in commits:
        if not units:
            units.append(LogicalUnit(message=commit.message, hashes=[commit.hash]))
            continue

        current = units[-1]
        if is_conventional_commit(commit.message):
            if is_conventional_commit(current.message):
                units.append(LogicalUnit(message=commit.message, hashes=[commit.hash]))
            else:
                current.message = commit.message
                current.hashes.append(commit.hash)
        else:
            current.hashes.append(commit.hash)
    return units
