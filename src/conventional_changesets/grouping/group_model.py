"""
Data models for commit grouping.

A :class:`Commit` is read once per run from git. A :class:`LogicalUnit`
folds one or more commits together under a single representative
conventional commit message.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class Commit:
    """A single commit as read from the repository."""

    hash: str
    message: str


@dataclass
class LogicalUnit:
    """Representation of a group of commits released together.

    Attributes
    ----------
    message : str
        The representative commit message, kept verbatim.
    hashes : List[str]
        Hashes of every commit folded into the unit, oldest first.
    """

    message: str
    hashes: List[str] = field(default_factory=list)

    @property
    def first_hash(self) -> str:
        return self.hashes[0]

    @property
    def last_hash(self) -> str:
        return self.hashes[-1]
