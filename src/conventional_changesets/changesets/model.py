"""
Data models for changesets.

A :class:`Changeset` declares which packages need a version bump, at
which severity, and with which human-readable summary.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Union

from conventional_changesets.packages.discovery import Package
from conventional_changesets.release.rules import Severity


@dataclass(frozen=True)
class Release:
    """A single package bump inside a changeset."""

    name: str
    type: Union[Severity, str]


@dataclass
class Changeset:
    """Representation of a changeset.

    Attributes
    ----------
    releases : List[Release]
        Package bumps, in package order.
    summary : str
        The commit message the changeset was derived from.
    packages_changed : List[Package]
        Packages the changes touched. Empty for changesets read from disk.
    """

    releases: List[Release]
    summary: str
    packages_changed: List[Package] = field(default_factory=list)


def _strip_trailing_newline(text: str) -> str:
    return text[:-1] if text.endswith("\n") else text


def changesets_equal(candidate: Changeset, persisted: Changeset) -> bool:
    """Return True if ``candidate`` is already recorded as ``persisted``.

    Summaries are compared after removing one trailing newline from the
    candidate (persisted summaries are stored trimmed); releases must be
    equal element by element, in order.
    """
    return (
        _strip_trailing_newline(candidate.summary) == persisted.summary
        and list(candidate.releases) == list(persisted.releases)
    )
