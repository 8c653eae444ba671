"""
Changeset assembly.

Each logical unit is classified and mapped to the packages it touched.
Units without a release severity or without package impact produce no
changeset. The candidates are then compared against the changesets
already recorded in the repository so that running the tool twice never
records the same intent twice.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

from conventional_changesets.grouping.group_model import LogicalUnit
from conventional_changesets.impact.package_impact import IgnorePattern, resolve_changed_packages
from conventional_changesets.packages.discovery import Package
from conventional_changesets.release.rules import DEFAULT_RELEASE_RULES, ReleaseRule, classify_release
from conventional_changesets.vcs.git_client import GitClient

from .model import Changeset, Release, changesets_equal


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


def _headline(message: str) -> str:
    lines = message.splitlines()
    return lines[0] if lines else ""


def build_changesets(
    client: GitClient,
    units: Iterable[LogicalUnit],
    packages: Sequence[Package],
    ignored_files: Sequence[IgnorePattern] = (),
    rules: Sequence[ReleaseRule] = DEFAULT_RELEASE_RULES,
) -> List[Changeset]:
    """Turn logical units into changeset candidates.

    Parameters
    ----------
    client : GitClient
        Client of the repository the units were read from.
    units : Iterable[LogicalUnit]
        Logical units in source order.
    packages : Sequence[Package]
        Packages eligible for release.
    ignored_files : Sequence[IgnorePattern]
        Patterns of files whose changes never trigger a release.
    rules : Sequence[ReleaseRule]
        Ordered release rule table.

    Returns
    -------
    List[Changeset]
        One changeset per unit that has both a severity and package impact.
    """
    changesets: List[Changeset] = []
    repo_root = None
    for unit in units:
        severity = classify_release(unit.message, rules)
        if severity is None:
            logger.debug("No release for '%s'", _headline(unit.message))
            continue

        if repo_root is None:
            repo_root = client.get_repo_root()
        changed = resolve_changed_packages(client, unit, packages, ignored_files, repo_root=repo_root)
        if not changed:
            logger.debug("'%s' touches no tracked package", _headline(unit.message))
            continue

        changesets.append(
            Changeset(
                releases=[Release(name=pkg.name, type=severity) for pkg in changed],
                summary=unit.message,
                packages_changed=list(changed),
            )
        )
    return changesets


def difference(candidates: Iterable[Changeset], baseline: Sequence[Changeset]) -> List[Changeset]:
    """Return the candidates that have no equal changeset in ``baseline``.

    Every candidate is compared with every baseline entry; both lists are
    expected to stay small.
    """
    return [
        candidate
        for candidate in candidates
        if not any(changesets_equal(candidate, existing) for existing in baseline)
    ]


def select_new_changesets(candidates: List[Changeset], baseline: Sequence[Changeset]) -> List[Changeset]:
    """Return the candidates not yet recorded; all of them when nothing is recorded."""
    if not baseline:
        return candidates
    return difference(candidates, baseline)
