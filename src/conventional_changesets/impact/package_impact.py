"""
Package impact resolution.

Given the files a logical unit changed, decide which workspace packages
it touches. Files matching an ignore pattern are dropped first. A file
belongs to a package when it lies inside the package directory, compared
segment by segment so that ``packages/ui`` does not claim files of
``packages/ui-kit``.
"""

from __future__ import annotations

import fnmatch
import logging
import posixpath
import re
from typing import Iterable, List, Optional, Pattern, Sequence, Union

from conventional_changesets.grouping.group_model import LogicalUnit
from conventional_changesets.packages.discovery import Package
from conventional_changesets.vcs.git_client import GitClient


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


IgnorePattern = Union[str, Pattern[str]]


def matches_pattern(path: str, pattern: IgnorePattern) -> bool:
    """Return True if ``path`` matches an ignore pattern.

    Compiled regular expressions are searched anywhere in the path. A
    string matches as a shell glob against the whole path or its basename
    (``*.lock``), or as a regular expression found anywhere in the path
    (``package1/(.*).ts``) when it compiles as one.
    """
    if not isinstance(pattern, str):
        return pattern.search(path) is not None

    if fnmatch.fnmatchcase(path, pattern) or fnmatch.fnmatchcase(posixpath.basename(path), pattern):
        return True
    try:
        return re.search(pattern, path) is not None
    except re.error:
        return False


def filter_files(files: Iterable[str], ignored_patterns: Sequence[IgnorePattern]) -> List[str]:
    """Drop every file that matches any of ``ignored_patterns``."""
    return [
        file for file in files if not any(matches_pattern(file, pattern) for pattern in ignored_patterns)
    ]


def _normalise(path: str) -> str:
    return path.replace("\\", "/").strip("/")


def _relative_dir(package_dir: str, repo_root: str) -> str:
    package_dir = package_dir.replace("\\", "/")
    repo_root = repo_root.replace("\\", "/").rstrip("/")
    if package_dir == repo_root:
        return ""
    if repo_root and package_dir.startswith(repo_root + "/"):
        package_dir = package_dir[len(repo_root) + 1:]
    return _normalise(posixpath.normpath(package_dir)) if package_dir else ""


def _in_directory(file: str, directory: str) -> bool:
    if directory in ("", "."):
        return True
    return file == directory or file.startswith(directory + "/")


def get_changed_packages(
    files_changed: Iterable[str],
    packages: Iterable[Package],
    repo_root: str,
) -> List[Package]:
    """Return the packages, in input order, containing at least one changed file.

    Package directories may be absolute (``repo_root`` is stripped) or
    already relative to the repository root.
    """
    files = [_normalise(file) for file in files_changed]
    changed = []
    for pkg in packages:
        directory = _relative_dir(pkg.dir, repo_root)
        if any(_in_directory(file, directory) for file in files):
            changed.append(pkg)
    return changed


def resolve_changed_packages(
    client: GitClient,
    unit: LogicalUnit,
    packages: Sequence[Package],
    ignored_patterns: Sequence[IgnorePattern] = (),
    repo_root: Optional[str] = None,
) -> List[Package]:
    """Return the packages touched by the commits of ``unit``.

    ``repo_root`` may be passed in to avoid asking Git for it once per unit.
    """
    files = client.get_changed_files(unit.first_hash, unit.last_hash)
    files = filter_files(files, ignored_patterns)
    if not files:
        logger.debug("No relevant files changed by '%s'", unit.message.splitlines()[0] if unit.message else "")
        return []
    if repo_root is None:
        repo_root = client.get_repo_root()
    return get_changed_packages(files, packages, repo_root)
