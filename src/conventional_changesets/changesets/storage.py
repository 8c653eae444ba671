"""
Reading and writing changeset files.

Changesets are Markdown files in the ``.changeset`` directory of the
repository root. The YAML front matter maps package names to bump types
and the body is the summary::

    ---
    "package1": minor
    ---

    feat: add new feature

``README.md`` in the same directory is documentation, not a changeset.
"""

from __future__ import annotations

import json
import logging
import random
import re
from pathlib import Path
from typing import List, Optional

import yaml

from conventional_changesets.config.loader import CHANGESET_DIR
from conventional_changesets.release.rules import Severity

from .model import Changeset, Release


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# Bump type the release tool accepts for packages listed without a release.
NO_BUMP = "none"


class ChangesetFormatError(Exception):
    """Raised when an existing changeset file cannot be parsed."""

    pass


_FRONT_MATTER_RE = re.compile(r"\A\s*---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)(.*)\Z", re.DOTALL | re.MULTILINE)

_ADJECTIVES = (
    "brave", "calm", "clever", "cool", "eager", "fair", "fresh", "gentle",
    "happy", "honest", "kind", "lazy", "lucky", "mighty", "neat", "polite",
    "proud", "quick", "quiet", "shiny", "silly", "smart", "swift", "tidy",
)
_NOUNS = (
    "apples", "bears", "birds", "boats", "cats", "clouds", "coins", "dogs",
    "eagles", "foxes", "frogs", "geese", "hats", "keys", "lamps", "lions",
    "moons", "owls", "pens", "rivers", "rocks", "seals", "trees", "wolves",
)
_VERBS = (
    "bake", "beam", "clap", "dance", "dream", "drive", "fly", "glow",
    "grin", "hide", "jump", "kneel", "laugh", "listen", "march", "nap",
    "play", "run", "shout", "sing", "sleep", "smile", "swim", "wave",
)


def _changeset_dir(repo_root: Path) -> Path:
    return repo_root / CHANGESET_DIR


def parse_changeset(content: str, source: str = "<string>") -> Changeset:
    """Parse the text of a changeset file.

    Raises:
        ChangesetFormatError: If the front matter is absent or is not a
            mapping of package names to bump types.
    """
    match = _FRONT_MATTER_RE.match(content)
    if not match:
        raise ChangesetFormatError(f"{source}: missing front matter")

    front_matter, body = match.groups()
    try:
        data = yaml.safe_load(front_matter) or {}
    except yaml.YAMLError as exc:
        raise ChangesetFormatError(f"{source}: invalid front matter: {exc}") from exc
    if not isinstance(data, dict):
        raise ChangesetFormatError(f"{source}: front matter must map package names to bump types")

    releases = []
    for name, bump in data.items():
        if bump == NO_BUMP:
            releases.append(Release(name=str(name), type=NO_BUMP))
            continue
        try:
            releases.append(Release(name=str(name), type=Severity(bump)))
        except ValueError as exc:
            raise ChangesetFormatError(f"{source}: invalid bump type {bump!r} for {name}") from exc
    return Changeset(releases=releases, summary=body.strip())


def format_changeset(changeset: Changeset) -> str:
    """Render a changeset as the text of a changeset file."""
    lines = ["---"]
    for release in changeset.releases:
        lines.append(f"{json.dumps(release.name)}: {release.type}")
    lines.append("---")
    lines.append("")
    lines.append(changeset.summary.strip())
    return "\n".join(lines) + "\n"


def read_changesets(repo_root: Path) -> List[Changeset]:
    """Return every changeset recorded under ``repo_root``, sorted by file name."""
    directory = _changeset_dir(repo_root)
    if not directory.is_dir():
        logger.debug("No changeset directory at %s", directory)
        return []

    changesets = []
    for path in sorted(directory.glob("*.md")):
        if path.name.lower() == "readme.md":
            continue
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ChangesetFormatError(f"Unable to read {path}: {exc}") from exc
        changesets.append(parse_changeset(content, source=path.name))
    logger.debug("Read %d existing changesets", len(changesets))
    return changesets


def generate_changeset_id(rng: Optional[random.Random] = None) -> str:
    """Return a random ``adjective-noun-verb`` identifier."""
    rng = rng or random.Random()
    return "-".join((rng.choice(_ADJECTIVES), rng.choice(_NOUNS), rng.choice(_VERBS)))


def write_changeset(changeset: Changeset, repo_root: Path, rng: Optional[random.Random] = None) -> str:
    """Write ``changeset`` to a new file and return its identifier."""
    directory = _changeset_dir(repo_root)
    directory.mkdir(parents=True, exist_ok=True)

    changeset_id = generate_changeset_id(rng)
    while (directory / f"{changeset_id}.md").exists():
        changeset_id = generate_changeset_id(rng)

    path = directory / f"{changeset_id}.md"
    path.write_text(format_changeset(changeset), encoding="utf-8")
    logger.debug("Wrote changeset %s", path)
    return changeset_id
