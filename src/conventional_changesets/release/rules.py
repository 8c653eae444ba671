"""
Ordered release rules for conventional commit messages.

A rule table is an ordered sequence of :class:`ReleaseRule` records and
the first rule matching a message decides its severity. A message whose
type cannot be extracted, or that no rule matches, produces no release
(``None``).

The default table checks for breaking changes before it looks at the
commit type, so ``feat!: drop v1 API`` is a major release even though
``feat`` on its own is minor.
"""

from __future__ import annotations

import enum
import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Sequence

from conventional_changesets.config.loader import ConfigError
from conventional_changesets.grouping.commit_grouper import COMMIT_TYPES


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


class Severity(str, enum.Enum):
    """Semantic version bump, serialised as its lowercase name."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ReleaseRule:
    """One entry of a release rule table.

    Attributes
    ----------
    breaking : bool
        Match messages that announce a breaking change.
    revert : bool
        Match messages starting with ``revert``.
    type : Optional[str]
        Match messages whose commit type equals this value.
    release : Optional[Severity]
        Severity returned when the rule matches; None means "no release".
    """

    breaking: bool = False
    revert: bool = False
    type: Optional[str] = None
    release: Optional[Severity] = None


DEFAULT_RELEASE_RULES: Sequence[ReleaseRule] = (
    ReleaseRule(breaking=True, release=Severity.MAJOR),
    ReleaseRule(revert=True, release=Severity.PATCH),
    ReleaseRule(type="feat", release=Severity.MINOR),
    ReleaseRule(type="feature", release=Severity.MINOR),
    ReleaseRule(type="fix", release=Severity.PATCH),
    ReleaseRule(type="perf", release=Severity.PATCH),
)

_TYPE_RE = re.compile(r"^(\w+)(?:\([^)]*\))?!?:")
_BREAKING_PREFIX_RE = re.compile(r"^(?:%s)(?:\([^)]*\))?!:" % "|".join(COMMIT_TYPES))
BREAKING_CHANGE_TOKEN = "BREAKING CHANGE:"


def extract_commit_type(message: str) -> Optional[str]:
    """Return the leading commit type of ``message`` or None."""
    match = _TYPE_RE.match(message)
    return match.group(1) if match else None


def is_breaking_change(message: str) -> bool:
    """Return True for a ``BREAKING CHANGE:`` footer or a ``type!:`` prefix."""
    return BREAKING_CHANGE_TOKEN in message or _BREAKING_PREFIX_RE.match(message) is not None


def _matches(rule: ReleaseRule, message: str, commit_type: str) -> bool:
    if rule.breaking and is_breaking_change(message):
        return True
    if rule.revert and message.startswith("revert"):
        return True
    return rule.type is not None and rule.type == commit_type


def classify_release(
    message: str,
    rules: Sequence[ReleaseRule] = DEFAULT_RELEASE_RULES,
) -> Optional[Severity]:
    """Return the severity the first matching rule assigns to ``message``.

    Returns None when the message has no commit type or no rule matches.
    """
    commit_type = extract_commit_type(message)
    if commit_type is None:
        return None
    for rule in rules:
        if _matches(rule, message, commit_type):
            return rule.release
    return None


def _parse_rule(index: int, raw: Any) -> ReleaseRule:
    if not isinstance(raw, dict):
        raise ConfigError(f"Release rule #{index} must be an object")
    unknown = set(raw) - {"breaking", "revert", "type", "release"}
    if unknown:
        raise ConfigError(f"Release rule #{index} has unknown keys: {', '.join(sorted(unknown))}")

    breaking = raw.get("breaking", False)
    revert = raw.get("revert", False)
    if not isinstance(breaking, bool) or not isinstance(revert, bool):
        raise ConfigError(f"Release rule #{index}: 'breaking' and 'revert' must be booleans")
    commit_type = raw.get("type")
    if commit_type is not None and not isinstance(commit_type, str):
        raise ConfigError(f"Release rule #{index}: 'type' must be a string")
    if not (breaking or revert or commit_type):
        raise ConfigError(f"Release rule #{index} matches nothing")

    release = raw.get("release")
    if release is not None:
        try:
            release = Severity(release)
        except ValueError as exc:
            raise ConfigError(
                f"Release rule #{index}: 'release' must be one of major, minor, patch or null"
            ) from exc
    return ReleaseRule(breaking=breaking, revert=revert, type=commit_type, release=release)


def load_release_rules(path: Path) -> List[ReleaseRule]:
    """Load an ordered rule table from a JSON file.

    The file holds a list of objects such as
    ``{"type": "docs", "release": "patch"}``. Keys ``breaking`` and
    ``revert`` are booleans and ``release`` may be null.

    Raises:
        ConfigError: If the file cannot be read or a rule is malformed.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Failed to read release rules from %s: %s", path, exc)
        raise ConfigError(f"Invalid release rules file {path}: {exc}") from exc

    if not isinstance(data, list) or not data:
        raise ConfigError(f"{path.name} must contain a non-empty list of rules")

    rules = [_parse_rule(index, raw) for index, raw in enumerate(data)]
    logger.debug("Loaded %d release rules from %s", len(rules), path)
    return rules
