"""
Release severity classification.

See :mod:`conventional_changesets.release.rules` for the ordered rule
table that maps a conventional commit message to a semver bump.
"""

from .rules import (  # noqa: F401
    DEFAULT_RELEASE_RULES,
    ReleaseRule,
    Severity,
    classify_release,
    extract_commit_type,
    is_breaking_change,
    load_release_rules,
)
