"""
Grouping of raw commits into logical release units.

See :mod:`conventional_changesets.grouping.commit_grouper` for the folding
rules and :mod:`conventional_changesets.grouping.group_model` for the
records it produces.
"""

from .commit_grouper import (  # noqa: F401
    COMMIT_TYPES,
    group_commits,
    is_conventional_commit,
)
from .group_model import Commit, LogicalUnit  # noqa: F401
