"""
Version control integration.

This package wraps the git command line. :class:`GitClient` is the only
place that spawns processes; the commit source functions build the list
of commits to analyse on top of it.
"""

from .commit_source import get_commits_since_ref, read_commits  # noqa: F401
from .git_client import GitClient, GitError  # noqa: F401
