"""
Commit source: decides where history analysis starts and reads commits.

On the base branch itself the analysis covers everything since the last
release tag. On any other branch it covers the commits made since the
branch forked from the remote base branch.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, List

from conventional_changesets.grouping.group_model import Commit

from .git_client import GitClient


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


def resolve_since_ref(client: GitClient, branch: str, remote: str = "origin") -> str:
    """Return the reference history analysis starts from (exclusive).

    The remote branch is fetched first. Failures other than a missing tag
    propagate as :class:`GitError`.
    """
    client.fetch(branch, remote=remote)
    current_branch = client.get_current_branch()
    if current_branch != branch:
        # The remote tip stops being an ancestor of HEAD as soon as the base
        # branch moves on; the fork point stays one.
        return client.get_merge_base(f"{remote}/{branch}")

    tag = client.get_latest_tag()
    if tag:
        return tag

    logger.warning(
        "No git tags found, using the repository's first commit for automated "
        "change detection. Note: this may take a while."
    )
    return client.get_root_commit()


def get_commits_since_ref(client: GitClient, branch: str, remote: str = "origin") -> List[str]:
    """Return commit hashes after the starting reference up to HEAD, oldest first."""
    since_ref = resolve_since_ref(client, branch, remote=remote)
    logger.info("Collecting commits since %s", since_ref)
    return client.list_ancestry_path(since_ref)


def read_commits(client: GitClient, hashes: Iterable[str]) -> Iterator[Commit]:
    """Yield a :class:`Commit` with its full message for each hash."""
    for commit_hash in hashes:
        yield Commit(hash=commit_hash, message=client.get_commit_message(commit_hash))
