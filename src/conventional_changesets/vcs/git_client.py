"""
Git client implementation for conventional_changesets.

This module wraps the handful of read-only Git operations needed to
analyse commit history. A :class:`GitClient` is bound to one repository
directory and every command runs there, so callers never depend on the
process working directory. All subprocess calls go through
:meth:`GitClient._run` so that unit tests can mock it easily.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Optional


logger = logging.getLogger(__name__)
# Attach a null handler to avoid logging errors when the root logger is not
# configured. Logs will propagate to the root when configured by the CLI.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


class GitError(Exception):
    """Raised when a Git command fails."""

    pass


def _lines(output: str) -> List[str]:
    return [line.strip() for line in output.splitlines() if line.strip()]


class GitClient:
    """Client for interacting with a Git repository."""

    def __init__(self, repo_root: Path) -> None:
        self.repo_root = repo_root

    # ------------------------------------------------------------------
    # Static helpers
    # ------------------------------------------------------------------
    @staticmethod
    def find_repo_root(start: Path) -> Optional[Path]:
        """Find the root of the Git repository starting from ``start``.

        Walk upwards until a ``.git`` entry is found or the filesystem
        root is reached. Worktrees and submodules use a ``.git`` file,
        which is accepted as well.
        """
        current = start.resolve()
        while True:
            if (current / ".git").exists():
                return current
            if current.parent == current:
                return None
            current = current.parent

    # ------------------------------------------------------------------
    # Command runner
    # ------------------------------------------------------------------
    def _run(self, args: List[str], check: bool = True) -> subprocess.CompletedProcess:
        """Run a Git command in the repository root.

        Raises
        ------
        GitError
            If the command exits with a non-zero status when ``check`` is True.
        """
        full_cmd = ["git"] + args
        logger.debug("Executing Git command: %s", " ".join(full_cmd))
        try:
            result = subprocess.run(
                full_cmd,
                cwd=self.repo_root,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            logger.error("Unable to execute git: %s", exc)
            raise GitError(f"Unable to execute git: {exc}") from exc

        if check and result.returncode != 0:
            logger.error(
                "Git command failed: %s\nSTDOUT: %s\nSTDERR: %s",
                " ".join(full_cmd),
                result.stdout,
                result.stderr,
            )
            raise GitError(result.stderr.strip() or result.stdout.strip())
        return result

    # ------------------------------------------------------------------
    # Refs and branches
    # ------------------------------------------------------------------
    def fetch(self, branch: str, remote: str = "origin") -> None:
        """Refresh ``remote``'s copy of ``branch``."""
        self._run(["fetch", remote, branch])

    def get_current_branch(self) -> str:
        """Return the name of the checked-out branch (``HEAD`` when detached)."""
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"])
        return result.stdout.strip()

    def get_latest_tag(self) -> Optional[str]:
        """Return the most recent tag reachable from HEAD, or None.

        A repository without tags makes ``git describe`` fail; that is
        reported as None rather than as an error.
        """
        result = self._run(["describe", "--tags", "--abbrev=0"], check=False)
        if result.returncode != 0:
            logger.debug("No reachable tag: %s", result.stderr.strip())
            return None
        return result.stdout.strip() or None

    def get_root_commit(self) -> str:
        """Return the hash of the repository's first commit."""
        result = self._run(["rev-list", "--max-parents=0", "HEAD"])
        roots = _lines(result.stdout)
        if not roots:
            raise GitError("Repository has no commits")
        return roots[0]

    def get_merge_base(self, ref: str, other: str = "HEAD") -> str:
        """Return the best common ancestor of ``ref`` and ``other``."""
        result = self._run(["merge-base", ref, other])
        return result.stdout.strip()

    def get_repo_root(self) -> str:
        """Return the top-level directory as reported by Git."""
        result = self._run(["rev-parse", "--show-toplevel"])
        return result.stdout.strip()

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------
    def list_ancestry_path(self, since_ref: str) -> List[str]:
        """List commits between ``since_ref`` (exclusive) and HEAD, oldest first."""
        result = self._run(["rev-list", "--ancestry-path", f"{since_ref}..HEAD"])
        return list(reversed(_lines(result.stdout)))

    def get_commit_message(self, commit_hash: str) -> str:
        """Return the full message (subject and body) of ``commit_hash``."""
        result = self._run(["log", "-n", "1", "--pretty=format:%B", commit_hash])
        return result.stdout

    def get_changed_files(self, from_ref: str, to_ref: str) -> List[str]:
        """List files changed from the parent of ``from_ref`` up to ``to_ref``.

        Both ends are inclusive: the range starts at ``from_ref~1`` so that
        the changes of ``from_ref`` itself are part of the result.
        """
        result = self._run(["diff", "--name-only", f"{from_ref}~1..{to_ref}"])
        return _lines(result.stdout)
