"""
Command line interface for conventional_changesets.

This module defines the ``main`` command used as the entry point of the
``conventional-changesets`` console script. It orchestrates repository
detection, configuration loading, package discovery, commit collection
and grouping, changeset assembly, deduplication against the changesets
already recorded, and finally writing the new changesets. Nothing is
written until every previous step has succeeded.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence

import click

from conventional_changesets import __version__
from conventional_changesets.changesets.assembler import build_changesets, select_new_changesets
from conventional_changesets.changesets.model import Changeset
from conventional_changesets.changesets.storage import (
    ChangesetFormatError,
    read_changesets,
    write_changeset,
)
from conventional_changesets.config.loader import ConfigError, load_config
from conventional_changesets.grouping.commit_grouper import group_commits
from conventional_changesets.packages.discovery import (
    PackageDiscoveryError,
    filter_packages,
    get_packages,
)
from conventional_changesets.release.rules import DEFAULT_RELEASE_RULES, load_release_rules
from conventional_changesets.vcs.commit_source import get_commits_since_ref, read_commits
from conventional_changesets.vcs.git_client import GitClient, GitError

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------
EXIT_SUCCESS = 0
EXIT_GENERIC_ERROR = 1
EXIT_NO_REPO = 3
EXIT_CONFIG_ERROR = 4
EXIT_VCS_FAILURE = 5
EXIT_CHANGESET_ERROR = 6

TOTAL_STEPS = 6


# ---------------------------------------------------------------------------
# Status display utilities
# ---------------------------------------------------------------------------

def print_step(step_num: int, total_steps: int, message: str):
    """Print a step indicator."""
    click.echo(f"\n{'=' * 60}")
    click.echo(f"Step {step_num}/{total_steps}: {message}")
    click.echo(f"{'=' * 60}")


def print_info(message: str, indent: int = 0):
    prefix = "  " * indent
    click.echo(f"{prefix}ℹ {message}")


def print_success(message: str, indent: int = 0):
    prefix = "  " * indent
    click.echo(f"{prefix}✓ {message}")


def print_warning(message: str, indent: int = 0):
    prefix = "  " * indent
    click.echo(f"{prefix}⚠ {message}")


def print_error(message: str, indent: int = 0):
    prefix = "  " * indent
    click.echo(f"{prefix}✗ {message}", err=True)


def configure_logging(verbose: bool) -> None:
    """Send the package's log records to a root handler on stderr.

    Module loggers are created with propagation disabled so that library
    use stays silent; the CLI turns it back on once the root is configured.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
        force=True,
    )
    for name in list(logging.root.manager.loggerDict):
        if name == "conventional_changesets" or name.startswith("conventional_changesets."):
            logging.getLogger(name).propagate = True


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count != 1 else ''}"


def describe_changeset(changeset: Changeset) -> str:
    """One-line description: headline and the bumped packages."""
    headline = changeset.summary.splitlines()[0] if changeset.summary else ""
    bumps = ", ".join(f"{release.name}@{release.type}" for release in changeset.releases)
    return f"{headline} [{bumps}]"


# ---------------------------------------------------------------------------
# Core functionality
# ---------------------------------------------------------------------------

def generate_changesets(
    client: GitClient,
    base_branch: str,
    packages,
    ignored_files: Sequence[str] = (),
    rules=DEFAULT_RELEASE_RULES,
    remote: str = "origin",
) -> List[Changeset]:
    """Collect, group and classify commits; return changeset candidates."""
    hashes = get_commits_since_ref(client, base_branch, remote=remote)
    if not hashes:
        print_warning("No commits found since the last release point.")
        return []
    print_success(f"Found {_plural(len(hashes), 'commit')} since the last release point")

    units = group_commits(read_commits(client, hashes))
    print_info(f"Grouped into {_plural(len(units), 'logical unit')}", indent=1)

    return build_changesets(client, units, packages, ignored_files=ignored_files, rules=rules)


@click.command()
@click.option(
    "--cwd",
    "cwd",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Directory inside the repository (defaults to the current directory).",
)
@click.option(
    "--ignore-file",
    "ignored_files",
    multiple=True,
    help="Glob or regular expression of files whose changes never trigger a release. Repeatable.",
)
@click.option(
    "--rules",
    "rules_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="JSON file with an ordered release rule table replacing the default one.",
)
@click.option("--remote", default="origin", show_default=True, help="Remote holding the base branch.")
@click.option("--dry-run", is_flag=True, help="List the changesets that would be written without writing them.")
@click.option("--verbose", is_flag=True, help="Enable verbose (debug) output.")
@click.version_option(version=__version__, prog_name="conventional-changesets")
def main(
    cwd: Optional[Path],
    ignored_files: Sequence[str],
    rules_path: Optional[Path],
    remote: str,
    dry_run: bool,
    verbose: bool,
) -> None:
    """Create changesets from conventional commits.

    Commits since the last release (or since the branch left the base
    branch) are grouped, classified as major/minor/patch and mapped to the
    workspace packages they touch. Changesets not yet recorded in the
    .changeset directory are written there.
    """
    configure_logging(verbose)

    ctx = click.get_current_context(silent=True)
    current_step = 0

    try:
        # Step 1: Detect repository
        current_step += 1
        print_step(current_step, TOTAL_STEPS, "Detecting Repository")
        repo_root = GitClient.find_repo_root(cwd or Path.cwd())
        if repo_root is None:
            print_error("Current directory is not inside a Git repository.")
            raise click.exceptions.Exit(EXIT_NO_REPO)
        client = GitClient(repo_root)
        print_success(f"Found Git repository at: {repo_root}")

        # Step 2: Load configuration
        current_step += 1
        print_step(current_step, TOTAL_STEPS, "Loading Configuration")
        try:
            config = load_config(repo_root)
            rules = load_release_rules(rules_path) if rules_path else DEFAULT_RELEASE_RULES
        except ConfigError as exc:
            print_error(f"Configuration error: {exc}")
            raise click.exceptions.Exit(EXIT_CONFIG_ERROR)
        print_success("Configuration loaded successfully")
        print_info(f"Base branch: {config.base_branch}", indent=1)
        if config.ignore:
            print_info(f"Ignored packages: {', '.join(config.ignore)}", indent=1)
        if rules_path:
            print_info(f"Release rules: {rules_path} ({_plural(len(rules), 'rule')})", indent=1)

        # Step 3: Discover packages
        current_step += 1
        print_step(current_step, TOTAL_STEPS, "Discovering Packages")
        try:
            packages = filter_packages(get_packages(repo_root), config.ignore)
        except PackageDiscoveryError as exc:
            print_error(f"Package discovery failed: {exc}")
            raise click.exceptions.Exit(EXIT_CONFIG_ERROR)
        print_success(f"Found {_plural(len(packages), 'releasable package')}")
        for pkg in packages:
            print_info(f"{pkg.name} ({pkg.version})", indent=1)

        # Step 4: Analyse commits
        current_step += 1
        print_step(current_step, TOTAL_STEPS, "Analyzing Commits")
        try:
            candidates = generate_changesets(
                client,
                config.base_branch,
                packages,
                ignored_files=list(ignored_files),
                rules=rules,
                remote=remote,
            )
        except GitError as exc:
            print_error(f"Git error: {exc}")
            raise click.exceptions.Exit(EXIT_VCS_FAILURE)
        print_success(f"Derived {_plural(len(candidates), 'changeset')}")

        # Step 5: Compare with recorded changesets
        current_step += 1
        print_step(current_step, TOTAL_STEPS, "Comparing With Existing Changesets")
        try:
            existing = read_changesets(repo_root)
        except ChangesetFormatError as exc:
            print_error(f"Unable to read existing changesets: {exc}")
            raise click.exceptions.Exit(EXIT_CHANGESET_ERROR)
        new_changesets = select_new_changesets(candidates, existing)
        print_info(f"{_plural(len(existing), 'changeset')} already recorded", indent=1)
        skipped = len(candidates) - len(new_changesets)
        if skipped:
            print_info(f"Skipping {_plural(skipped, 'changeset')} already recorded", indent=1)

        # Step 6: Write
        current_step += 1
        print_step(current_step, TOTAL_STEPS, "Writing Changesets")
        if not new_changesets:
            print_success("No new changesets to write.")
            raise click.exceptions.Exit(EXIT_SUCCESS)

        for changeset in new_changesets:
            if dry_run:
                print_info(f"Would write: {describe_changeset(changeset)}", indent=1)
            else:
                changeset_id = write_changeset(changeset, repo_root)
                print_success(f"{changeset_id}: {describe_changeset(changeset)}", indent=1)

        verb = "Would write" if dry_run else "Wrote"
        click.echo(f"\n{verb} {_plural(len(new_changesets), 'changeset')}.\n")
        raise click.exceptions.Exit(EXIT_SUCCESS)

    except click.exceptions.Exit:
        raise
    except Exception as exc:
        logging.exception("Unhandled error: %s", exc)
        print_error(f"Unexpected error: {exc}")
        ctx.exit(EXIT_GENERIC_ERROR)
