"""
Top-level package for conventional_changesets.

This package infers semantic-version bumps for the packages of a
multi-package repository from conventional commit messages and writes
them out as changeset files. The CLI entry point lives in
``conventional_changesets.cli``.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
