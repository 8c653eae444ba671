#!/usr/bin/env python
"""
Thin wrapper script to invoke the conventional_changesets CLI.

Running ``python changeset_from_commits.py`` is equivalent to running the
``conventional-changesets`` console script installed via ``pyproject.toml``.
"""

from conventional_changesets.cli import main


if __name__ == "__main__":
    main(prog_name="conventional-changesets")
