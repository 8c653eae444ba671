"""
Mapping of changed files to workspace packages.

See :mod:`conventional_changesets.impact.package_impact`.
"""

from .package_impact import (  # noqa: F401
    filter_files,
    get_changed_packages,
    matches_pattern,
    resolve_changed_packages,
)
