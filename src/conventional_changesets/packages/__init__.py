"""
Workspace package discovery.

See :mod:`conventional_changesets.packages.discovery`.
"""

from .discovery import (  # noqa: F401
    Package,
    PackageDiscoveryError,
    filter_packages,
    get_packages,
)
