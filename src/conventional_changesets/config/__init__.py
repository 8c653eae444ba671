"""
Configuration loading for conventional_changesets.

Reads the changeset tool configuration (``.changeset/config.json``) and
optional release rule overrides. See :mod:`conventional_changesets.config.loader`.
"""

from .loader import ChangesetConfig, ConfigError, load_config  # noqa: F401
