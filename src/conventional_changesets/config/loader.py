"""
Configuration loader for conventional_changesets.

The tool reads the configuration shared with the changeset release tool,
a JSON file named ``config.json`` inside the ``.changeset`` directory of
the repository root. Only two keys are of interest here:

- ``baseBranch`` (str, default ``"main"``): the branch releases are cut from.
- ``ignore`` (list of str, default ``[]``): package names never released.

Every other key belongs to the release tool and is ignored. If the file
is missing, malformed, or has fields of the wrong type, a
:class:`ConfigError` is raised.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List


logger = logging.getLogger(__name__)
# Attach a null handler so that importing this module never emits
# "No handler" warnings. The CLI configures the root logger.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


CHANGESET_DIR = ".changeset"
CONFIG_FILE = "config.json"
DEFAULT_BASE_BRANCH = "main"


class ConfigError(Exception):
    """Raised when a configuration file is missing or invalid."""

    pass


@dataclass
class ChangesetConfig:
    """Settings read from ``.changeset/config.json``."""

    base_branch: str = DEFAULT_BASE_BRANCH
    ignore: List[str] = field(default_factory=list)


def _get_config_path(repo_root: Path) -> Path:
    return repo_root / CHANGESET_DIR / CONFIG_FILE


def load_config(repo_root: Path) -> ChangesetConfig:
    """Load the changeset configuration of the repository at ``repo_root``.

    Args:
        repo_root: Root directory of the repository.

    Returns:
        A :class:`ChangesetConfig` with defaults applied for absent keys.

    Raises:
        ConfigError: If the file is missing, is not valid JSON, or holds
            values of the wrong type.
    """
    config_path = _get_config_path(repo_root)

    if not config_path.exists():
        logger.error("Configuration file '%s' does not exist", config_path)
        raise ConfigError(
            f"Missing changeset configuration file: {config_path}. "
            f"Run the changeset tool's init command to create it."
        )

    try:
        content = config_path.read_text(encoding="utf-8")
        data: Dict[str, Any] = json.loads(content)
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Failed to read or parse configuration file: %s", exc)
        raise ConfigError(f"Invalid JSON in {config_path.name}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"{config_path.name} must contain a JSON object")

    base_branch = data.get("baseBranch", DEFAULT_BASE_BRANCH)
    if not isinstance(base_branch, str) or not base_branch:
        raise ConfigError("'baseBranch' must be a non-empty string")

    ignore = data.get("ignore", [])
    if not isinstance(ignore, list) or not all(isinstance(name, str) for name in ignore):
        raise ConfigError("'ignore' must be a list of package names")

    logger.debug("Loaded changeset configuration from: %s", config_path)
    return ChangesetConfig(base_branch=base_branch, ignore=list(ignore))
