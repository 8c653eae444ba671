"""
Discovery of the packages that make up a JavaScript workspace.

Workspace globs are read from the ``workspaces`` field of the root
``package.json`` (npm, Yarn) or from ``pnpm-workspace.yaml`` (pnpm). A
glob prefixed with ``!`` removes matching directories again. Every
matched directory holding a ``package.json`` is a package. A repository
without any workspace configuration is a single package: its root.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


MANIFEST = "package.json"
PNPM_WORKSPACE = "pnpm-workspace.yaml"


class PackageDiscoveryError(Exception):
    """Raised when a package manifest or workspace file cannot be read."""

    pass


@dataclass(frozen=True)
class Package:
    """A workspace package.

    Attributes
    ----------
    dir : str
        Absolute path of the package directory.
    name : str
        Package name from its manifest.
    version : str
        Package version from its manifest; empty for private roots.
    """

    dir: str
    name: str
    version: str = ""


def _read_manifest(path: Path) -> Dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Failed to read package manifest %s: %s", path, exc)
        raise PackageDiscoveryError(f"Invalid package manifest {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise PackageDiscoveryError(f"Package manifest {path} must contain a JSON object")
    return data


def _workspace_globs(root: Path, manifest: Dict[str, Any]) -> Optional[List[str]]:
    workspaces = manifest.get("workspaces")
    if isinstance(workspaces, dict):
        workspaces = workspaces.get("packages")
    if workspaces is not None:
        if not isinstance(workspaces, list):
            raise PackageDiscoveryError("'workspaces' in package.json must be a list of globs")
        return [str(pattern) for pattern in workspaces]

    pnpm_file = root / PNPM_WORKSPACE
    if pnpm_file.exists():
        try:
            data = yaml.safe_load(pnpm_file.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise PackageDiscoveryError(f"Invalid {PNPM_WORKSPACE}: {exc}") from exc
        packages = data.get("packages") if isinstance(data, dict) else None
        if not isinstance(packages, list):
            raise PackageDiscoveryError(f"'packages' in {PNPM_WORKSPACE} must be a list of globs")
        return [str(pattern) for pattern in packages]
    return None


def _expand(root: Path, pattern: str) -> Iterable[Path]:
    pattern = pattern.strip().rstrip("/")
    if pattern.startswith("./"):
        pattern = pattern[2:]
    return (path for path in root.glob(pattern) if path.is_dir())


def _package_from_dir(directory: Path) -> Package:
    manifest = _read_manifest(directory / MANIFEST)
    name = manifest.get("name") or ""
    version = manifest.get("version") or ""
    return Package(dir=str(directory), name=str(name), version=str(version))


def get_packages(root: Path) -> List[Package]:
    """Return the packages of the workspace rooted at ``root``, sorted by directory.

    Raises:
        PackageDiscoveryError: If the root manifest or a package manifest
            is missing or malformed.
    """
    root = root.resolve()
    manifest = _read_manifest(root / MANIFEST)
    globs = _workspace_globs(root, manifest)
    if globs is None:
        logger.debug("No workspace configuration found, treating %s as a single package", root)
        return [_package_from_dir(root)]

    included = set()
    excluded = set()
    for pattern in globs:
        if pattern.startswith("!"):
            excluded.update(_expand(root, pattern[1:]))
        else:
            included.update(_expand(root, pattern))

    directories = sorted(
        path for path in included - excluded if (path / MANIFEST).is_file() and "node_modules" not in path.parts
    )
    packages = [_package_from_dir(path) for path in directories]
    logger.debug("Discovered %d workspace packages", len(packages))
    return packages


def filter_packages(packages: Iterable[Package], ignore: Iterable[str] = ()) -> List[Package]:
    """Keep packages that carry a version and are not listed in ``ignore``."""
    ignored = set(ignore)
    return [pkg for pkg in packages if pkg.version and pkg.name not in ignored]
