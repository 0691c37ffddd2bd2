"""Dependency scanning across every package.json in a project tree."""

from __future__ import annotations

import logging
import posixpath
from typing import Iterator, List, Set, Tuple

from common.app import App
from common.logging_utils import is_debug_enabled, log_discovered_files
from constants import Constants

from .manifest import PackageJson, read_package_json

logger = logging.getLogger(__name__)


def _project_manifests(app: App) -> Iterator[Tuple[str, PackageJson]]:
    """Yield (relative path, manifest) for every package.json outside node_modules.

    Raises:
        AppError, SchemaError: If a discovered manifest is unreadable or malformed.
    """
    paths = [
        path for path in app.find_files(f"**/{Constants.PACKAGE_JSON_FILE}")
        if Constants.NODE_MODULES_DIR not in path
    ]
    if is_debug_enabled(logger):
        log_discovered_files(logger, "node", {"manifest": paths})
    for path in paths:
        yield path, read_package_json(app, path)


def get_all_deps(app: App) -> Set[str]:
    """All dependency and devDependency names declared anywhere in the project."""
    all_deps: Set[str] = set()
    for _, manifest in _project_manifests(app):
        all_deps.update(manifest.dependency_names())
    return all_deps


def find_next_packages(app: App) -> List[str]:
    """Directories (relative, "" for the root) whose package.json depends on next."""
    cache_dirs: List[str] = []
    for path, manifest in _project_manifests(app):
        if "next" in manifest.dependency_names():
            cache_dirs.append(posixpath.dirname(path))
    return cache_dirs
