"""Package manager selection and the facts derived from it.

The manager is detected once from root lockfiles; the cache directory,
executor, dlx binary, install command and Nix package are all looked up from
that single value.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

import semantic_version

from common.app import App
from common.logging_utils import is_debug_enabled, log_discovered_files, log_multiple_lockfiles, log_selection
from constants import Constants, PackageManagers
from plan.models import Pkg

from .lockfile_parser import npm_lockfile_version, pnpm_lockfile_version
from .manifest import load_yarnrc

logger = logging.getLogger(__name__)

# First match wins.
_LOCKFILE_PRECEDENCE: Tuple[Tuple[str, PackageManagers], ...] = (
    (Constants.PNPM_LOCK_FILE, PackageManagers.PNPM),
    (Constants.YARN_LOCK_FILE, PackageManagers.YARN),
    (Constants.BUN_LOCKB_FILE, PackageManagers.BUN),
    (Constants.BUN_LOCK_FILE, PackageManagers.BUN),
)

_CACHE_DIRS: Dict[PackageManagers, str] = {
    PackageManagers.NPM: Constants.NPM_CACHE_DIR,
    PackageManagers.YARN: Constants.YARN_CACHE_DIR,
    PackageManagers.PNPM: Constants.PNPM_CACHE_DIR,
    PackageManagers.BUN: Constants.BUN_CACHE_DIR,
}

_DLX_COMMANDS: Dict[PackageManagers, str] = {
    PackageManagers.NPM: "npx",
    PackageManagers.YARN: "yarn",
    PackageManagers.PNPM: "pnpx",
    PackageManagers.BUN: "bunx",
}

_LAST_PNPM6_LOCKFILE = semantic_version.Version("5.3.0")


def _discover_lockfiles(app: App) -> List[str]:
    names = [Constants.PACKAGE_LOCK_FILE] + [name for name, _ in _LOCKFILE_PRECEDENCE]
    return [name for name in names if app.includes_file(name)]


def get_package_manager(app: App) -> PackageManagers:
    """Pick the package manager from root lockfiles: pnpm, yarn, bun, else npm."""
    lockfiles = _discover_lockfiles(app)
    if is_debug_enabled(logger):
        log_discovered_files(logger, "node", {"lockfile": lockfiles})

    selected: Optional[str] = None
    manager = PackageManagers.NPM
    for lockfile, candidate in _LOCKFILE_PRECEDENCE:
        if lockfile in lockfiles:
            selected, manager = lockfile, candidate
            break

    if selected is None and Constants.PACKAGE_LOCK_FILE in lockfiles:
        selected = Constants.PACKAGE_LOCK_FILE
    ignored = [lf for lf in lockfiles if lf != selected]
    if selected and ignored:
        log_multiple_lockfiles(logger, "node", selected, ignored)

    log_selection(logger, "node", "package manager", manager.value, selected or "no lockfile, default")
    return manager


def get_cache_dir(manager: PackageManagers) -> str:
    return _CACHE_DIRS[manager]


def get_executor(manager: PackageManagers) -> str:
    """Binary that runs a JS entry file."""
    return "bun" if manager == PackageManagers.BUN else "node"


def get_dlx_command(manager: PackageManagers) -> str:
    return _DLX_COMMANDS[manager]


def get_run_command(manager: PackageManagers, script: str) -> str:
    return f"{manager.value} run {script}"


def get_install_command(app: App, manager: PackageManagers) -> str:
    """Install invocation for the selected manager."""
    if manager == PackageManagers.PNPM:
        return "pnpm i --frozen-lockfile"
    if manager == PackageManagers.YARN:
        if not app.includes_file(Constants.YARNRC_YML_FILE):
            return "yarn install --frozen-lockfile"
        yarnrc = load_yarnrc(app)
        if yarnrc.yarn_path:
            return f"yarn set version ./{yarnrc.yarn_path} && yarn install --check-cache"
        return "yarn set version berry && yarn install --check-cache"
    if manager == PackageManagers.BUN:
        return "bun i --no-save"
    if app.includes_file(Constants.PACKAGE_LOCK_FILE):
        return "npm ci"
    return "npm i"


def get_package_manager_pkg(app: App, manager: PackageManagers) -> Pkg:
    """The manager's own Nix package, sourced from the npm overlay."""
    if manager == PackageManagers.PNPM:
        version = pnpm_lockfile_version(app)
        name = "pnpm-6_x" if version is not None and version <= _LAST_PNPM6_LOCKFILE else "pnpm-7_x"
    elif manager == PackageManagers.YARN:
        name = "yarn-1_x"
    elif manager == PackageManagers.BUN:
        name = "bun"
    else:
        name = "npm-6_x" if npm_lockfile_version(app) == 1 else "npm-8_x"
    return Pkg(name).from_overlay(Constants.NODE_OVERLAY)
