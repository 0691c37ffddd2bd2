"""Node.js provider: turns a package.json project into a build plan."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Set

from common.app import App
from common.environment import Environment
from common.logging_utils import extra_context, is_debug_enabled, log_selection
from constants import Constants, PackageManagers
from plan.models import BuildPlan, Phase, Pkg, StartPhase
from providers.base import Provider

from .dependencies import find_next_packages, get_all_deps
from .lockfile_parser import lockfile_packages
from .manifest import PackageJson, load_package_json
from .monorepo import DELEGATES
from .package_manager import (
    get_cache_dir,
    get_executor,
    get_install_command,
    get_package_manager,
    get_package_manager_pkg,
    get_run_command,
)
from .versions import ResolvedRuntime, resolve_node_runtime

logger = logging.getLogger(__name__)


def get_node_environment_variables() -> Dict[str, str]:
    return dict(Constants.NODE_ENVIRONMENT_VARIABLES)


def get_nix_packages(app: App, runtime: ResolvedRuntime, manager: PackageManagers) -> List[Pkg]:
    """Node runtime plus the package manager from the overlay.

    Bun is its own runtime, so no Node package is added for it.
    """
    pkgs: List[Pkg] = []
    if manager != PackageManagers.BUN:
        pkgs.append(runtime.pkg)
    pkgs.append(get_package_manager_pkg(app, manager))
    return pkgs


def next_cache_dir(directory: str) -> str:
    if not directory:
        return Constants.NEXT_CACHE_DIR
    return f"{directory}/{Constants.NEXT_CACHE_DIR}"


def get_build_cmd(app: App, env: Environment, manifest: PackageJson, manager: PackageManagers) -> Optional[str]:
    """Build command from Nx, then Turborepo, then the manifest build script."""
    for delegate in DELEGATES:
        if not delegate.is_applicable(app, env):
            continue
        cmd = delegate.build_command(app, env, manager)
        if cmd:
            log_selection(logger, "node", "build", cmd, delegate.name)
            return cmd

    if manifest.has_script("build"):
        return get_run_command(manager, "build")
    return None


def get_start_cmd(app: App, env: Environment, manifest: PackageJson, manager: PackageManagers) -> Optional[str]:
    """Start command, or None for projects with nothing to run."""
    for delegate in DELEGATES:
        if not delegate.is_applicable(app, env):
            continue
        cmd = delegate.start_command(app, env, manifest, manager)
        if cmd:
            log_selection(logger, "node", "start", cmd, delegate.name)
            return cmd

    if manifest.has_script("start"):
        return get_run_command(manager, "start")

    executor = get_executor(manager)
    if manifest.main and app.includes_file(manifest.main):
        return f"{executor} {manifest.main}"
    if app.includes_file("index.js"):
        return f"{executor} index.js"
    if app.includes_file("index.ts") and manager == PackageManagers.BUN:
        return "bun index.ts"
    return None


class NodeProvider(Provider):
    """Provider for projects with a package.json at the root."""

    @property
    def name(self) -> str:
        return "node"

    def detect(self, app: App, env: Environment) -> bool:
        return app.includes_file(Constants.PACKAGE_JSON_FILE)

    def get_build_plan(self, app: App, env: Environment) -> Optional[BuildPlan]:
        manifest = load_package_json(app)
        manager = get_package_manager(app)
        runtime = resolve_node_runtime(manifest, app, env)
        all_deps = get_all_deps(app)

        # Setup
        setup = Phase.setup(get_nix_packages(app, runtime, manager))
        pinned: Optional[Set[str]] = None

        def uses_dependency(name: str) -> bool:
            nonlocal pinned
            if name in all_deps:
                return True
            if pinned is None:
                pinned = lockfile_packages(app)
            return name in pinned

        if uses_dependency("puppeteer"):
            setup.add_apt_pkgs(Constants.PUPPETEER_APT_PKGS)
        elif uses_dependency("canvas"):
            setup.add_pkgs_libs(Constants.CANVAS_NIX_LIBS)

        # Install
        install_cmd = get_install_command(app, manager) if self.detect(app, env) else None
        install = Phase.install(install_cmd)
        install.add_cache_directory(get_cache_dir(manager))
        install.add_path(Constants.NODE_MODULES_BIN_PATH)
        if "cypress" in all_deps:
            install.add_cache_directory(Constants.CYPRESS_CACHE_DIR)

        # Build
        build = Phase.build(get_build_cmd(app, env, manifest, manager))
        for directory in find_next_packages(app):
            build.add_cache_directory(next_cache_dir(directory))
        build.add_cache_directory(Constants.NODE_MODULES_CACHE_DIR)

        # Start
        start_cmd = get_start_cmd(app, env, manifest, manager)
        start = StartPhase(start_cmd) if start_cmd else None

        plan = BuildPlan.new(
            [setup, install, build],
            start,
            get_node_environment_variables(),
            providers=[self.name],
        )
        if is_debug_enabled(logger):
            logger.debug(
                "Node plan assembled",
                extra=extra_context(
                    event="function_exit",
                    component="node",
                    action="get_build_plan",
                    outcome="with_start" if start else "no_start",
                    package_manager=manager.value,
                    runtime=runtime.pkg.name,
                ),
            )
        return plan


__all__ = [
    "NodeProvider",
    "get_build_cmd",
    "get_start_cmd",
    "get_nix_packages",
    "get_node_environment_variables",
]
