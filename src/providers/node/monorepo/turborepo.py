"""Turborepo delegate."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from common.app import App, AppError
from common.environment import Environment
from constants import Constants, PackageManagers

from ..manifest import PackageJson, read_package_json
from ..package_manager import get_dlx_command, get_run_command
from .base import MonorepoDelegate

logger = logging.getLogger(__name__)


class Turborepo(MonorepoDelegate):
    """Turborepo support.

    Without NIXPACKS_TURBO_APP_NAME the delegate only contributes a build
    command when turbo.json defines a build task.
    """

    @property
    def name(self) -> str:
        return "turborepo"

    def is_applicable(self, app: App, env: Environment) -> bool:
        return app.includes_file(Constants.TURBO_JSON_FILE)

    @staticmethod
    def get_app_name(env: Environment) -> Optional[str]:
        return env.get_config_variable(Constants.TURBO_APP_NAME_VARIABLE)

    def _read_tasks(self, app: App) -> Dict[str, Any]:
        """Task table of turbo.json ("pipeline" before turbo 2, "tasks" after)."""
        try:
            turbo_json = app.read_json(Constants.TURBO_JSON_FILE)
        except AppError as e:
            logger.debug("Ignoring unreadable %s: %s", Constants.TURBO_JSON_FILE, e)
            return {}
        if not isinstance(turbo_json, dict):
            return {}
        for key in ("tasks", "pipeline"):
            tasks = turbo_json.get(key)
            if isinstance(tasks, dict):
                return tasks
        return {}

    def build_command(self, app: App, env: Environment, manager: PackageManagers) -> Optional[str]:
        app_name = self.get_app_name(env)
        if app_name:
            return f"{get_dlx_command(manager)} turbo run build --filter={app_name}"
        if "build" in self._read_tasks(app):
            return f"{get_dlx_command(manager)} turbo run build"
        return None

    def workspace_patterns(self, app: App, manifest: PackageJson) -> List[str]:
        """Workspace globs from package.json, else from pnpm-workspace.yaml."""
        if manifest.workspaces is not None and manifest.workspaces.members is not None:
            return manifest.workspaces.members
        if not app.includes_file(Constants.PNPM_WORKSPACE_FILE):
            return []
        try:
            data = app.read_yaml(Constants.PNPM_WORKSPACE_FILE)
        except AppError as e:
            logger.debug("Ignoring unreadable %s: %s", Constants.PNPM_WORKSPACE_FILE, e)
            return []
        packages = data.get("packages") if isinstance(data, dict) else None
        if not isinstance(packages, list):
            return []
        return [p for p in packages if isinstance(p, str)]

    def find_workspace_dir(self, app: App, manifest: PackageJson, app_name: str) -> Optional[str]:
        """Directory of the workspace member whose package.json name is app_name."""
        patterns = self.workspace_patterns(app, manifest)
        excluded = set()
        for pattern in patterns:
            if pattern.startswith("!"):
                excluded.update(app.find_directories(pattern[1:]))
        for pattern in patterns:
            if pattern.startswith("!"):
                continue
            for directory in app.find_directories(pattern):
                manifest_path = f"{directory}/{Constants.PACKAGE_JSON_FILE}"
                if directory in excluded or not app.includes_file(manifest_path):
                    continue
                if read_package_json(app, manifest_path).name == app_name:
                    return directory
        return None

    def start_command(
        self, app: App, env: Environment, manifest: PackageJson, manager: PackageManagers
    ) -> Optional[str]:
        app_name = self.get_app_name(env)
        if not app_name:
            return None
        directory = self.find_workspace_dir(app, manifest, app_name)
        if directory is None:
            return None
        member = read_package_json(app, f"{directory}/{Constants.PACKAGE_JSON_FILE}")
        if not member.has_script("start"):
            return None
        return f"cd {directory} && {get_run_command(manager, 'start')}"
