"""Nx workspace delegate.

The app is named by NIXPACKS_NX_APP_NAME or nx.json's defaultProject and
lives at apps/<name>/project.json.
"""

from __future__ import annotations

import logging
import posixpath
from typing import Any, Dict, Optional

from common.app import App
from common.environment import Environment
from common.logging_utils import log_selection
from constants import Constants, PackageManagers

from ..manifest import PackageJson
from ..package_manager import get_dlx_command, get_executor, get_run_command
from .base import MonorepoDelegate

logger = logging.getLogger(__name__)

NEXT_EXECUTORS = ("@nrwl/next:build", "@nx/next:build")


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


class Nx(MonorepoDelegate):
    """Nx monorepo support."""

    @property
    def name(self) -> str:
        return "nx"

    def get_app_name(self, app: App, env: Environment) -> Optional[str]:
        """App from the override variable, else nx.json defaultProject.

        Raises:
            AppError: If nx.json exists but cannot be decoded.
        """
        app_name = env.get_config_variable(Constants.NX_APP_NAME_VARIABLE)
        if app_name:
            return app_name
        if not app.includes_file(Constants.NX_JSON_FILE):
            return None
        nx_json = _as_dict(app.read_json(Constants.NX_JSON_FILE))
        default_project = nx_json.get("defaultProject")
        if default_project is None:
            return None
        return str(default_project).strip('"') or None

    @staticmethod
    def project_json_path(app_name: str) -> str:
        return f"{Constants.NX_APPS_DIR}/{app_name}/project.json"

    def is_applicable(self, app: App, env: Environment) -> bool:
        if not app.includes_file(Constants.NX_JSON_FILE):
            return False
        app_name = self.get_app_name(app, env)
        return app_name is not None and app.includes_file(self.project_json_path(app_name))

    def build_command(self, app: App, env: Environment, manager: PackageManagers) -> Optional[str]:
        app_name = self.get_app_name(app, env)
        if app_name is None:
            return None
        return f"{get_dlx_command(manager)} nx run {app_name}:build:production"

    def start_command(
        self, app: App, env: Environment, manifest: PackageJson, manager: PackageManagers
    ) -> Optional[str]:
        """Start the app via its start target, or run the build output directly.

        Raises:
            AppError: If project.json cannot be read or decoded.
        """
        app_name = self.get_app_name(app, env)
        if app_name is None:
            return None
        project = _as_dict(app.read_json(self.project_json_path(app_name)))
        targets = _as_dict(project.get("targets"))

        if "start" in targets:
            configurations = _as_dict(_as_dict(targets["start"]).get("configurations"))
            if "production" in configurations:
                cmd = f"{get_dlx_command(manager)} nx run {app_name}:start:production"
            else:
                cmd = f"{get_dlx_command(manager)} nx run {app_name}:start"
            log_selection(logger, self.name, "start", cmd, "project start target")
            return cmd

        build = _as_dict(targets.get("build"))
        options = _as_dict(build.get("options"))
        output_path = options.get("outputPath") or f"dist/{Constants.NX_APPS_DIR}/{app_name}"

        if build.get("executor") in NEXT_EXECUTORS:
            return f"cd {output_path} && {get_run_command(manager, 'start')}"

        main = options.get("main")
        if isinstance(main, str) and main:
            stem = posixpath.splitext(posixpath.basename(main))[0]
            return f"{get_executor(manager)} {output_path}/{stem}.js"
        return f"{get_executor(manager)} {output_path}/index.js"
