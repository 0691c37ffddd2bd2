"""package.json and .yarnrc.yml models."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from common.app import App, AppError
from constants import Constants
from plan.validate import validate_manifest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Workspaces:
    """The manifest "workspaces" field.

    A list of glob strings is kept as members; any other shape (e.g. yarn's
    {"packages": [...]} object) is preserved in raw and has members None.
    """
    raw: Any
    members: Optional[List[str]] = None

    @classmethod
    def from_value(cls, value: Any) -> "Workspaces":
        if isinstance(value, list) and all(isinstance(v, str) for v in value):
            return cls(raw=value, members=list(value))
        return cls(raw=value)


@dataclass(frozen=True)
class PackageJson:
    """Fields of package.json the planner reads. None means the field is absent."""
    name: Optional[str] = None
    scripts: Optional[Dict[str, str]] = None
    engines: Optional[Dict[str, str]] = None
    main: Optional[str] = None
    dependencies: Optional[Dict[str, str]] = None
    dev_dependencies: Optional[Dict[str, str]] = None
    project_type: Optional[str] = None
    workspaces: Optional[Workspaces] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PackageJson":
        workspaces = data.get("workspaces")
        return cls(
            name=data.get("name"),
            scripts=data.get("scripts"),
            engines=data.get("engines"),
            main=data.get("main"),
            dependencies=data.get("dependencies"),
            dev_dependencies=data.get("devDependencies"),
            project_type=data.get("type"),
            workspaces=Workspaces.from_value(workspaces) if workspaces is not None else None,
        )

    def has_script(self, script: str) -> bool:
        return bool(self.scripts) and script in self.scripts

    def dependency_names(self) -> set:
        """Names from dependencies and devDependencies."""
        names = set(self.dependencies or {})
        names.update(self.dev_dependencies or {})
        return names


def read_package_json(app: App, path: str = Constants.PACKAGE_JSON_FILE) -> PackageJson:
    """Load and validate a package.json.

    Raises:
        AppError: If the file cannot be read or is not JSON.
        SchemaError: If known fields have the wrong shape.
    """
    data = app.read_json(path)
    validate_manifest(data, path)
    return PackageJson.from_dict(data)


def load_package_json(app: App) -> PackageJson:
    """Root manifest, or an empty one when package.json does not exist."""
    if not app.includes_file(Constants.PACKAGE_JSON_FILE):
        return PackageJson()
    return read_package_json(app)


@dataclass(frozen=True)
class Yarnrc:
    yarn_path: Optional[str] = None


def load_yarnrc(app: App) -> Yarnrc:
    """Read .yarnrc.yml; a missing or unusable file yields an empty Yarnrc."""
    if not app.includes_file(Constants.YARNRC_YML_FILE):
        return Yarnrc()
    try:
        data = app.read_yaml(Constants.YARNRC_YML_FILE)
    except AppError as e:
        logger.debug("Ignoring unreadable %s: %s", Constants.YARNRC_YML_FILE, e)
        return Yarnrc()
    if not isinstance(data, dict):
        return Yarnrc()
    yarn_path = data.get("yarnPath")
    return Yarnrc(yarn_path=yarn_path if isinstance(yarn_path, str) and yarn_path else None)
