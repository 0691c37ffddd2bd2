"""Abstract base class for monorepo orchestrator delegates."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from common.app import App
from common.environment import Environment
from constants import PackageManagers

from ..manifest import PackageJson


class MonorepoDelegate(ABC):
    """A monorepo tool that can supply build and start commands.

    The Node provider asks each delegate in a fixed order and uses the first
    command returned; None means "no opinion", not an error.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short tool name used in logs."""

    @abstractmethod
    def is_applicable(self, app: App, env: Environment) -> bool:
        """Return True if the project is managed by this tool."""

    @abstractmethod
    def build_command(self, app: App, env: Environment, manager: PackageManagers) -> Optional[str]:
        """Return the build command, or None."""

    @abstractmethod
    def start_command(
        self, app: App, env: Environment, manifest: PackageJson, manager: PackageManagers
    ) -> Optional[str]:
        """Return the start command, or None."""
