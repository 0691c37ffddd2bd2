"""Abstract base class for language providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from common.app import App
from common.environment import Environment
from plan.models import BuildPlan


class Provider(ABC):
    """Detects one language ecosystem and produces its build plan."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name recorded in the plan."""

    @abstractmethod
    def detect(self, app: App, env: Environment) -> bool:
        """Return True if the project belongs to this ecosystem."""

    @abstractmethod
    def get_build_plan(self, app: App, env: Environment) -> Optional[BuildPlan]:
        """Build the plan for a detected project.

        Raises:
            AppError: On unreadable or undecodable files.
            SchemaError: On manifests with the wrong shape.
        """
