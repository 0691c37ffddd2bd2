"""Plan generation: pick the provider for a source tree and ask it for a plan."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from common.app import App
from common.environment import Environment
from common.logging_utils import log_selection
from plan.models import BuildPlan
from providers import PROVIDERS, Provider

logger = logging.getLogger(__name__)


def detect_provider(app: App, env: Environment, providers: Iterable[Provider] = PROVIDERS) -> Optional[Provider]:
    """First provider whose detect() matches, or None."""
    for provider in providers:
        if provider.detect(app, env):
            log_selection(logger, "planner", "provider", provider.name, "detected")
            return provider
    log_selection(logger, "planner", "provider", None, "no provider matched")
    return None


def generate_plan(source: str, env: Optional[Environment] = None, providers: Iterable[Provider] = PROVIDERS) -> Optional[BuildPlan]:
    """Build the plan for a project directory.

    Returns None when no provider recognizes the project.

    Raises:
        AppError: If the directory or a required file cannot be read or decoded.
        SchemaError: If a manifest has the wrong shape.
    """
    app = App(source)
    env = env or Environment()
    provider = detect_provider(app, env, providers)
    if provider is None:
        return None
    return provider.get_build_plan(app, env)
