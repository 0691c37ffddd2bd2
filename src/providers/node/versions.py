"""Node runtime version resolution.

Hints are consulted in a fixed order: the NIXPACKS_NODE_VERSION override,
engines.node in package.json, then a pin file (.nvmrc, .node-version). The
first present hint is parsed into a major version; anything unsupported or
unparsable maps to the default package.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from common.app import App
from common.environment import Environment
from common.logging_utils import log_selection
from constants import Constants
from plan.models import Pkg

from .manifest import PackageJson

logger = logging.getLogger(__name__)

# Accepts 18, 18.x, 18.x.x, 18.4.2, 14.X ... and ignores anything after the match.
_MAJOR_RE = re.compile(r"^(\d*)(?:\.?(?:\d*|[xX]?)?)(?:\.?(?:\d*|[xX]?)?)")
# ">=14.10.3 <16" -> 14
_LOWER_BOUND_RE = re.compile(r"^>=(\d+)")

SOURCE_ENV = "env"
SOURCE_ENGINES = "engines"
SOURCE_PIN_FILE = "pin-file"
SOURCE_DEFAULT = "default"


@dataclass(frozen=True)
class ResolvedRuntime:
    """Runtime package chosen for a project and the hint it came from."""
    pkg: Pkg
    source: str
    raw: Optional[str] = None
    major: Optional[int] = None


HintProducer = Callable[[PackageJson, App, Environment], Optional[str]]


def env_version_hint(_manifest: PackageJson, _app: App, env: Environment) -> Optional[str]:
    return env.get_config_variable(Constants.NODE_VERSION_VARIABLE)


def engines_version_hint(manifest: PackageJson, _app: App, _env: Environment) -> Optional[str]:
    if not manifest.engines:
        return None
    return manifest.engines.get("node")


def pin_file_version_hint(_manifest: PackageJson, app: App, _env: Environment) -> Optional[str]:
    """Content of the first pin file found, trimmed and without a leading non-numeric prefix character."""
    for pin_file in Constants.NODE_VERSION_PIN_FILES:
        content = app.read_file_if_exists(pin_file)
        if content is None:
            continue
        return normalize_pin(content)
    return None


def normalize_pin(content: str) -> str:
    value = content.strip()
    if value[:1] and not value[:1].isdigit():
        value = value[1:].strip()
    return value


HINT_PRODUCERS: Tuple[Tuple[str, HintProducer], ...] = (
    (SOURCE_ENV, env_version_hint),
    (SOURCE_ENGINES, engines_version_hint),
    (SOURCE_PIN_FILE, pin_file_version_hint),
)


def select_version_hint(manifest: PackageJson, app: App, env: Environment) -> Optional[Tuple[str, str]]:
    """Return (source, raw hint) from the highest-precedence producer that has one."""
    for source, producer in HINT_PRODUCERS:
        hint = producer(manifest, app, env)
        if hint is not None:
            return source, hint
    return None


def parse_major_version(version: str) -> Optional[int]:
    """Extract the major number from a constraint string, or None.

    "*" is treated as unparsable so callers fall back to the default.
    """
    if version == "*":
        return None
    for pattern in (_MAJOR_RE, _LOWER_BOUND_RE):
        match = pattern.match(version)
        if match and match.group(1):
            return int(match.group(1))
    return None


def version_number_to_pkg(version: Optional[int]) -> Pkg:
    if version is not None and version in Constants.AVAILABLE_NODE_VERSIONS:
        return Pkg(Constants.NODE_PKG_TEMPLATE.format(version))
    return Pkg(Constants.DEFAULT_NODE_PKG_NAME)


def resolve_node_runtime(manifest: PackageJson, app: App, env: Environment) -> ResolvedRuntime:
    """Pick the Node package for a project. Never raises for odd version strings."""
    selected = select_version_hint(manifest, app, env)
    if selected is None:
        runtime = ResolvedRuntime(pkg=Pkg(Constants.DEFAULT_NODE_PKG_NAME), source=SOURCE_DEFAULT)
    else:
        source, raw = selected
        major = parse_major_version(raw)
        runtime = ResolvedRuntime(pkg=version_number_to_pkg(major), source=source, raw=raw, major=major)

    log_selection(logger, "node", "runtime", runtime.pkg.name, f"from {runtime.source}")
    return runtime
