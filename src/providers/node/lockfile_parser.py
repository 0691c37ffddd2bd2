"""Lockfile readers for the npm ecosystem (package-lock.json, yarn.lock, pnpm-lock.yaml, bun.lock).

The parsers extract every package name a lockfile pins (direct + transitive)
so that dependency-triggered system libraries also apply when a library is
only pulled in transitively. lockfile_packages never raises: a lockfile that
cannot be read or parsed logs a warning and yields no names.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Dict, List, Optional, Set

import semantic_version
import yaml
from yarnlock import yarnlock_parse

from common.app import App, AppError
from constants import Constants

logger = logging.getLogger(__name__)

_PNPM_VERSION_RE = re.compile(r"^lockfileVersion:\s*['\"]?([0-9][0-9.]*)['\"]?\s*$", re.MULTILINE)
_YARN_BERRY_RE = re.compile(r"^\"?__metadata\"?:", re.MULTILINE)


def _strip_jsonc_comments(content: str) -> str:
    """Strip comments and trailing commas from JSONC (JSON with comments) content."""
    content = re.sub(r'^\s*//.*?$', '', content, flags=re.MULTILINE)
    content = re.sub(r'/\*.*?\*/', '', content, flags=re.DOTALL)
    content = re.sub(r',(\s*[}\]])', r'\1', content)
    return content


def _name_from_node_modules_path(pkg_path: str) -> Optional[str]:
    """"node_modules/a/node_modules/@scope/b" -> "@scope/b"."""
    path_parts = pkg_path.split("/")
    if len(path_parts) >= 2 and path_parts[-2].startswith("@"):
        return f"{path_parts[-2]}/{path_parts[-1]}"
    return path_parts[-1] or None


def _extract_from_deps(deps: dict, packages: Set[str]) -> None:
    """Recursively collect names from a v1-style nested dependencies tree."""
    if not isinstance(deps, dict):
        return
    for pkg_name, pkg_info in deps.items():
        if isinstance(pkg_info, dict):
            packages.add(pkg_name)
            if "dependencies" in pkg_info:
                _extract_from_deps(pkg_info["dependencies"], packages)


def _extract_from_packages(entries: dict, packages: Set[str]) -> None:
    """Collect names from a flat v2/v3 "packages" table keyed by install path."""
    for pkg_path, pkg_info in entries.items():
        if not pkg_path or not isinstance(pkg_info, dict):
            continue
        name = pkg_info.get("name") or _name_from_node_modules_path(pkg_path)
        if name:
            packages.add(name)


def parse_package_lock(content: str) -> List[str]:
    """Package names from package-lock.json (lockfileVersion 1, 2 and 3)."""
    data = json.loads(content)
    packages: Set[str] = set()
    if not isinstance(data, dict):
        return []
    if isinstance(data.get("packages"), dict):
        _extract_from_packages(data["packages"], packages)
    if "dependencies" in data:
        _extract_from_deps(data["dependencies"], packages)
    return sorted(packages)


def _yarn_key_names(key: str) -> Set[str]:
    """Names from a yarn.lock entry key, which may join several selectors with commas."""
    names: Set[str] = set()
    for selector in str(key).split(","):
        selector = selector.strip().strip('"')
        # "@scope/name@range" -> "@scope/name"
        if "@" in selector[1:]:
            pkg_name = selector.rsplit("@", 1)[0]
            if pkg_name:
                names.add(pkg_name)
    return names


def parse_yarn_lock(content: str) -> List[str]:
    """Package names from a yarn.lock.

    Classic (v1) lockfiles are parsed with yarnlock; berry lockfiles are YAML
    documents carrying a __metadata entry and are read with PyYAML.

    Raises:
        ValueError: If the classic lockfile cannot be parsed.
        yaml.YAMLError: If the berry lockfile is not valid YAML.
    """
    if not content.strip():
        return []
    if _YARN_BERRY_RE.search(content):
        parsed = yaml.safe_load(content)
    else:
        try:
            parsed = yarnlock_parse(content)
        except Exception as e:
            raise ValueError(f"invalid yarn.lock: {e}") from e

    packages: Set[str] = set()
    if isinstance(parsed, dict):
        for pkg_key in parsed:
            if not pkg_key or pkg_key == "__metadata":
                continue
            packages.update(_yarn_key_names(pkg_key))
    return sorted(packages)


def _pnpm_key_to_name(key: str) -> Optional[str]:
    """"/@babel/core/7.0.0", "/lodash@4.17.21(x)" or "lodash@4.17.21" -> package name."""
    k = key.lstrip("/")
    if k.startswith("@"):
        scope, sep, rest = k.partition("/")
        if not sep:
            return None
        name = rest.split("/")[0].split("@")[0]
        return f"{scope}/{name}" if name else None
    name = k.split("/")[0].split("@")[0]
    return name or None


def parse_pnpm_lock(content: str) -> List[str]:
    """Package names from pnpm-lock.yaml (v5 through v9 key formats)."""
    data = yaml.safe_load(content)
    packages: Set[str] = set()
    if not isinstance(data, dict):
        return []

    for section in ("packages", "snapshots"):
        entries = data.get(section)
        if isinstance(entries, dict):
            for key in entries:
                name = _pnpm_key_to_name(str(key))
                if name:
                    packages.add(name)

    importers = data.get("importers")
    roots: List[Dict] = [data]
    if isinstance(importers, dict):
        roots.extend(v for v in importers.values() if isinstance(v, dict))
    for root in roots:
        for field in ("dependencies", "devDependencies", "optionalDependencies"):
            deps = root.get(field)
            if isinstance(deps, dict):
                packages.update(str(k) for k in deps)
    return sorted(packages)


def parse_bun_lock(content: str) -> List[str]:
    """Package names from the text bun.lock (JSONC) format."""
    data = json.loads(_strip_jsonc_comments(content))
    packages: Set[str] = set()
    if not isinstance(data, dict):
        return []
    if isinstance(data.get("packages"), dict):
        for pkg_path, pkg_info in data["packages"].items():
            if not pkg_path:
                continue
            if isinstance(pkg_info, dict) and pkg_info.get("name"):
                packages.add(pkg_info["name"])
            else:
                name = _name_from_node_modules_path(pkg_path)
                if name:
                    packages.add(name)
    if "dependencies" in data:
        _extract_from_deps(data["dependencies"], packages)
    return sorted(packages)


_PARSERS = {
    Constants.PACKAGE_LOCK_FILE: parse_package_lock,
    Constants.YARN_LOCK_FILE: parse_yarn_lock,
    Constants.PNPM_LOCK_FILE: parse_pnpm_lock,
    Constants.BUN_LOCK_FILE: parse_bun_lock,
}


def lockfile_packages(app: App) -> Set[str]:
    """Union of package names pinned by every readable root lockfile."""
    names: Set[str] = set()
    for lockfile, parser in _PARSERS.items():
        if not app.includes_file(lockfile):
            continue
        try:
            names.update(parser(app.read_file(lockfile)))
        except (AppError, ValueError, yaml.YAMLError) as e:
            logger.warning("Failed to parse %s: %s", lockfile, e)
    return names


def npm_lockfile_version(app: App) -> Optional[int]:
    """lockfileVersion from package-lock.json, or None if absent/unusable."""
    if not app.includes_file(Constants.PACKAGE_LOCK_FILE):
        return None
    try:
        data = app.read_json(Constants.PACKAGE_LOCK_FILE)
    except AppError as e:
        logger.debug("Ignoring unreadable %s: %s", Constants.PACKAGE_LOCK_FILE, e)
        return None
    version = data.get("lockfileVersion") if isinstance(data, dict) else None
    return version if isinstance(version, int) else None


def pnpm_lockfile_version(app: App) -> Optional[semantic_version.Version]:
    """lockfileVersion header of pnpm-lock.yaml, coerced to a semantic version."""
    try:
        content = app.read_file_if_exists(Constants.PNPM_LOCK_FILE)
    except AppError as e:
        logger.debug("Ignoring unreadable %s: %s", Constants.PNPM_LOCK_FILE, e)
        return None
    if content is None:
        return None
    match = _PNPM_VERSION_RE.search(content)
    if not match:
        return None
    try:
        return semantic_version.Version.coerce(match.group(1))
    except ValueError:
        return None
