"""CLI configuration file loading and precedence rules.

Precedence for every setting: CLI flag, then the configuration file, then the
built-in default. An unusable configuration file is logged and ignored so the
CLI still produces a plan from flags alone.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

import yaml

from common.environment import Environment
from constants import Constants

logger = logging.getLogger(__name__)


def _read_config_file(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as fh:
        if path.lower().endswith(".json"):
            data = json.load(fh)
        else:
            data = yaml.safe_load(fh)
    return data if isinstance(data, dict) else {}


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load the CLI configuration.

    An explicit path is used as given; otherwise the first existing default
    location (Constants.CONFIG_FILE_LOCATIONS) is read.
    """
    if isinstance(path, str) and path.strip():
        candidates = [path]
    else:
        candidates = [os.path.expanduser(p) for p in Constants.CONFIG_FILE_LOCATIONS]

    for candidate in candidates:
        if not os.path.isfile(candidate):
            if candidate == path:
                logger.warning("Config file not found: %s", candidate)
            continue
        try:
            cfg = _read_config_file(candidate)
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.warning("Ignoring unreadable config file %s: %s", candidate, e)
            return {}
        logger.debug("Loaded configuration from %s", candidate)
        return cfg
    return {}


def _section(cfg: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = cfg.get(name)
    return value if isinstance(value, dict) else {}


def build_environment(args, cfg: Dict[str, Any]) -> Environment:
    """Environment overrides from the config "env" table, overlaid by --env pairs.

    Raises:
        ValueError: If an --env pair is not KEY=VALUE.
    """
    base = {str(k): "" if v is None else str(v) for k, v in _section(cfg, "env").items()}
    return Environment.from_pairs(getattr(args, "ENV", None) or [], base=base)


def resolve_output_format(args, cfg: Dict[str, Any]) -> str:
    fmt = getattr(args, "OUTPUT_FORMAT", None)
    if fmt:
        return fmt
    output = getattr(args, "OUTPUT", None)
    if isinstance(output, str):
        lower = output.lower()
        if lower.endswith((".yml", ".yaml")):
            return "yaml"
        if lower.endswith(".json"):
            return "json"
    cfg_fmt = str(_section(cfg, "output").get("format", "")).lower()
    if cfg_fmt in Constants.OUTPUT_FORMATS:
        return cfg_fmt
    return "json"


def resolve_log_level(args, cfg: Dict[str, Any]) -> Optional[str]:
    """Level from --loglevel, then the config logging.level; None leaves NODEPLAN_LOG_LEVEL in charge."""
    level = getattr(args, "LOG_LEVEL", None)
    if level:
        return str(level).upper()
    cfg_level = _section(cfg, "logging").get("level")
    if isinstance(cfg_level, str) and cfg_level.strip():
        return cfg_level.strip().upper()
    return None
