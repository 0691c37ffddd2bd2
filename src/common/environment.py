"""Snapshot of environment overrides consulted while planning."""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Mapping, Optional

from constants import Constants


class Environment:
    """Immutable mapping of override variables.

    Tunables are looked up under a fixed prefix, so NODE_VERSION is read from
    NIXPACKS_NODE_VERSION.
    """

    def __init__(self, variables: Optional[Mapping[str, str]] = None):
        self._variables = MappingProxyType(dict(variables or {}))

    @property
    def variables(self) -> Mapping[str, str]:
        return self._variables

    def get_config_variable(self, name: str) -> Optional[str]:
        """Return the prefixed override for name, treating blank values as unset."""
        value = self._variables.get(f"{Constants.ENV_PREFIX}{name}")
        if value is None or not value.strip():
            return None
        return value.strip()

    @classmethod
    def from_pairs(cls, pairs, base: Optional[Mapping[str, str]] = None) -> "Environment":
        """Build an Environment from KEY=VALUE strings layered over base.

        Raises:
            ValueError: If a pair has no '=' or an empty key.
        """
        merged: Dict[str, str] = dict(base or {})
        for pair in pairs or []:
            key, sep, value = str(pair).partition("=")
            key = key.strip()
            if not sep or not key:
                raise ValueError(f"Invalid environment override '{pair}', expected KEY=VALUE")
            merged[key] = value
        return cls(merged)

    def __repr__(self) -> str:
        return f"Environment({dict(self._variables)!r})"
