"""Monorepo orchestrator delegates, in the order they are consulted."""

from .base import MonorepoDelegate
from .nx import Nx
from .turborepo import Turborepo

DELEGATES = (Nx(), Turborepo())

__all__ = [
    "MonorepoDelegate",
    "Nx",
    "Turborepo",
    "DELEGATES",
]
