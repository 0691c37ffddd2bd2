"""Data models for build plans."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple


SETUP = "setup"
INSTALL = "install"
BUILD = "build"


def _extend_unique(target: List[str], values: Iterable[str]) -> None:
    for value in values:
        if value not in target:
            target.append(value)


@dataclass(frozen=True)
class Pkg:
    """A Nix package, optionally sourced from an overlay."""
    name: str
    overlay: Optional[str] = None

    def from_overlay(self, overlay: str) -> "Pkg":
        return Pkg(self.name, overlay)


@dataclass
class Phase:
    """One ordered stage of a build plan.

    Collections keep insertion order and ignore duplicates so that the same
    inputs always serialize identically.
    """
    name: str
    cmds: List[str] = field(default_factory=list)
    nix_pkgs: List[str] = field(default_factory=list)
    nix_libs: List[str] = field(default_factory=list)
    apt_pkgs: List[str] = field(default_factory=list)
    nix_overlays: List[str] = field(default_factory=list)
    cache_directories: List[str] = field(default_factory=list)
    paths: List[str] = field(default_factory=list)
    depends_on: List[str] = field(default_factory=list)

    @classmethod
    def setup(cls, pkgs: Optional[Iterable[Pkg]] = None) -> "Phase":
        phase = cls(SETUP)
        phase.add_nix_pkgs(pkgs or [])
        return phase

    @classmethod
    def install(cls, cmd: Optional[str] = None) -> "Phase":
        phase = cls(INSTALL, depends_on=[SETUP])
        if cmd:
            phase.add_cmd(cmd)
        return phase

    @classmethod
    def build(cls, cmd: Optional[str] = None) -> "Phase":
        phase = cls(BUILD, depends_on=[INSTALL])
        if cmd:
            phase.add_cmd(cmd)
        return phase

    def add_cmd(self, cmd: str) -> None:
        self.cmds.append(cmd)

    def add_nix_pkgs(self, pkgs: Iterable[Pkg]) -> None:
        for pkg in pkgs:
            _extend_unique(self.nix_pkgs, [pkg.name])
            if pkg.overlay:
                _extend_unique(self.nix_overlays, [pkg.overlay])

    def add_pkgs_libs(self, libs: Iterable[str]) -> None:
        _extend_unique(self.nix_libs, libs)

    def add_apt_pkgs(self, pkgs: Iterable[str]) -> None:
        _extend_unique(self.apt_pkgs, pkgs)

    def add_cache_directory(self, directory: str) -> None:
        _extend_unique(self.cache_directories, [directory])

    def add_path(self, path: str) -> None:
        _extend_unique(self.paths, [path])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "dependsOn": list(self.depends_on),
            "cmds": list(self.cmds),
            "nixPkgs": list(self.nix_pkgs),
            "nixLibs": list(self.nix_libs),
            "aptPkgs": list(self.apt_pkgs),
            "nixOverlays": list(self.nix_overlays),
            "cacheDirectories": list(self.cache_directories),
            "paths": list(self.paths),
        }


@dataclass(frozen=True)
class StartPhase:
    """The command that runs the built application."""
    cmd: str

    def to_dict(self) -> Dict[str, Any]:
        return {"cmd": self.cmd}


@dataclass(frozen=True)
class BuildPlan:
    """Ordered phases plus global environment variables.

    Build with BuildPlan.new(); the phase list and variables are copied so the
    plan does not change when the caller's objects do.
    """
    phases: Tuple[Phase, ...]
    start: Optional[StartPhase]
    variables: Mapping[str, str]
    providers: Tuple[str, ...] = ()

    @classmethod
    def new(
        cls,
        phases: Iterable[Phase],
        start: Optional[StartPhase] = None,
        variables: Optional[Mapping[str, str]] = None,
        providers: Iterable[str] = (),
    ) -> "BuildPlan":
        copied = tuple(
            Phase(**{k: (list(v) if isinstance(v, list) else v) for k, v in vars(p).items()})
            for p in phases
        )
        return cls(
            phases=copied,
            start=start,
            variables=MappingProxyType(dict(variables or {})),
            providers=tuple(providers),
        )

    def get_phase(self, name: str) -> Optional[Phase]:
        for phase in self.phases:
            if phase.name == name:
                return phase
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to plain JSON-compatible types; variables are key-sorted."""
        return {
            "providers": list(self.providers),
            "variables": {k: self.variables[k] for k in sorted(self.variables)},
            "phases": [phase.to_dict() for phase in self.phases],
            "start": self.start.to_dict() if self.start else None,
        }
