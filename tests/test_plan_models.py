"""Tests for build plan models and schema validation."""

import pytest

from plan.models import BUILD, INSTALL, SETUP, BuildPlan, Phase, Pkg, StartPhase
from plan.validate import SchemaError, validate_manifest, validate_plan

OVERLAY = "https://example.com/overlay.tar.gz"


class TestPhase:
    """Phase construction and dedupe."""

    def test_dependencies(self):
        assert Phase.setup().depends_on == []
        assert Phase.install("npm i").depends_on == [SETUP]
        assert Phase.build().depends_on == [INSTALL]

    def test_no_command_means_empty_cmds(self):
        assert Phase.build(None).cmds == []

    def test_pkgs_collect_overlays_once(self):
        phase = Phase.setup([Pkg("nodejs-18_x"), Pkg("npm-8_x").from_overlay(OVERLAY), Pkg("x").from_overlay(OVERLAY)])
        assert phase.nix_pkgs == ["nodejs-18_x", "npm-8_x", "x"]
        assert phase.nix_overlays == [OVERLAY]

    def test_add_methods_ignore_duplicates(self):
        phase = Phase.install()
        phase.add_cache_directory("/root/.npm")
        phase.add_cache_directory("/root/.npm")
        phase.add_path("/app/node_modules/.bin")
        phase.add_path("/app/node_modules/.bin")
        phase.add_apt_pkgs(["libnss3", "libnss3"])
        assert phase.cache_directories == ["/root/.npm"]
        assert phase.paths == ["/app/node_modules/.bin"]
        assert phase.apt_pkgs == ["libnss3"]

    def test_to_dict_keys(self):
        data = Phase.build("npm run build").to_dict()
        assert data["name"] == BUILD
        assert data["dependsOn"] == [INSTALL]
        assert data["cmds"] == ["npm run build"]
        assert set(data) == {
            "name", "dependsOn", "cmds", "nixPkgs", "nixLibs",
            "aptPkgs", "nixOverlays", "cacheDirectories", "paths",
        }


class TestBuildPlan:
    """Plan immutability and serialization."""

    def test_new_copies_phases(self):
        setup = Phase.setup([Pkg("nodejs-16_x")])
        plan = BuildPlan.new([setup], StartPhase("npm run start"), {"CI": "true"})
        setup.add_nix_pkgs([Pkg("extra")])
        assert plan.get_phase(SETUP).nix_pkgs == ["nodejs-16_x"]

    def test_variables_are_read_only(self):
        plan = BuildPlan.new([], None, {"CI": "true"})
        with pytest.raises(TypeError):
            plan.variables["CI"] = "false"

    def test_to_dict_sorts_variables(self):
        plan = BuildPlan.new([Phase.setup()], None, {"NODE_ENV": "production", "CI": "true"}, providers=["node"])
        data = plan.to_dict()
        assert list(data["variables"]) == ["CI", "NODE_ENV"]
        assert data["providers"] == ["node"]
        assert data["start"] is None
        validate_plan(data)

    def test_get_missing_phase(self):
        assert BuildPlan.new([]).get_phase(BUILD) is None


class TestValidation:
    """jsonschema validation of manifests and plans."""

    def test_valid_manifest(self):
        validate_manifest({
            "name": "app",
            "scripts": {"build": "tsc"},
            "engines": {"node": ">=16"},
            "workspaces": {"packages": ["apps/*"]},
            "private": True,
        })

    @pytest.mark.parametrize("data", [
        {"scripts": ["build"]},
        {"engines": {"node": 18}},
        {"main": 1},
        {"dependencies": "express"},
        [],
    ])
    def test_invalid_manifest(self, data):
        with pytest.raises(SchemaError):
            validate_manifest(data)

    def test_error_names_path(self):
        with pytest.raises(SchemaError) as exc:
            validate_manifest({"engines": {"node": 18}}, "apps/web/package.json")
        assert "apps/web/package.json" in str(exc.value)
        assert "engines/node" in str(exc.value)

    def test_invalid_plan(self):
        with pytest.raises(SchemaError):
            validate_plan({"providers": [], "variables": {}, "phases": [{"name": "setup"}], "start": None})
