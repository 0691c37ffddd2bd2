"""Tests for the Nx and Turborepo delegates."""

import json

import pytest

from common.app import App, ParseError
from common.environment import Environment
from constants import PackageManagers
from providers.node.manifest import load_package_json
from providers.node.monorepo import DELEGATES, Nx, Turborepo


def write_json(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))


@pytest.fixture
def nx_app(tmp_path):
    write_json(tmp_path / "package.json", {"name": "workspace"})
    write_json(tmp_path / "nx.json", {"defaultProject": "api"})
    write_json(tmp_path / "apps" / "api" / "project.json", {
        "targets": {
            "build": {
                "executor": "@nrwl/node:webpack",
                "options": {"outputPath": "dist/apps/api", "main": "apps/api/src/main.ts"},
            }
        }
    })
    return tmp_path


def test_delegate_order_is_fixed():
    assert [d.name for d in DELEGATES] == ["nx", "turborepo"]


class TestNx:
    """Nx workspace detection and commands."""

    def test_applicable_with_default_project(self, nx_app):
        assert Nx().is_applicable(App(str(nx_app)), Environment())

    def test_not_applicable_without_project_json(self, tmp_path):
        write_json(tmp_path / "nx.json", {"defaultProject": "web"})
        assert not Nx().is_applicable(App(str(tmp_path)), Environment())

    def test_not_applicable_without_app_name(self, tmp_path):
        write_json(tmp_path / "nx.json", {})
        assert not Nx().is_applicable(App(str(tmp_path)), Environment())

    def test_env_app_name_wins(self, nx_app):
        write_json(nx_app / "apps" / "web" / "project.json", {"targets": {}})
        env = Environment({"NIXPACKS_NX_APP_NAME": "web"})
        assert Nx().get_app_name(App(str(nx_app)), env) == "web"

    def test_build_command_uses_dlx(self, nx_app):
        app = App(str(nx_app))
        assert Nx().build_command(app, Environment(), PackageManagers.NPM) == "npx nx run api:build:production"
        assert Nx().build_command(app, Environment(), PackageManagers.PNPM) == "pnpx nx run api:build:production"

    def test_start_runs_main_output(self, nx_app):
        app = App(str(nx_app))
        cmd = Nx().start_command(app, Environment(), load_package_json(app), PackageManagers.NPM)
        assert cmd == "node dist/apps/api/main.js"

    def test_start_without_main(self, nx_app):
        write_json(nx_app / "apps" / "api" / "project.json", {
            "targets": {"build": {"executor": "@nrwl/js:tsc", "options": {"outputPath": "dist/api"}}}
        })
        app = App(str(nx_app))
        cmd = Nx().start_command(app, Environment(), load_package_json(app), PackageManagers.NPM)
        assert cmd == "node dist/api/index.js"

    def test_start_target(self, nx_app):
        write_json(nx_app / "apps" / "api" / "project.json", {
            "targets": {"build": {}, "start": {"configurations": {"production": {}}}}
        })
        app = App(str(nx_app))
        cmd = Nx().start_command(app, Environment(), load_package_json(app), PackageManagers.YARN)
        assert cmd == "yarn nx run api:start:production"

    def test_next_executor(self, nx_app):
        write_json(nx_app / "apps" / "api" / "project.json", {
            "targets": {"build": {"executor": "@nrwl/next:build", "options": {"outputPath": "dist/apps/api"}}}
        })
        app = App(str(nx_app))
        cmd = Nx().start_command(app, Environment(), load_package_json(app), PackageManagers.NPM)
        assert cmd == "cd dist/apps/api && npm run start"

    def test_malformed_project_json_is_fatal(self, nx_app):
        (nx_app / "apps" / "api" / "project.json").write_text("{")
        app = App(str(nx_app))
        with pytest.raises(ParseError):
            Nx().start_command(app, Environment(), load_package_json(app), PackageManagers.NPM)


class TestTurborepo:
    """Turborepo detection and commands."""

    def test_applicable(self, tmp_path):
        write_json(tmp_path / "repo" / "turbo.json", {"pipeline": {}})
        (tmp_path / "plain").mkdir()
        assert Turborepo().is_applicable(App(str(tmp_path / "repo")), Environment())
        assert not Turborepo().is_applicable(App(str(tmp_path / "plain")), Environment())

    def test_build_with_app_name(self, tmp_path):
        write_json(tmp_path / "turbo.json", {"pipeline": {"build": {}}})
        env = Environment({"NIXPACKS_TURBO_APP_NAME": "web"})
        cmd = Turborepo().build_command(App(str(tmp_path)), env, PackageManagers.NPM)
        assert cmd == "npx turbo run build --filter=web"

    def test_build_from_pipeline(self, tmp_path):
        write_json(tmp_path / "turbo.json", {"pipeline": {"build": {"outputs": ["dist/**"]}}})
        cmd = Turborepo().build_command(App(str(tmp_path)), Environment(), PackageManagers.YARN)
        assert cmd == "yarn turbo run build"

    def test_build_from_tasks(self, tmp_path):
        write_json(tmp_path / "turbo.json", {"tasks": {"build": {}}})
        cmd = Turborepo().build_command(App(str(tmp_path)), Environment(), PackageManagers.NPM)
        assert cmd == "npx turbo run build"

    def test_no_build_task(self, tmp_path):
        write_json(tmp_path / "turbo.json", {"pipeline": {"lint": {}}})
        assert Turborepo().build_command(App(str(tmp_path)), Environment(), PackageManagers.NPM) is None

    def test_malformed_turbo_json_yields_nothing(self, tmp_path):
        (tmp_path / "turbo.json").write_text("{oops")
        assert Turborepo().build_command(App(str(tmp_path)), Environment(), PackageManagers.NPM) is None

    def test_start_finds_workspace_member(self, tmp_path):
        write_json(tmp_path / "package.json", {"name": "root", "workspaces": ["apps/*", "packages/*"]})
        write_json(tmp_path / "turbo.json", {"pipeline": {"build": {}}})
        write_json(tmp_path / "apps" / "web" / "package.json", {"name": "web", "scripts": {"start": "next start"}})
        write_json(tmp_path / "apps" / "docs" / "package.json", {"name": "docs", "scripts": {"start": "x"}})
        app = App(str(tmp_path))
        env = Environment({"NIXPACKS_TURBO_APP_NAME": "web"})
        cmd = Turborepo().start_command(app, env, load_package_json(app), PackageManagers.PNPM)
        assert cmd == "cd apps/web && pnpm run start"

    def test_start_uses_pnpm_workspace_file(self, tmp_path):
        write_json(tmp_path / "package.json", {"name": "root"})
        (tmp_path / "pnpm-workspace.yaml").write_text("packages:\n  - 'apps/*'\n  - '!apps/legacy'\n")
        write_json(tmp_path / "apps" / "legacy" / "package.json", {"name": "api", "scripts": {"start": "old"}})
        write_json(tmp_path / "apps" / "api" / "package.json", {"name": "api", "scripts": {"start": "node ."}})
        app = App(str(tmp_path))
        env = Environment({"NIXPACKS_TURBO_APP_NAME": "api"})
        cmd = Turborepo().start_command(app, env, load_package_json(app), PackageManagers.PNPM)
        assert cmd == "cd apps/api && pnpm run start"

    def test_start_without_app_name(self, tmp_path):
        write_json(tmp_path / "package.json", {"name": "root", "scripts": {"start": "turbo start"}})
        app = App(str(tmp_path))
        assert Turborepo().start_command(app, Environment(), load_package_json(app), PackageManagers.NPM) is None

    def test_opaque_workspaces_have_no_members(self, tmp_path):
        write_json(tmp_path / "package.json", {"name": "root", "workspaces": {"packages": ["apps/*"]}})
        app = App(str(tmp_path))
        manifest = load_package_json(app)
        assert manifest.workspaces.members is None
        assert Turborepo().workspace_patterns(app, manifest) == []
