"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    PARSE_ERROR = 2
    NO_PLAN = 3


class PackageManagers(Enum):
    """Node package managers the planner can select.

    Args:
        Enum (string): Package manager binary names.
    """

    NPM = "npm"
    YARN = "yarn"
    PNPM = "pnpm"
    BUN = "bun"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    ENV_PREFIX = "NIXPACKS_"
    OUTPUT_FORMATS = ["json", "yaml"]
    CONFIG_FILE_LOCATIONS = (
        "nodeplan.yml",
        "nodeplan.yaml",
        "~/.config/nodeplan/nodeplan.yml",
    )

    # Manifest and lockfile names
    PACKAGE_JSON_FILE = "package.json"
    PACKAGE_LOCK_FILE = "package-lock.json"
    YARN_LOCK_FILE = "yarn.lock"
    PNPM_LOCK_FILE = "pnpm-lock.yaml"
    BUN_LOCKB_FILE = "bun.lockb"
    BUN_LOCK_FILE = "bun.lock"
    YARNRC_YML_FILE = ".yarnrc.yml"
    PNPM_WORKSPACE_FILE = "pnpm-workspace.yaml"
    NODE_VERSION_PIN_FILES = (".nvmrc", ".node-version")
    NODE_MODULES_DIR = "node_modules"

    # Runtime selection
    NODE_OVERLAY = "https://github.com/railwayapp/nix-npm-overlay/archive/main.tar.gz"
    DEFAULT_NODE_PKG_NAME = "nodejs-16_x"
    NODE_PKG_TEMPLATE = "nodejs-{}_x"
    AVAILABLE_NODE_VERSIONS = (14, 16, 18)
    NODE_VERSION_VARIABLE = "NODE_VERSION"

    # Cache directories
    YARN_CACHE_DIR = "/usr/local/share/.cache/yarn/v6"
    PNPM_CACHE_DIR = "/root/.cache/pnpm"
    NPM_CACHE_DIR = "/root/.npm"
    BUN_CACHE_DIR = "/root/.bun"
    CYPRESS_CACHE_DIR = "/root/.cache/Cypress"
    NODE_MODULES_CACHE_DIR = "node_modules/.cache"
    NEXT_CACHE_DIR = ".next/cache"
    NODE_MODULES_BIN_PATH = "/app/node_modules/.bin"

    # Monorepo orchestrators
    NX_JSON_FILE = "nx.json"
    NX_APP_NAME_VARIABLE = "NX_APP_NAME"
    NX_APPS_DIR = "apps"
    TURBO_JSON_FILE = "turbo.json"
    TURBO_APP_NAME_VARIABLE = "TURBO_APP_NAME"

    # Dependency-triggered system libraries
    PUPPETEER_APT_PKGS = (
        "libnss3",
        "libatk1.0-0",
        "libatk-bridge2.0-0",
        "libcups2",
        "libgbm1",
        "libasound2",
        "libpangocairo-1.0-0",
        "libxss1",
        "libgtk-3-0",
        "libxshmfence1",
        "libglu1",
    )
    CANVAS_NIX_LIBS = ("libuuid", "libGL")

    NODE_ENVIRONMENT_VARIABLES = (
        ("NODE_ENV", "production"),
        ("NPM_CONFIG_PRODUCTION", "false"),
        ("CI", "true"),
    )
