"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FAILURE = 1
    CONNECTION_ERROR = 2
    PARSE_ERROR = 3
    NO_COMPATIBLE_VERSION = 4


class Tools(Enum):
    """Tools whose versions can be managed.

    Args:
        Enum (string): Tool identifier used on the command line.
    """

    TOFU = "tofu"
    TERRAFORM = "terraform"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    # Reserved version keywords
    LATEST_KEY = "latest"
    LATEST_STABLE_KEY = "latest-stable"
    LATEST_PRE_KEY = "latest-pre"
    LATEST_ALLOWED_KEY = "latest-allowed"
    MIN_REQUIRED_KEY = "min-required"
    LATEST_PREFIX = "latest:"
    MIN_PREFIX = "min:"

    SUPPORTED_TOOLS = [Tools.TOFU.value, Tools.TERRAFORM.value]
    DEFAULT_ROOT_DIR = ".tofuenv"
    CONFIG_FILE = "config.yaml"

    # Per tool install folder, pointer file and environment override
    TOOL_FOLDERS = {Tools.TOFU.value: "OpenTofu", Tools.TERRAFORM.value: "Terraform"}
    TOOL_VERSION_FILES = {
        Tools.TOFU.value: ".opentofu-version",
        Tools.TERRAFORM.value: ".terraform-version",
    }
    TOOL_VERSION_ENVS = {
        Tools.TOFU.value: "TOFUENV_TOFU_VERSION",
        Tools.TERRAFORM.value: "TOFUENV_TF_VERSION",
    }

    # Environment variables read by the configuration layer
    ENV_ROOT = "TOFUENV_ROOT"
    ENV_CONFIG = "TOFUENV_CONFIG"
    ENV_VERBOSE = "TOFUENV_VERBOSE"
    ENV_AUTO_INSTALL = "TOFUENV_AUTO_INSTALL"
    ENV_REMOTE = "TOFUENV_REMOTE"
    ENV_GITHUB_TOKEN = "GITHUB_TOKEN"
    ENV_TOFUENV_GITHUB_TOKEN = "TOFUENV_GITHUB_TOKEN"
    ENV_LOG_LEVEL = "TOFUENV_LOG_LEVEL"

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for metadata requests
    DOWNLOAD_TIMEOUT = 300  # Timeout in seconds for archive downloads
    DOWNLOAD_CHUNK_SIZE = 64 * 1024

    # Release index endpoints
    GITHUB_API_BASE = "https://api.github.com"
    TOFU_GITHUB_REPO = "opentofu/opentofu"
    TOFU_DOWNLOAD_BASE = "https://github.com/opentofu/opentofu/releases/download"
    TERRAFORM_REMOTE = "https://releases.hashicorp.com"
    REPO_API_PER_PAGE = 100
    HTTP_RETRY_MAX = 3
    HTTP_RETRY_BASE_DELAY_SEC = 0.3
    HTTP_CACHE_TTL_SEC = 300
