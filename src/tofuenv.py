"""tofuenv - OpenTofu and Terraform version manager.

Command line entrypoint wiring configuration, logging and the version
manager of the selected tool.

    Returns:
        int: Exit code
"""
import logging
import sys

from args import parse_args
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from config import load_config
from constants import Constants, ExitCodes
from registry import get_retriever
from versioning.errors import (
    NetworkError,
    NoCompatibleVersionError,
    ParseError,
    VersionManagerError,
)
from versioning.manager import VersionManager

logger = logging.getLogger(__name__)


def build_manager(tool, conf):
    """Create the version manager of ``tool`` for configuration ``conf``."""
    return VersionManager(
        conf,
        Constants.TOOL_FOLDERS[tool],
        get_retriever(tool, conf),
        Constants.TOOL_VERSION_ENVS[tool],
        Constants.TOOL_VERSION_FILES[tool],
        display_name=Constants.TOOL_FOLDERS[tool],
    )


def run_command(args, manager):
    """Dispatch the parsed subcommand; returns lines to print."""
    command = args.COMMAND
    if command == "detect":
        requested = args.VERSION or manager.resolve(Constants.LATEST_KEY)
        return [manager.detect(requested)]
    if command == "install":
        requested = args.VERSION or manager.resolve(Constants.LATEST_KEY)
        return [manager.install(requested)]
    if command == "uninstall":
        manager.uninstall(args.VERSION)
        return []
    if command == "use":
        manager.use(args.VERSION, args.FORCE_REMOTE, args.WORKING_DIR)
        return []
    if command == "reset":
        manager.reset()
        return []
    if command == "list":
        return manager.list_local()
    if command == "list-remote":
        return manager.list_remote()
    if command == "resolve":
        return [manager.resolve(Constants.LATEST_KEY)]
    raise ValueError(f"Unknown command: {command}")


def exit_code_for(exc):
    """Map an error to the process exit code."""
    if isinstance(exc, ParseError):
        return ExitCodes.PARSE_ERROR.value
    if isinstance(exc, NoCompatibleVersionError):
        return ExitCodes.NO_COMPATIBLE_VERSION.value
    if isinstance(exc, NetworkError):
        return ExitCodes.CONNECTION_ERROR.value
    return ExitCodes.FAILURE.value


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL, args.LOG_FILE)

    conf = load_config(
        overrides={
            "root_path": args.ROOT_PATH,
            "remote_url": args.REMOTE_URL,
            "github_token": args.GITHUB_TOKEN,
            "verbose": args.VERBOSE,
            "no_install": args.NO_INSTALL,
        },
        config_file=args.CONFIG,
    )
    # verbose mode only raises the level when none was given explicitly
    root_logger = logging.getLogger()
    if args.LOG_LEVEL is None and conf.verbose and root_logger.getEffectiveLevel() > logging.INFO:
        root_logger.setLevel(logging.INFO)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(
                event="function_entry",
                component="cli",
                action=args.COMMAND,
                tool=args.TOOL,
            ),
        )

    manager = build_manager(args.TOOL, conf)
    try:
        lines = run_command(args, manager)
    except (VersionManagerError, OSError) as exc:
        logger.error("%s failed: %s", args.COMMAND, exc)
        return exit_code_for(exc)

    for line in lines:
        print(line)
    return ExitCodes.SUCCESS.value


if __name__ == "__main__":
    sys.exit(main())
