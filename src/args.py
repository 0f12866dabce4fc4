"""Argument parsing functionality for tofuenv."""

import argparse
from constants import Constants


def build_parser():
    """Build the command line parser with one subcommand per operation."""
    parser = argparse.ArgumentParser(
        prog="tofuenv",
        description="tofuenv - OpenTofu and Terraform version manager",
        add_help=True,
    )

    parser.add_argument("-t", "--tool",
                        dest="TOOL",
                        help="Managed tool (default: tofu)",
                        action="store", type=str.lower,
                        choices=Constants.SUPPORTED_TOOLS,
                        default=Constants.SUPPORTED_TOOLS[0])
    parser.add_argument("-r", "--root-path",
                        dest="ROOT_PATH",
                        help="Root directory of installed versions and pointer files",
                        action="store",
                        type=str)
    parser.add_argument("-u", "--remote-url",
                        dest="REMOTE_URL",
                        help="Release index base URL",
                        action="store",
                        type=str)
    parser.add_argument("--github-token",
                        dest="GITHUB_TOKEN",
                        help="GitHub token used to list OpenTofu releases",
                        action="store",
                        type=str)
    parser.add_argument("-v", "--verbose",
                        dest="VERBOSE",
                        help="Report progress messages",
                        action="store_const", const=True,
                        default=None)
    parser.add_argument("-n", "--no-install",
                        dest="NO_INSTALL",
                        help="Resolve versions without installing them",
                        action="store_const", const=True,
                        default=None)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML)",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    sub = parser.add_subparsers(dest="COMMAND", metavar="COMMAND")
    sub.required = True

    detect = sub.add_parser("detect", help="Display the version matching a request, installing it if needed")
    detect.add_argument("VERSION", nargs="?", help="Version or constraint (default: resolved pointer value)")

    install = sub.add_parser("install", help="Install a version")
    install.add_argument("VERSION", nargs="?", help="Version or constraint (default: resolved pointer value)")

    uninstall = sub.add_parser("uninstall", help="Uninstall an exact version")
    uninstall.add_argument("VERSION", help="Exact version")

    use = sub.add_parser("use", help="Select a version in a pointer file")
    use.add_argument("VERSION", help="Version or constraint")
    use.add_argument("-f", "--force-remote",
                     dest="FORCE_REMOTE",
                     help="Skip the installed versions and search the release index",
                     action="store_true")
    use.add_argument("-w", "--working-dir",
                     dest="WORKING_DIR",
                     help="Write the pointer file in the current directory instead of the root",
                     action="store_true")

    sub.add_parser("reset", help="Remove the root pointer file")
    sub.add_parser("list", help="List installed versions")
    sub.add_parser("list-remote", help="List versions available in the release index")
    sub.add_parser("resolve", help="Display the version selected by pointer files")

    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
