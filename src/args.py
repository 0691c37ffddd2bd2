"""Argument parsing functionality for nodeplan."""

import argparse
from constants import Constants

def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="nodeplan",
        description=(
            "nodeplan - Build plan generator for Node.js projects"
        ),
        add_help=True,
    )

    parser.add_argument("-d", "--directory",
                        dest="DIRECTORY",
                        help="Project source directory to plan (default: current directory)",
                        action="store",
                        type=str,
                        default=".")
    parser.add_argument("-e", "--env",
                        dest="ENV",
                        help="Environment override in KEY=VALUE format, e.g. NIXPACKS_NODE_VERSION=18 (can be used multiple times)",
                        action="append",
                        type=str,
                        default=[])

    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Path to output file (JSON or YAML); prints to stdout when omitted",
                        action="store",
                        type=str)
    parser.add_argument("-f", "--format",
                        dest="OUTPUT_FORMAT",
                        help="Output format (json or yaml). If not specified, inferred from --output extension; defaults to json.",
                        action="store",
                        type=str.lower,
                        choices=Constants.OUTPUT_FORMATS)

    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Do not log to console.",
                        action="store_true")

    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str)

    return parser.parse_args(argv)
