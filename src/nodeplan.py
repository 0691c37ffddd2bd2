"""nodeplan - Build plan generator for Node.js projects.

    Returns:
        int: Exit code
"""
import json
import logging
import sys

import yaml

from args import parse_args
from cli_config import build_environment, load_config, resolve_log_level, resolve_output_format
from common.app import AppError, ParseError
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import ExitCodes
from plan.validate import SchemaError, validate_plan
from planner import generate_plan


def render_plan(plan_dict, fmt):
    """Serialize a plan dict as JSON or YAML text."""
    if fmt == "yaml":
        return yaml.safe_dump(plan_dict, sort_keys=False, default_flow_style=False)
    return json.dumps(plan_dict, indent=2) + "\n"


def write_output(text, path=None):
    """Write rendered plan text to a file, or stdout when no path is given."""
    if not path:
        sys.stdout.write(text)
        return
    with open(path, "w", encoding="utf-8") as fh:
        fh.write(text)
    logging.info("Plan written to %s", path)


def main(argv=None):
    """Main function of the program."""
    logger = logging.getLogger(__name__)

    args = parse_args(argv)
    configure_logging(log_file=args.LOG_FILE, quiet=args.QUIET)

    cfg = load_config(args.CONFIG)
    level = resolve_log_level(args, cfg)
    if level:
        logging.getLogger().setLevel(getattr(logging, level, logging.INFO))

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main")
        )

    try:
        env = build_environment(args, cfg)
    except ValueError as e:
        logging.error("%s", e)
        return ExitCodes.PARSE_ERROR.value

    try:
        plan = generate_plan(args.DIRECTORY, env)
    except ParseError as e:
        logging.error("Malformed project file, aborting: %s", e)
        return ExitCodes.PARSE_ERROR.value
    except SchemaError as e:
        logging.error("Malformed manifest, aborting: %s", e)
        return ExitCodes.PARSE_ERROR.value
    except AppError as e:
        logging.error("Unable to read project, aborting: %s", e)
        return ExitCodes.FILE_ERROR.value

    if plan is None:
        logging.error("No provider recognized the project at %s", args.DIRECTORY)
        return ExitCodes.NO_PLAN.value

    plan_dict = plan.to_dict()
    validate_plan(plan_dict)

    text = render_plan(plan_dict, resolve_output_format(args, cfg))
    try:
        write_output(text, args.OUTPUT)
    except OSError as e:
        logging.error("Unable to write plan: %s", e)
        return ExitCodes.FILE_ERROR.value

    if is_debug_enabled(logger):
        logger.debug(
            "CLI finished",
            extra=extra_context(event="function_exit", component="cli", action="main", outcome="success")
        )
    return ExitCodes.SUCCESS.value


def cli():
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    cli()
