"""Console entry point.

Usage::

    mvcstarter-console [--env-file PATH] [-v] <controller/action> [args...] [--name=value...]

Positional arguments bind to the command's parameters in order, options bind
by name. Exit code is 0 on success and non-zero on any dispatch or execution
failure.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .commands import build_registry
from .core.config import PROJECT_ROOT, AppConfig, build_console_config
from .core.dispatch import ControllerRegistry, Data, Dispatcher, ExitCode, Redirect, Rendered
from .core.env import load_env, locate_env_file
from .core.errors import ConfigError, HttpError, RouteError
from .core.log_setup import configure_logging

logger = logging.getLogger(__name__)


def _parse_arguments(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="mvcstarter-console",
        description="Run a console command.",
        epilog="Run without a route to list the available commands.",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to the .env file (default: $APP_ENV_FILE or the nearest .env)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log at DEBUG level",
    )
    parser.add_argument("route", nargs="?", default=None, help="Command route, e.g. route/list")
    parser.add_argument("args", nargs=argparse.REMAINDER, help="Command arguments")
    return parser.parse_args(argv)


def _print_usage(registry: ControllerRegistry) -> None:
    print("Usage: mvcstarter-console <controller/action> [args...] [--name=value...]\n", file=sys.stderr)
    print("Available commands:", file=sys.stderr)
    for route in registry.routes():
        print(f"  {route}", file=sys.stderr)


def run_console(config: AppConfig, registry: ControllerRegistry, argv: Sequence[str]) -> int:
    dispatcher = Dispatcher(config, registry, services={"registry": registry})
    try:
        result = dispatcher.run_console(argv)
    except RouteError as e:
        print(f"Error: {e}\n", file=sys.stderr)
        _print_usage(registry)
        return 1
    except HttpError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        logger.error(f"Command failed: {e}", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if isinstance(result, ExitCode):
        return result.code
    if isinstance(result, Rendered):
        print(result.body)
    elif isinstance(result, Data):
        print(json.dumps(result.payload, indent=2))
    elif isinstance(result, Redirect):
        print(result.location)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_arguments(sys.argv[1:] if argv is None else argv)

    try:
        env = load_env(locate_env_file(args.env_file, base_path=PROJECT_ROOT))
        config = build_console_config(env)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    configure_logging(config, verbose=args.verbose)

    registry = build_registry()
    route_argv = [args.route] + list(args.args) if args.route else []
    return run_console(config, registry, route_argv)


if __name__ == "__main__":
    sys.exit(main())
