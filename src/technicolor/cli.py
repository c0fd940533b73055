"""Command-line interface for technicolor."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from technicolor import __version__
from technicolor.config.defaults import EXAMPLE_RULES
from technicolor.config.loader import load_config
from technicolor.runner import run_command

logger = logging.getLogger("technicolor")

LOG_FORMAT = "technicolor: %(message)s"


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        args: Arguments to parse (defaults to sys.argv[1:])

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        prog="technicolor",
        description="Run a command and colorize its stdout and stderr line by line",
        epilog="Example: technicolor --config ~/.technicolor -- make -j8",
    )

    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        metavar="FILE",
        help="Rule file (default: $TECHNICOLOR_CONFIG_DIR/default and conf.d/*.conf)",
    )

    parser.add_argument(
        "--config-dir",
        type=Path,
        metavar="DIR",
        help="Configuration directory (default: $TECHNICOLOR_CONFIG_DIR or ~/.config/technicolor/)",
    )

    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colors",
    )

    parser.add_argument(
        "--strict-coverage",
        action="store_true",
        help="Only apply a rule when its capture groups cover the whole line",
    )

    parser.add_argument(
        "--example-config",
        action="store_true",
        help="Print an example rule file and exit",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log reads and rule matches to stderr",
    )

    parser.add_argument(
        "--version",
        "-V",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "command",
        nargs=argparse.REMAINDER,
        help="Command to run (use -- to separate from options)",
    )

    parsed = parser.parse_args(args)
    if parsed.command and parsed.command[0] == "--":
        parsed.command = parsed.command[1:]
    return parsed


def setup_logging(verbose: bool = False) -> None:
    """Send diagnostics to stderr."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def main(args: list[str] | None = None) -> int:
    """Main entry point.

    Args:
        args: Command-line arguments

    Returns:
        Exit code
    """
    parsed = parse_args(args)
    setup_logging(parsed.verbose)

    if parsed.example_config:
        sys.stdout.write(EXAMPLE_RULES)
        return 0

    if not parsed.command:
        print("Error: No command provided", file=sys.stderr)
        print("Usage: technicolor [options] [--] <command> [args ...]", file=sys.stderr)
        return 1

    # Load configuration
    try:
        config = load_config(
            config_path=parsed.config,
            config_dir=parsed.config_dir,
        )
    except Exception as e:
        logger.error("error: loading configuration: %s", e)
        return 1

    # Override config options
    overrides: dict[str, bool] = {}
    if parsed.no_color:
        overrides["color"] = False
    if parsed.strict_coverage:
        overrides["strict_coverage"] = True
    if overrides:
        config = config.model_copy(update={"settings": config.settings.model_copy(update=overrides)})

    try:
        return run_command(parsed.command, config)
    except KeyboardInterrupt:
        return 130
    except Exception as e:
        logger.error("error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
