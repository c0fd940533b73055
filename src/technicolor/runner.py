"""Run a child command with its output piped through the drain loop."""

from __future__ import annotations

import logging
import subprocess
import sys
from collections.abc import Sequence
from typing import BinaryIO

from technicolor.config.schema import Config
from technicolor.core.drain import DrainLoop
from technicolor.core.matcher import LineColorizer
from technicolor.core.writer import SegmentWriter

logger = logging.getLogger(__name__)

EXIT_NOT_EXECUTABLE = 126
EXIT_NOT_FOUND = 127


def exit_status(returncode: int) -> int:
    """Map a Popen return code to a shell-style exit status."""
    if returncode < 0:
        return 128 - returncode
    return returncode


def run_command(
    argv: Sequence[str],
    config: Config,
    stdout: BinaryIO | None = None,
    stderr: BinaryIO | None = None,
) -> int:
    """Run a command and colorize its output.

    Args:
        argv: Command and arguments
        config: Settings and rules
        stdout: Sink for the child's stdout (default: this process's stdout)
        stderr: Sink for the child's stderr (default: this process's stderr)

    Returns:
        The child's exit status
    """
    if not argv:
        raise ValueError("No command given")

    settings = config.settings
    stdout = stdout if stdout is not None else sys.stdout.buffer
    stderr = stderr if stderr is not None else sys.stderr.buffer

    try:
        proc = subprocess.Popen(
            list(argv),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            bufsize=0,
        )
    except FileNotFoundError:
        logger.error("error executing command: %s: command not found", argv[0])
        return EXIT_NOT_FOUND
    except PermissionError:
        logger.error("error executing command: %s: permission denied", argv[0])
        return EXIT_NOT_EXECUTABLE

    logger.debug("started %s (pid %d)", argv[0], proc.pid)

    with proc:
        loop = DrainLoop(
            colorizer=LineColorizer(config.ruleset, strict_coverage=settings.strict_coverage),
            stdout_source=proc.stdout,
            stderr_source=proc.stderr,
            stdout_writer=SegmentWriter(stdout, color=settings.color, encoding=settings.encoding),
            stderr_writer=SegmentWriter(stderr, color=settings.color, encoding=settings.encoding),
            chunk_size=settings.chunk_size,
            poll_timeout=settings.poll_timeout,
            sleep_interval=settings.sleep_interval,
            encoding=settings.encoding,
        )
        try:
            stats = loop.run()
        except BaseException:
            proc.kill()
            raise
        returncode = proc.wait()

    logger.debug(
        "%s exited with %d (stdout: %d lines, stderr: %d lines)",
        argv[0],
        returncode,
        stats.stdout.lines,
        stats.stderr.lines,
    )
    return exit_status(returncode)
