"""Colorize the stdout and stderr of a command, line by line, with regex rules."""

__version__ = "0.1.0"
