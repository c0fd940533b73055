"""Parser for rule files: ``PATTERN = (SPEC)(SPEC)...`` lines."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from technicolor.config.defaults import STDERR_PATTERN, STDOUT_PATTERN
from technicolor.config.schema import Rule, RuleSet
from technicolor.core.color import ColorParser, ColorSpec, merge_colors
from technicolor.errors import ColorSpecError, ConfigError

logger = logging.getLogger(__name__)

# Whole right-hand side: one or more parenthesized specs and nothing else
_SPECS_RE = re.compile(r"\s*(?:\([^()]*\)\s*)+")
_SPEC_RE = re.compile(r"\(([^()]*)\)")


class RuleSetParser:
    """Builds a RuleSet from rule-file lines.

    Parsing is best effort: every malformed line is reported through the
    logger, recorded in ``errors`` and skipped, and the rest of the input is
    still used.
    """

    def __init__(self, base: RuleSet | None = None) -> None:
        """Initialize the parser.

        Args:
            base: RuleSet to extend (defaults and rules are kept)
        """
        base = base or RuleSet()
        self.stdout_default: ColorSpec = base.stdout_default
        self.stderr_default: ColorSpec = base.stderr_default
        self.rules: list[Rule] = list(base.rules)
        self.errors: list[ConfigError] = []
        self.color_parser = ColorParser()

    def feed(self, lines: Iterable[str], source: str = "<string>") -> RuleSetParser:
        """Parse lines and add their rules.

        Args:
            lines: Config lines (trailing newlines are ignored)
            source: Name used in diagnostics

        Returns:
            self, for chaining
        """
        for line_number, raw in enumerate(lines, start=1):
            line = raw.rstrip("\r\n")
            if not line.strip() or line.startswith("#"):
                continue
            self.parse_line(line, line_number=line_number, source=source)
        return self

    def parse_line(self, line: str, line_number: int | None = None, source: str = "<string>") -> bool:
        """Parse a single rule line.

        Returns:
            True if the line was accepted
        """
        pattern_str, sep, specs_str = line.rpartition("=")
        pattern_str = pattern_str.strip()
        specs_str = specs_str.strip()

        if not sep or not pattern_str:
            return self._error("Malformed config line", line, line_number, source)

        if not specs_str or not _SPECS_RE.fullmatch(specs_str):
            return self._error("Malformed config line (has no color specs)", line, line_number, source)

        colors: list[ColorSpec] = []
        for spec in _SPEC_RE.findall(specs_str):
            try:
                colors.append(self.color_parser.parse(spec))
            except ColorSpecError as e:
                return self._error(f"Failed to parse color spec [{spec.strip()}]: {e}", line, line_number, source)

        if pattern_str in (STDOUT_PATTERN, STDERR_PATTERN):
            if len(colors) > 1:
                logger.warning(
                    "%s: only the first color spec is used for %s",
                    _location(source, line_number),
                    pattern_str,
                )
            if pattern_str == STDOUT_PATTERN:
                self.stdout_default = merge_colors(colors[0], self.stdout_default)
            else:
                self.stderr_default = merge_colors(colors[0], self.stderr_default)
            return True

        try:
            pattern = re.compile(pattern_str)
        except re.error as e:
            return self._error(f"Invalid regular expression: {e}", line, line_number, source)

        if pattern.groups != len(colors):
            return self._error(
                f"Pattern has {pattern.groups} capture group(s) but {len(colors)} color spec(s)",
                line,
                line_number,
                source,
            )

        rule = Rule(pattern=pattern, colors=tuple(colors))
        logger.debug("Loaded rule %s", rule)
        self.rules.append(rule)
        return True

    def build(self) -> RuleSet:
        """Freeze the parsed state into a RuleSet."""
        return RuleSet(
            stdout_default=self.stdout_default,
            stderr_default=self.stderr_default,
            rules=tuple(self.rules),
        )

    def _error(self, message: str, line: str, line_number: int | None, source: str) -> bool:
        error = ConfigError(message=message, line=line, line_number=line_number, source=source)
        self.errors.append(error)
        logger.warning("config error: %s", error)
        return False


def _location(source: str, line_number: int | None) -> str:
    return source if line_number is None else f"{source}:{line_number}"


def parse_rules(lines: Iterable[str], base: RuleSet | None = None, source: str = "<string>") -> RuleSet:
    """Parse rule lines into a RuleSet.

    Args:
        lines: Config lines
        base: RuleSet to extend
        source: Name used in diagnostics

    Returns:
        The resulting RuleSet
    """
    return RuleSetParser(base).feed(lines, source=source).build()
