"""Rule matching and per-line color assignment."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from technicolor.core.color import ColorSpec, resolve_color
from technicolor.errors import CaptureCountError

if TYPE_CHECKING:
    from technicolor.config.schema import Rule, RuleSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Segment:
    """A piece of a line with the resolved color to draw it in."""

    text: str
    color: ColorSpec


def match_covers_line(line: str, match: re.Match[str], strict: bool = False) -> bool:
    """Check whether a match's capture groups cover the whole line.

    In permissive mode (the default) any full-line match is accepted, even if
    some text falls outside every capture group; that text is then dropped
    from the output. In strict mode the participating groups must tile the
    line from start to end, in order, without gaps or overlaps.

    Args:
        line: The line that was matched
        match: Full-line match of a rule pattern
        strict: Enable genuine coverage validation

    Returns:
        True if the rule may be used for this line
    """
    if not strict:
        return True

    position = 0
    for index in range(1, match.re.groups + 1):
        start, end = match.span(index)
        if start == -1:
            continue
        if start != position:
            return False
        position = end
    return position == len(line)


class LineColorizer:
    """Splits lines into colored segments according to a RuleSet."""

    def __init__(self, ruleset: RuleSet, strict_coverage: bool = False) -> None:
        """Initialize the colorizer.

        Args:
            ruleset: Rules and stream defaults (read only)
            strict_coverage: Require capture groups to cover the whole line
        """
        self.ruleset = ruleset
        self.strict_coverage = strict_coverage

    def colorize(self, line: str, is_stderr: bool = False) -> list[Segment]:
        """Colorize a single completed line (without its newline).

        Args:
            line: Line text
            is_stderr: Whether the line came from stderr

        Returns:
            Segments in output order

        Raises:
            CaptureCountError: If the first qualifying rule has the wrong number of colors
            UnresolvedColorError: If the stream default is incomplete
        """
        default = self.ruleset.default_for(is_stderr)

        for rule in self.ruleset.rules:
            match = rule.pattern.fullmatch(line)
            if match is None:
                continue
            if not match_covers_line(line, match, strict=self.strict_coverage):
                logger.debug("Match of %r does not cover line %r", rule.pattern.pattern, line)
                continue
            logger.debug("Rule %r matched line %r", rule.pattern.pattern, line)
            return self._segments_for(rule, match, default)

        return [Segment(line, resolve_color(default, default))]

    def _segments_for(self, rule: Rule, match: re.Match[str], default: ColorSpec) -> list[Segment]:
        groups = match.groups()
        if len(groups) != len(rule.colors):
            raise CaptureCountError(rule.pattern.pattern, len(groups), len(rule.colors))

        return [
            Segment(text or "", resolve_color(color, default))
            for text, color in zip(groups, rule.colors)
        ]


def colorize(line: str, ruleset: RuleSet, is_stderr: bool = False, strict_coverage: bool = False) -> list[Segment]:
    """Colorize a line with a one-off LineColorizer."""
    return LineColorizer(ruleset, strict_coverage=strict_coverage).colorize(line, is_stderr)
