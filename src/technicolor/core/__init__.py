"""Core functionality: color specs, line colorizer and drain loop."""

from technicolor.core.buffer import StreamBuffer
from technicolor.core.color import (
    Attribute,
    Color,
    ColorParser,
    ColorSpec,
    merge_colors,
    parse_color,
    resolve_color,
)
from technicolor.core.drain import DrainLoop, DrainStats
from technicolor.core.matcher import LineColorizer, Segment, colorize, match_covers_line
from technicolor.core.writer import SegmentWriter

__all__ = [
    "Attribute",
    "Color",
    "ColorSpec",
    "ColorParser",
    "parse_color",
    "merge_colors",
    "resolve_color",
    "LineColorizer",
    "Segment",
    "colorize",
    "match_covers_line",
    "StreamBuffer",
    "SegmentWriter",
    "DrainLoop",
    "DrainStats",
]
