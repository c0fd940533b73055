"""ANSI color specs: parsing, merging and escape sequence rendering."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from technicolor.errors import ColorSpecError, UnresolvedColorError

ESC = "\033"
RESET_SEQUENCE = f"{ESC}[0m"


class Attribute(IntEnum):
    """Text attributes, valued by their SGR parameter."""

    RESET = 0
    BRIGHT = 1
    DIM = 2
    UNDERLINE = 4
    BLINK = 5
    REVERSE = 7
    HIDDEN = 8


class Color(IntEnum):
    """The eight base terminal colors."""

    BLACK = 0
    RED = 1
    GREEN = 2
    YELLOW = 3
    BLUE = 4
    MAGENTA = 5
    CYAN = 6
    WHITE = 7


# Attribute names accepted in config, including aliases
ATTRIBUTES = {attr.name.lower(): attr for attr in Attribute}
ATTRIBUTES["bold"] = Attribute.BRIGHT

COLORS = {color.name.lower(): color for color in Color}


@dataclass(frozen=True)
class ColorSpec:
    """Sparse color specification.

    Any field left as None is "unset" and inherits from whatever spec it is
    later merged onto or resolved against.

    Attributes:
        attribute: Text attribute (bright, underline, ...)
        foreground: Foreground color
        background: Background color
    """

    attribute: Attribute | None = None
    foreground: Color | None = None
    background: Color | None = None

    @property
    def is_complete(self) -> bool:
        """Check that every field is set."""
        return None not in (self.attribute, self.foreground, self.background)

    def merge(self, base: ColorSpec) -> ColorSpec:
        """Overlay this spec's set fields onto base."""
        return merge_colors(self, base)

    def resolve(self, default: ColorSpec) -> ColorSpec:
        """Fill unset fields from a fully concrete default."""
        return resolve_color(self, default)

    def to_ansi(self) -> str:
        """Convert to an ANSI escape sequence.

        The sequence always carries all three positional parameters:
        ``ESC[<attr>;<fg+30>;<bg+40>m``.
        """
        if not self.is_complete:
            raise UnresolvedColorError(f"Cannot render incomplete color spec {self}")
        return f"{ESC}[{int(self.attribute)};{int(self.foreground) + 30};{int(self.background) + 40}m"

    def __str__(self) -> str:
        parts = []
        if self.attribute is not None:
            parts.append(f"attr:{self.attribute.name.lower()}")
        if self.foreground is not None:
            parts.append(f"fg:{self.foreground.name.lower()}")
        if self.background is not None:
            parts.append(f"bg:{self.background.name.lower()}")
        return f"({' '.join(parts)})"


def merge_colors(overlay: ColorSpec, base: ColorSpec) -> ColorSpec:
    """Combine two specs, with overlay taking precedence for set fields.

    Args:
        overlay: Spec whose set fields win
        base: Spec supplying every field overlay leaves unset

    Returns:
        Merged spec
    """
    return ColorSpec(
        attribute=overlay.attribute if overlay.attribute is not None else base.attribute,
        foreground=overlay.foreground if overlay.foreground is not None else base.foreground,
        background=overlay.background if overlay.background is not None else base.background,
    )


def resolve_color(spec: ColorSpec, default: ColorSpec) -> ColorSpec:
    """Resolve a spec against a stream default for emission.

    Args:
        spec: Possibly partial spec
        default: Fully concrete default terminating the inheritance chain

    Returns:
        A spec with all three fields set

    Raises:
        UnresolvedColorError: If default has any unset field
    """
    if not default.is_complete:
        raise UnresolvedColorError(f"Default color spec {default} is not fully specified")
    return merge_colors(spec, default)


class ColorParser:
    """Parser for color spec strings like 'fg:white bg:black attr:bright'."""

    def parse(self, color_spec: str) -> ColorSpec:
        """Parse a color specification string.

        Tokens are applied left to right, so later tokens for the same key win.

        Args:
            color_spec: Whitespace separated ``key:value`` tokens

        Returns:
            ColorSpec with only the mentioned fields set

        Raises:
            ColorSpecError: On a malformed token, unknown key or unknown value

        Examples:
            >>> spec = ColorParser().parse("fg:red attr:bright")
            >>> spec.foreground
            <Color.RED: 1>
            >>> spec.background is None
            True
        """
        result = ColorSpec()
        for part in color_spec.split():
            result = merge_colors(self.parse_part(part), result)
        return result

    def parse_part(self, part: str) -> ColorSpec:
        """Parse a single ``key:value`` token into a one-field spec."""
        tokens = part.split(":")
        if len(tokens) != 2 or not tokens[0].strip() or not tokens[1].strip():
            raise ColorSpecError(f"Bad color spec part: [{part}]")

        key = tokens[0].strip().lower()
        value = tokens[1].strip().lower()

        match key:
            case "attr":
                if value not in ATTRIBUTES:
                    raise ColorSpecError(f"Unknown attribute [{value}]")
                return ColorSpec(attribute=ATTRIBUTES[value])
            case "fg":
                return ColorSpec(foreground=self._lookup_color(value))
            case "bg":
                return ColorSpec(background=self._lookup_color(value))
            case _:
                raise ColorSpecError(f"Unknown color part [{key}]")

    def _lookup_color(self, value: str) -> Color:
        if value not in COLORS:
            raise ColorSpecError(f"Unknown color [{value}]")
        return COLORS[value]


def parse_color(color_spec: str) -> ColorSpec:
    """Parse a color specification string.

    Args:
        color_spec: Color string like "fg:red attr:underline"

    Returns:
        ColorSpec object
    """
    return ColorParser().parse(color_spec)
