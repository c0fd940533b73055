"""Error types for technicolor."""

from __future__ import annotations

from dataclasses import dataclass


class TechnicolorError(Exception):
    """Base class for technicolor errors."""


class ColorSpecError(TechnicolorError, ValueError):
    """Raised when a color spec fragment like 'fg:red' cannot be parsed."""


class ConfigFileError(TechnicolorError):
    """Raised when an explicitly requested configuration file cannot be read."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        super().__init__(message)


class UnresolvedColorError(TechnicolorError):
    """Raised when a color spec reaches emission with unset fields."""


class CaptureCountError(TechnicolorError):
    """Raised when a matching rule has a different number of groups than colors."""

    def __init__(self, pattern: str, groups: int, colors: int) -> None:
        self.pattern = pattern
        self.groups = groups
        self.colors = colors
        super().__init__(
            f"Rule '{pattern}' matched with {groups} capture group(s) "
            f"but declares {colors} color spec(s)"
        )


@dataclass
class ConfigError:
    """A configuration problem that was reported and skipped.

    Attributes:
        message: Human readable description
        line: The offending config line (if any)
        line_number: 1-based line number in its source (if known)
        source: Name of the file or string the line came from
    """

    message: str
    line: str = ""
    line_number: int | None = None
    source: str = "<string>"

    def __str__(self) -> str:
        location = self.source
        if self.line_number is not None:
            location = f"{location}:{self.line_number}"
        if self.line:
            return f"{location}: {self.message}\n\t[{self.line}]"
        return f"{location}: {self.message}"
