"""Pydantic models for rules and settings."""

from __future__ import annotations

import codecs
import re
import string

from pydantic import BaseModel, ConfigDict, Field, field_validator

from technicolor.config.defaults import (
    CHUNK_SIZE,
    DEFAULT_ENCODING,
    DEFAULT_STDERR,
    DEFAULT_STDOUT,
    POLL_TIMEOUT,
    SLEEP_INTERVAL,
)
from technicolor.core.color import ColorSpec


class Rule(BaseModel):
    """A full-line pattern with one color spec per capture group."""

    model_config = ConfigDict(frozen=True)

    pattern: re.Pattern[str] = Field(description="Regular expression matched against whole lines")
    colors: tuple[ColorSpec, ...] = Field(min_length=1, description="Color spec per capture group")

    def __str__(self) -> str:
        return f"{self.pattern.pattern} = {''.join(str(c) for c in self.colors)}"


class RuleSet(BaseModel):
    """Ordered rules plus the per-stream default colors.

    Rules are tried in order and the first qualifying rule wins. Both defaults
    must be fully specified since they end the inheritance chain.
    """

    model_config = ConfigDict(frozen=True)

    stdout_default: ColorSpec = DEFAULT_STDOUT
    stderr_default: ColorSpec = DEFAULT_STDERR
    rules: tuple[Rule, ...] = ()

    @field_validator("stdout_default", "stderr_default")
    @classmethod
    def check_complete(cls, v: ColorSpec) -> ColorSpec:
        """Reject defaults with unset fields."""
        if not v.is_complete:
            raise ValueError(f"default color spec {v} must set attr, fg and bg")
        return v

    def default_for(self, is_stderr: bool) -> ColorSpec:
        """Get the default color for a stream."""
        return self.stderr_default if is_stderr else self.stdout_default


class Settings(BaseModel):
    """Options read from settings.yaml."""

    model_config = ConfigDict(extra="forbid")

    chunk_size: int = Field(default=CHUNK_SIZE, gt=0, description="Maximum bytes per read")
    poll_timeout: float = Field(default=POLL_TIMEOUT, ge=0, description="Readiness wait in seconds")
    sleep_interval: float = Field(default=SLEEP_INTERVAL, ge=0, description="Idle sleep in seconds")
    strict_coverage: bool = Field(
        default=False,
        description="Only accept a rule when its capture groups cover the whole line",
    )
    color: bool = Field(default=True, description="Enable/disable escape sequences")
    encoding: str = Field(default=DEFAULT_ENCODING, description="Encoding of child output")
    rules: list[str] = Field(
        default_factory=list,
        description="Extra rule lines, applied after rule files",
    )

    @field_validator("encoding")
    @classmethod
    def check_encoding(cls, v: str) -> str:
        """Make sure the codec exists and keeps ASCII, newline included, as is.

        Lines are split on the raw newline byte before decoding, so codecs
        like UTF-16 that encode it differently cannot be used.
        """
        try:
            codecs.lookup(v)
            encoded = string.printable.encode(v)
        except LookupError as e:
            raise ValueError(f"unknown encoding: {v}") from e
        except UnicodeError as e:
            raise ValueError(f"encoding {v} cannot encode ASCII text") from e
        if encoded != string.printable.encode("ascii"):
            raise ValueError(f"encoding {v} is not ASCII compatible")
        return v

    @field_validator("rules", mode="before")
    @classmethod
    def parse_rules(cls, v: list[str] | str | None) -> list[str]:
        """Accept a block string as well as a list of lines."""
        if v is None:
            return []
        if isinstance(v, str):
            return v.splitlines()
        return v


class Config(BaseModel):
    """Top-level configuration."""

    model_config = ConfigDict(frozen=True)

    settings: Settings = Field(default_factory=Settings)
    ruleset: RuleSet = Field(default_factory=RuleSet)
