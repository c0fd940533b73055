"""Pytest configuration and fixtures."""

import os

import pytest

from technicolor.config.loader import load_config_from_string
from technicolor.config.schema import Config, RuleSet

SAMPLE_RULES = """
# sample rules
<stderr> = (fg:yellow)

(ERROR: )(.*) = ()(fg:red attr:bright)
ERROR: (.*) = (fg:magenta)
(WARN)(ING)?(.*) = (fg:yellow)(fg:yellow)()
"""


@pytest.fixture
def sample_config() -> Config:
    """Sample configuration for testing."""
    return load_config_from_string(SAMPLE_RULES)


@pytest.fixture
def sample_ruleset(sample_config) -> RuleSet:
    """Rules from the sample configuration."""
    return sample_config.ruleset


@pytest.fixture
def empty_ruleset() -> RuleSet:
    """RuleSet with built-in defaults and no rules."""
    return RuleSet()


@pytest.fixture
def pipe_with():
    """Factory for pipes pre-filled with data and closed for writing.

    Returns the read end; read ends are closed on teardown.
    """
    read_ends: list[int] = []

    def make(data: bytes) -> int:
        r, w = os.pipe()
        os.write(w, data)
        os.close(w)
        read_ends.append(r)
        return r

    yield make

    for fd in read_ends:
        os.close(fd)
