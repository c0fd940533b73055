"""Configuration loader with support for config and drop-in directories."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from technicolor.config.defaults import (
    CONFIG_DIR_ENV,
    DEFAULT_CONFIG_DIR,
    DEFAULT_RULES_NAME,
    DROPIN_DIR_NAME,
    DROPIN_SUFFIX,
    SETTINGS_NAME,
)
from technicolor.config.parser import RuleSetParser
from technicolor.config.schema import Config, Settings
from technicolor.errors import ConfigFileError

logger = logging.getLogger(__name__)


def resolve_config_dir(config_dir: Path | str | None = None) -> Path:
    """Pick the configuration directory.

    Precedence: explicit argument, then $TECHNICOLOR_CONFIG_DIR, then
    ~/.config/technicolor.
    """
    if config_dir is not None:
        return Path(config_dir)
    env_dir = os.environ.get(CONFIG_DIR_ENV)
    if env_dir:
        return Path(env_dir)
    return DEFAULT_CONFIG_DIR


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file, returning empty dict if not found."""
    if not path.exists():
        return {}
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigFileError(f"{path}: expected a mapping at top level", path=str(path))
    return data


def load_settings(path: Path) -> Settings:
    """Load settings.yaml, falling back to defaults when absent."""
    return Settings(**load_yaml_file(path))


def read_rule_file(path: Path) -> list[str]:
    """Read the lines of a rule file.

    Raises:
        ConfigFileError: If the file cannot be opened
    """
    try:
        with open(path, encoding="utf-8") as f:
            return f.read().splitlines()
    except OSError as e:
        raise ConfigFileError(f"Failed to open file {path}: {e.strerror or e}", path=str(path)) from e


def dropin_files(dropin_dir: Path) -> list[Path]:
    """List drop-in rule files in application order."""
    if not dropin_dir.is_dir():
        return []
    return sorted(p for p in dropin_dir.glob(f"*{DROPIN_SUFFIX}") if p.is_file())


def load_config(
    config_path: Path | str | None = None,
    config_dir: Path | str | None = None,
) -> Config:
    """Load settings and rules.

    Rules come from ``config_path`` if given, otherwise from ``default`` and
    ``conf.d/*.conf`` inside the config directory. Inline ``rules`` from
    settings.yaml are applied last.

    Args:
        config_path: Explicit rule file (must exist)
        config_dir: Config directory (default: $TECHNICOLOR_CONFIG_DIR or ~/.config/technicolor)

    Returns:
        Merged configuration object
    """
    directory = resolve_config_dir(config_dir)
    settings = load_settings(directory / SETTINGS_NAME)
    parser = RuleSetParser()

    if config_path is not None:
        path = Path(config_path)
        parser.feed(read_rule_file(path), source=str(path))
    else:
        rule_files = [directory / DEFAULT_RULES_NAME] + dropin_files(directory / DROPIN_DIR_NAME)
        for path in rule_files:
            if path.is_file():
                logger.debug("Reading rules from %s", path)
                parser.feed(read_rule_file(path), source=str(path))

    if settings.rules:
        parser.feed(settings.rules, source=str(directory / SETTINGS_NAME))

    if parser.errors:
        logger.debug("%d config error(s) skipped", len(parser.errors))

    return Config(settings=settings, ruleset=parser.build())


def load_config_from_string(rules: str, settings_yaml: str | None = None) -> Config:
    """Load configuration from strings (useful for testing)."""
    data = yaml.safe_load(settings_yaml) if settings_yaml else None
    settings = Settings(**(data if data else {}))
    parser = RuleSetParser().feed(rules.splitlines())
    if settings.rules:
        parser.feed(settings.rules, source="<settings>")
    return Config(settings=settings, ruleset=parser.build())
