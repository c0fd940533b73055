"""Configuration loading, rule parsing and schema definitions."""

from technicolor.config.loader import load_config, load_config_from_string
from technicolor.config.parser import RuleSetParser, parse_rules
from technicolor.config.schema import Config, Rule, RuleSet, Settings

__all__ = [
    "Config",
    "Rule",
    "RuleSet",
    "RuleSetParser",
    "Settings",
    "load_config",
    "load_config_from_string",
    "parse_rules",
]
