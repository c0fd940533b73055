"""Default configuration values."""

from pathlib import Path

from technicolor.core.buffer import DEFAULT_ENCODING
from technicolor.core.color import Attribute, Color, ColorSpec
from technicolor.core.drain import CHUNK_SIZE, POLL_TIMEOUT, SLEEP_INTERVAL

DEFAULT_STDOUT = ColorSpec(attribute=Attribute.RESET, foreground=Color.WHITE, background=Color.BLACK)
DEFAULT_STDERR = ColorSpec(attribute=Attribute.RESET, foreground=Color.RED, background=Color.BLACK)

CONFIG_DIR_ENV = "TECHNICOLOR_CONFIG_DIR"
DEFAULT_CONFIG_DIR = Path.home() / ".config" / "technicolor"
DEFAULT_RULES_NAME = "default"
SETTINGS_NAME = "settings.yaml"
DROPIN_DIR_NAME = "conf.d"
DROPIN_SUFFIX = ".conf"

STDOUT_PATTERN = "<stdout>"
STDERR_PATTERN = "<stderr>"

EXAMPLE_RULES = """\
# technicolor rules: PATTERN = (SPEC)(SPEC)...
# one (SPEC) per capture group; keys are attr, fg and bg.
<stdout> = (fg:white)
<stderr> = (fg:red)
(ERROR|FATAL)(:.*) = (fg:red attr:bright)(fg:red)
(WARN(?:ING)?)(:.*) = (fg:yellow attr:bright)()
(DEBUG)(:.*) = (attr:dim)(attr:dim)
"""
