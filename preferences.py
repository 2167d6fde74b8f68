"""
Stored trace/pitch defaults.

The preferences file is a plain text file of ``Key = value`` lines, kept
in ~/.pcb/stipple_prefs. Values are in 1/100 mil, as typed by the user.
Failing to read or write the file is never fatal: problems are logged and
the defaults (or the values already in memory) are used instead.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from constants import (
    DEFAULT_ACTION,
    DEFAULT_COMPONENT_PITCH,
    DEFAULT_COMPONENT_TRACE,
    DEFAULT_SOLDER_PITCH,
    DEFAULT_SOLDER_TRACE,
    PREFERENCES_PATH,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

_LINE = re.compile(r'^\s*(\w+)\s*=\s*(.*?)\s*$')

# File key -> StipplePreferences attribute
_KEYS = {
    'ComponentTrace': 'component_trace',
    'ComponentPitch': 'component_pitch',
    'SolderTrace': 'solder_trace',
    'SolderPitch': 'solder_pitch',
}


@dataclass
class StipplePreferences:
    """Trace and pitch for both sides, in 1/100 mil."""
    component_trace: int = DEFAULT_COMPONENT_TRACE
    component_pitch: int = DEFAULT_COMPONENT_PITCH
    solder_trace: int = DEFAULT_SOLDER_TRACE
    solder_pitch: int = DEFAULT_SOLDER_PITCH


def default_path() -> Path:
    return Path.home() / PREFERENCES_PATH


def parse_preferences(text: str) -> StipplePreferences:
    """
    Parse preference file content.

    Unknown keys and unparseable values are logged and skipped, leaving
    the default for that field.
    """
    prefs = StipplePreferences()
    for number, line in enumerate(text.splitlines(), start=1):
        match = _LINE.match(line)
        if not match:
            continue

        key, value = match.groups()
        attribute = _KEYS.get(key)
        if attribute is None:
            continue

        try:
            setattr(prefs, attribute, int(value))
        except ValueError:
            logger.warning("Ignoring bad value for %s on line %d: %r", key, number, value)

    return prefs


def format_preferences(prefs: StipplePreferences) -> str:
    """Render preferences in the file format."""
    lines = [f"{key} = {getattr(prefs, attribute)}" for key, attribute in _KEYS.items()]
    lines.append(f"DefaultAction = {DEFAULT_ACTION}")
    return "\n".join(lines) + "\n"


def write_preferences(prefs: StipplePreferences, path: Optional[PathLike] = None) -> bool:
    """
    Store preferences, creating the parent directory if needed.

    Returns:
        True if the file was written
    """
    path = Path(path) if path is not None else default_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(format_preferences(prefs))
    except OSError as e:
        logger.warning("Could not write preferences to %s: %s", path, e)
        return False

    logger.debug("Wrote preferences to %s", path)
    return True


def read_preferences(path: Optional[PathLike] = None) -> StipplePreferences:
    """
    Load preferences; a missing file is created with the defaults.

    Args:
        path: Preference file, ~/.pcb/stipple_prefs by default

    Returns:
        Stored preferences, or defaults if the file cannot be read
    """
    path = Path(path) if path is not None else default_path()

    if not path.exists():
        logger.info("No preferences at %s, creating defaults", path)
        prefs = StipplePreferences()
        write_preferences(prefs, path)
        return prefs

    try:
        text = path.read_text()
    except OSError as e:
        logger.warning("Could not read preferences from %s: %s", path, e)
        return StipplePreferences()

    return parse_preferences(text)
