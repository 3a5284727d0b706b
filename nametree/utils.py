"""Utility helpers for nametree."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "nametree"


def get_logger() -> logging.Logger:
    """Return a module-level logger configured with rich if not already."""
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        handler = RichHandler(rich_tracebacks=True, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.setLevel(logging.INFO)
        logger.addHandler(handler)
    return logger


logger = get_logger()


def set_log_level(level: str) -> None:
    """Allow callers (e.g. CLI) to adjust logging verbosity at runtime."""

    level_value = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(level_value)


console = Console()


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value >= 0x80000000 else value


def family_hue(surname: str) -> int:
    """Hash a surname to a hue.

    The shift wraps to a signed 32-bit integer while the running sum does
    not, so long names can produce negative hues. The sign is kept.
    """

    hash_value = 0
    for char in surname:
        hash_value = ord(char) + (_to_int32(_to_int32(hash_value) << 5) - hash_value)
    remainder = abs(hash_value) % 360
    return -remainder if hash_value < 0 else remainder


def family_color(surname: str) -> str:
    """Pastel HSL color shared by every node and edge of one surname group."""

    return f"hsl({family_hue(surname)}, 55%, 65%)"


def merge_dicts(base: Dict[str, Any], override: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    result = base.copy()
    if override:
        result.update({k: v for k, v in override.items() if v is not None})
    return result
