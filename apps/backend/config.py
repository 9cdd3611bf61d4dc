"""Numeric environment settings. A malformed value falls back to the default with a warning."""

import logging
import os
from typing import Callable, TypeVar, Union

logger = logging.getLogger(__name__)

N = TypeVar("N", int, float)


def _env_number(name: str, default: N, parse: Callable[[str], N]) -> N:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return parse(raw.strip())
    except ValueError:
        logger.warning("Ignoring malformed setting", extra={"setting": name, "value": raw, "default": default})
        return default


def env_int(name: str, default: int) -> int:
    return _env_number(name, default, int)


def env_float(name: str, default: Union[int, float]) -> float:
    return _env_number(name, float(default), float)
