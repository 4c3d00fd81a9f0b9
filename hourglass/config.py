from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional


ENV_PREFIX = "HOURGLASS_"


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the HTTP service.

    Attributes:
        log_level (str): Logging level name passed to ``logging.basicConfig``.
        max_search_depth (int): Deepest search the best-move endpoint accepts.
        max_perft_depth (int): Deepest perft the perft endpoint accepts.
    """

    log_level: str = "INFO"
    max_search_depth: int = 4
    max_perft_depth: int = 4

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``HOURGLASS_*`` environment variables.

        Raises:
            ValueError: If a variable holds an unusable value; the message
                names the variable.
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        level = env.get(ENV_PREFIX + "LOG_LEVEL", defaults.log_level).upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"{ENV_PREFIX}LOG_LEVEL: unknown logging level {level!r}")

        return cls(
            log_level=level,
            max_search_depth=_positive_int(env, "MAX_SEARCH_DEPTH", defaults.max_search_depth),
            max_perft_depth=_positive_int(env, "MAX_PERFT_DEPTH", defaults.max_perft_depth),
        )


def _positive_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(ENV_PREFIX + name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name}: expected an integer, got {raw!r}") from None
    if value < 1:
        raise ValueError(f"{ENV_PREFIX}{name}: must be >= 1, got {value}")
    return value
