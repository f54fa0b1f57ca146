"""
Configuration

Keep data location and batch defaults in env (prod) / .env (local).
Use a Settings object so every run logs the same config.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

ON_ERROR_POLICIES = ("raise", "skip")


@dataclass(frozen=True)
class Settings:
    """Configuration for evaluation runs"""
    data_dir: str = "data/tourism"
    max_workers: int = 1
    on_error: str = "raise"
    log_level: str = "INFO"

    def __post_init__(self):
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.on_error not in ON_ERROR_POLICIES:
            raise ValueError(f"on_error must be one of {ON_ERROR_POLICIES}, got {self.on_error!r}")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level!r}")


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def load_settings(
    data_dir: Optional[str] = None,
    max_workers: Optional[int] = None,
    on_error: Optional[str] = None,
    log_level: Optional[str] = None,
) -> Settings:
    """
    Load settings from environment.

    Reads TCOMP_DATA_DIR, TCOMP_MAX_WORKERS, TCOMP_ON_ERROR and TCOMP_LOG_LEVEL
    from .env file or environment variables. Explicit arguments win.
    """
    load_dotenv()

    defaults = Settings()
    return Settings(
        data_dir=data_dir or os.getenv("TCOMP_DATA_DIR", defaults.data_dir),
        max_workers=max_workers if max_workers is not None else _get_int(
            "TCOMP_MAX_WORKERS", defaults.max_workers
        ),
        on_error=(on_error or os.getenv("TCOMP_ON_ERROR", defaults.on_error)).strip().lower(),
        log_level=(log_level or os.getenv("TCOMP_LOG_LEVEL", defaults.log_level)).strip().upper(),
    )
