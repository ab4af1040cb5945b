"""Settings loaded from the environment (and a .env file, if present)."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from calcpad.history import DEFAULT_HISTORY_LIMIT
from calcpad.modes import Mode, parse_mode

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


class Settings(BaseModel):
    """Runtime configuration."""
    log_level: str = 'WARNING'
    history_limit: int = Field(DEFAULT_HISTORY_LIMIT, gt=0)
    default_mode: Mode = Mode.STANDARD
    prompt_history_file: str = Field(default_factory=lambda: os.path.expanduser("~/.calcpad_history"))

    @field_validator('log_level')
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in _LEVELS:
            raise ValueError(f"Unknown log level {v!r}; expected one of {', '.join(_LEVELS)}")
        return level

    @field_validator('default_mode', mode='before')
    @classmethod
    def parse_default_mode(cls, v):
        if isinstance(v, str):
            return parse_mode(v)
        return v

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> 'Settings':
        """Build settings from CALCPAD_* variables; unset ones keep defaults.

        Variables already set in the environment win over the .env file.
        """
        load_dotenv(env_file)
        values = {}
        env_map = {
            'log_level': 'CALCPAD_LOG_LEVEL',
            'history_limit': 'CALCPAD_HISTORY_LIMIT',
            'default_mode': 'CALCPAD_DEFAULT_MODE',
            'prompt_history_file': 'CALCPAD_PROMPT_HISTORY',
        }
        for field, var in env_map.items():
            raw = os.getenv(var)
            if raw:
                values[field] = raw
        if 'prompt_history_file' in values:
            values['prompt_history_file'] = os.path.expanduser(values['prompt_history_file'])
        return cls(**values)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging the way the entry points expect."""
    logging.basicConfig(
        level=getattr(logging, (level or get_settings().log_level).upper()),
        format=LOG_FORMAT,
    )
