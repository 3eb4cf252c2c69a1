"""Score settings.

Loaded from environment variables (``ZOLD_`` prefix) and an optional
``.env`` file. Priority: CLI flags > environment > defaults.
"""

from __future__ import annotations

import functools
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from zold.score.models import BEST_BEFORE, DEFAULT_PORT, HOST_PATTERN, INVOICE_PATTERN, STRENGTH
from zold.score.suffix import FINDERS


class ScoreSettings(BaseSettings):
    """Defaults for building and mining scores on this node."""

    model_config = SettingsConfigDict(
        env_prefix="ZOLD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost", pattern=HOST_PATTERN)
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    invoice: str = Field(default="NOPREFIX@ffffffffffffffff", pattern=INVOICE_PATTERN)
    strength: int = Field(default=STRENGTH, gt=0)
    best_before: float = Field(default=BEST_BEFORE, gt=0, description="Hours a score stays fresh")
    max_value: Optional[int] = Field(default=None, ge=0)
    finder: str = Field(default="counter", description="Suffix search strategy")

    @field_validator("finder")
    @classmethod
    def _known_finder(cls, value: str) -> str:
        if value not in FINDERS:
            raise ValueError(f"finder must be one of {sorted(FINDERS)}, got {value!r}")
        return value


@functools.lru_cache(maxsize=1)
def load_settings() -> ScoreSettings:
    """Settings for this process, read once."""
    return ScoreSettings()


__all__ = ["ScoreSettings", "load_settings"]
