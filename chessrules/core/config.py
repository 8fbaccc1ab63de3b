"""
Runtime configuration.

Values are read from environment variables prefixed with `CHESSRULES_`, falling back to the defaults below.
"""

import logging
import os
from functools import lru_cache
from typing import Literal, Mapping, Optional, Self

from pydantic import BaseModel, Field

ENV_PREFIX = "CHESSRULES_"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseModel):
    """All knobs of the application in one place."""

    database_url: str = "sqlite:///chessrules.db"
    log_level: LogLevel = "WARNING"
    # counted in half-moves: 100 half-moves = 50 moves by each player
    fifty_move_limit: int = Field(default=100, gt=0)
    repetition_limit: int = Field(default=3, ge=2)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Self:
        """Collect every field that has a matching `CHESSRULES_<FIELD>` variable. Pydantic does the type conversion."""
        environ = os.environ if environ is None else environ
        values = {
            name: environ[f"{ENV_PREFIX}{name.upper()}"]
            for name in cls.model_fields
            if f"{ENV_PREFIX}{name.upper()}" in environ
        }
        if "log_level" in values:
            values["log_level"] = values["log_level"].upper()
        return cls.model_validate(values)


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()


def configure_logging(settings: Optional[Settings] = None) -> None:
    """For host applications: send the package's log records to stderr at the configured level."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("chessrules").setLevel(settings.log_level)
