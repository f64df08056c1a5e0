"""
Nogres Configuration — environment-driven settings for the test double.

Reads from environment variables with sensible defaults. A `.env` file in
the working directory is honoured, so a test suite can pin settings
without touching CI configuration.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class LoggingConfig:
    """How `setup_logging()` wires the root logger."""

    level: str = "WARNING"
    format: str = "text"  # text | json
    color: str = "auto"  # auto | true | false

    @classmethod
    def from_env(cls) -> LoggingConfig:
        return cls(
            level=os.getenv("NOGRES_LOG_LEVEL", "WARNING").upper(),
            format=os.getenv("NOGRES_LOG_FORMAT", "text").lower(),
            color=os.getenv("NOGRES_LOG_COLOR", "auto").lower(),
        )


@dataclass(frozen=True)
class PoolConfig:
    """Pool behaviour.

    autoconnect: connect the underlying client before every pool-level
    query, the way a real pool checks out a live connection.
    """

    autoconnect: bool = True

    @classmethod
    def from_env(cls) -> PoolConfig:
        return cls(autoconnect=_env_flag("NOGRES_POOL_AUTOCONNECT", "true"))


@dataclass(frozen=True)
class NogresConfig:
    """Root configuration."""

    logging: LoggingConfig = field(default_factory=LoggingConfig)
    pool: PoolConfig = field(default_factory=PoolConfig)

    @classmethod
    def from_env(cls) -> NogresConfig:
        return cls(
            logging=LoggingConfig.from_env(),
            pool=PoolConfig.from_env(),
        )


# Singleton, read once at import
config = NogresConfig.from_env()
