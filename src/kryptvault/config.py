"""Runtime configuration for KryptVault.

Values come from explicit arguments or from environment variables via
:meth:`VaultConfig.from_env`. Nothing here is process-global: callers build a
config (usually through :func:`kryptvault.context.build_context`) and pass it
to the file wrappers that need a staging directory.
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from .core.exceptions import InputValidationError
from .security.stream import DEFAULT_CHUNK_SIZE, MAX_CHUNK_SIZE

ENV_TEMP_DIR = "KRYPTVAULT_TEMP_DIR"
ENV_CHUNK_SIZE = "KRYPTVAULT_CHUNK_SIZE"
ENV_LOG_LEVEL = "KRYPTVAULT_LOG_LEVEL"


def _default_temp_dir() -> Path:
    return Path(tempfile.gettempdir()) / "krypt-vault"


@dataclass
class VaultConfig:
    """Settings shared by the file wrappers and the context builder."""

    temp_dir: Path = field(default_factory=_default_temp_dir)
    chunk_size: int = DEFAULT_CHUNK_SIZE
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        self.temp_dir = Path(self.temp_dir).expanduser()
        self.log_level = str(self.log_level).upper()
        self.validate()

    def validate(self) -> None:
        if not isinstance(self.chunk_size, int) or not 0 < self.chunk_size <= MAX_CHUNK_SIZE:
            raise InputValidationError(
                f"chunk_size must be between 1 and {MAX_CHUNK_SIZE} bytes"
            )
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise InputValidationError(f"Unknown log level: {self.log_level}")

    @classmethod
    def from_env(cls, environ=None) -> "VaultConfig":
        """Build a config from ``KRYPTVAULT_*`` environment variables."""
        env = os.environ if environ is None else environ
        kwargs = {}

        temp_dir = env.get(ENV_TEMP_DIR)
        if temp_dir:
            kwargs["temp_dir"] = Path(temp_dir)

        chunk_size = env.get(ENV_CHUNK_SIZE)
        if chunk_size:
            try:
                kwargs["chunk_size"] = int(chunk_size)
            except ValueError:
                raise InputValidationError(
                    f"{ENV_CHUNK_SIZE} must be an integer, got {chunk_size!r}"
                ) from None

        log_level = env.get(ENV_LOG_LEVEL)
        if log_level:
            kwargs["log_level"] = log_level

        return cls(**kwargs)
