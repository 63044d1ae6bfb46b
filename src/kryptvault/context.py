"""Small helper to build a KryptVault runtime context."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Optional

from .config import VaultConfig
from .logging_config import configure_logging


@dataclass
class VaultContext:
    """Container for the runtime objects the file wrappers need."""

    config: VaultConfig
    # Serializes use of the staging directory when a context is shared
    # between threads.
    temp_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def temp_dir(self):
        return self.config.temp_dir


def build_context(config: Optional[VaultConfig] = None) -> VaultContext:
    """
    Load configuration, configure logging and prepare the staging directory.

    When ``config`` is omitted it is read from the environment
    (see :meth:`VaultConfig.from_env`).
    """
    if config is None:
        config = VaultConfig.from_env()

    configure_logging(config.log_level)
    config.temp_dir.mkdir(parents=True, exist_ok=True)
    return VaultContext(config=config)
