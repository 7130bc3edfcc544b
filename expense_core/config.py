"""Environment-driven settings shared by the CLI and the HTTP adapter."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional

__all__ = ["Settings"]


@dataclass(frozen=True)
class Settings:
    data_dir: Path = Path("data")
    log_level: str = "WARNING"
    env_name: str = "prod"
    allowed_origins: List[str] = field(default_factory=list)

    @property
    def is_dev(self) -> bool:
        return self.env_name in {"dev", "development"}

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        origins = env.get("EXPENSE_TRACKER_ALLOWED_ORIGINS", "")
        return cls(
            data_dir=Path(env.get("EXPENSE_TRACKER_DATA_DIR") or "data"),
            log_level=(env.get("EXPENSE_TRACKER_LOG_LEVEL") or "WARNING").upper(),
            env_name=(env.get("EXPENSE_TRACKER_ENV") or "prod").lower(),
            allowed_origins=[origin.strip() for origin in origins.split(",") if origin.strip()],
        )
