"""Runtime configuration loaded from the environment (and an optional .env file)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from .errors import ConfigurationError

SECRET_ENV_NAMES = ("TURNSYNC_SECRET", "CORRESPONDENCE_GAMES_SECRET")
DEFAULT_STATE_MAX_AGE_DAYS = 30
DEFAULT_LOG_LEVEL = "INFO"


def read_dotenv(path: str | Path = ".env") -> dict[str, str]:
    """Return the KEY=VALUE pairs of a .env file; a missing file yields nothing."""
    dotenv_path = Path(path)
    if not dotenv_path.is_file():
        return {}

    values: dict[str, str] = {}
    for raw_line in dotenv_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip().removeprefix("export ").strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = (part.strip() for part in line.split("=", 1))
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
            value = value[1:-1]
        values[key] = value
    return values


@dataclass(frozen=True)
class ProtocolSettings:
    secret: str
    store_dir: Path | None
    state_max_age_days: int
    log_level: str

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> ProtocolSettings:
        """Build settings from environment-style names; the shared secret is mandatory."""
        secret = next((values[name] for name in SECRET_ENV_NAMES if values.get(name)), None)
        if secret is None:
            raise ConfigurationError(f"Missing integrity secret. Set one of: {', '.join(SECRET_ENV_NAMES)}")

        max_age_raw = values.get("TURNSYNC_STATE_MAX_AGE_DAYS") or str(DEFAULT_STATE_MAX_AGE_DAYS)
        try:
            max_age_days = int(max_age_raw)
        except ValueError as exc:
            raise ConfigurationError(f"TURNSYNC_STATE_MAX_AGE_DAYS must be an integer, got {max_age_raw!r}") from exc

        store_dir = values.get("TURNSYNC_STORE_DIR")
        return cls(
            secret=secret,
            store_dir=Path(store_dir) if store_dir else None,
            state_max_age_days=max_age_days,
            log_level=(values.get("TURNSYNC_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
        )


def load_settings(dotenv_path: str | Path = ".env") -> ProtocolSettings:
    """Read settings from a .env file overlaid by the process environment."""
    values = read_dotenv(dotenv_path)
    values.update({name: value for name, value in os.environ.items() if value})
    return ProtocolSettings.from_mapping(values)
