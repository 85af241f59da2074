# starregistry/config.py
import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_DB_NAME = "star-registry.db"
DEFAULT_CHALLENGE_WINDOW = 300  # seconds
DEFAULT_DECODE_WORKERS = 4


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


@dataclass(frozen=True)
class RegistrySettings:
    """Runtime settings, resolved from STAR_REGISTRY_* environment variables."""
    db_path: Path
    challenge_window: int = DEFAULT_CHALLENGE_WINDOW
    decode_workers: int = DEFAULT_DECODE_WORKERS

    @classmethod
    def from_env(cls) -> "RegistrySettings":
        env_path = os.environ.get("STAR_REGISTRY_DB_PATH")
        db_path = Path(env_path) if env_path else Path.cwd() / DEFAULT_DB_NAME
        return cls(
            db_path=db_path,
            challenge_window=_int_env("STAR_REGISTRY_CHALLENGE_WINDOW", DEFAULT_CHALLENGE_WINDOW),
            decode_workers=_int_env("STAR_REGISTRY_DECODE_WORKERS", DEFAULT_DECODE_WORKERS),
        )
