"""
Runtime configuration.

Values come from the environment (a `.env` file is loaded by `main.py`
through python-dotenv before `Settings.from_env()` is called).
"""

import os
from dataclasses import dataclass


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    db_path: str = ":memory:"
    approval_threshold: int = 10
    default_user_id: str = "demo-user-id"
    creatures_per_type: int = 5
    seed_demo: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000
    llm_provider: str = "openai"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            db_path=os.environ.get("BITLINGS_DB_PATH", ":memory:"),
            approval_threshold=_env_int("BITLINGS_APPROVAL_THRESHOLD", 10, minimum=1),
            default_user_id=os.environ.get("BITLINGS_DEFAULT_USER_ID", "demo-user-id"),
            creatures_per_type=_env_int("BITLINGS_CREATURES_PER_TYPE", 5, minimum=1),
            seed_demo=_env_bool("BITLINGS_SEED_DEMO", False),
            log_level=os.environ.get("BITLINGS_LOG_LEVEL", "INFO").upper(),
            host=os.environ.get("BITLINGS_HOST", "0.0.0.0"),
            port=_env_int("PORT", 8000, minimum=1),
            llm_provider=os.environ.get("LLM_PROVIDER", "openai").strip().lower(),
        )
