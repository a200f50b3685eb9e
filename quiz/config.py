from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv

from quiz.services.response import DEFAULT_GRAPH_API_URL

DeliveryMode = Literal["sync", "async"]

DEFAULT_DATA_DIR = "./deploy/data"


class ConfigError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class Settings:
    port: int = 3021
    verify_token: str = "MY_TEST_TOKEN"
    data_dir: Path = Path(DEFAULT_DATA_DIR)
    # Unset => in-memory sessions and locks (single process only).
    redis_url: str | None = None
    delivery_mode: DeliveryMode = "async"
    graph_api_url: str = DEFAULT_GRAPH_API_URL
    log_level: str = "INFO"


def project_root() -> Path:
    # quiz/config.py -> quiz/ -> project root
    return Path(__file__).resolve().parents[1]


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Build settings from the environment.

    When reading the real environment, a project-root `.env` is loaded first;
    variables already set in the process win.
    """

    if env is None:
        env_path = project_root() / ".env"
        if env_path.exists():
            load_dotenv(dotenv_path=env_path, override=False)
        env = os.environ

    raw_port = env.get("PORT", "3021")
    try:
        port = int(raw_port)
    except ValueError as e:
        raise ConfigError(f"Invalid port: {raw_port!r}") from e

    mode = env.get("QUIZ_DELIVERY_MODE", "async").strip().lower()
    if mode not in ("sync", "async"):
        raise ConfigError(f"QUIZ_DELIVERY_MODE must be 'sync' or 'async', got {mode!r}")

    return Settings(
        port=port,
        verify_token=env.get("TOKEN", "MY_TEST_TOKEN"),
        data_dir=Path(env.get("DATA_DIR", DEFAULT_DATA_DIR)),
        redis_url=env.get("REDIS_URL") or None,
        delivery_mode=mode,  # type: ignore[arg-type]
        graph_api_url=env.get("QUIZ_GRAPH_API_URL", DEFAULT_GRAPH_API_URL),
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
    )
