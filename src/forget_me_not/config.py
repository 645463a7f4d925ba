# src/forget_me_not/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object shared by the daemon and the client.
- Nothing required at import time; every value has a default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ENV_PREFIX = "FMN"

DEFAULT_DAEMON_ADDR = "127.0.0.1:8082"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_optional(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return raw.strip()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def split_addr(addr: str) -> tuple[str, int]:
    """Split "host:port"; falls back to the default port when it is missing or bad."""
    host, _, port = addr.strip().rpartition(":")
    if not host:
        host, port = addr.strip(), ""
    try:
        return host or "127.0.0.1", int(port)
    except ValueError:
        return host or "127.0.0.1", int(DEFAULT_DAEMON_ADDR.rpartition(":")[2])


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Daemon / client ----
    daemon_host: str
    daemon_port: int
    connect_timeout: float

    # ---- Scheduler ----
    command_capacity: int

    # ---- Notifications ----
    image_path: Optional[str]
    sound_path: Optional[str]
    notify_timeout: int

    @property
    def daemon_addr(self) -> str:
        return f"{self.daemon_host}:{self.daemon_port}"

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "forget-me-not") or "forget-me-not"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/fmn"))

        daemon_host, daemon_port = split_addr(_env(_k("DAEMON_ADDR"), DEFAULT_DAEMON_ADDR))
        connect_timeout = max(0.1, _env_float(_k("CONNECT_TIMEOUT"), 5.0))

        # The mailbox must hold at least one command.
        command_capacity = max(1, _env_int(_k("COMMAND_CAPACITY"), 8))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            daemon_host=daemon_host,
            daemon_port=daemon_port,
            connect_timeout=connect_timeout,
            command_capacity=command_capacity,
            image_path=_env_optional(_k("IMAGE_PATH")),
            sound_path=_env_optional(_k("SOUND_PATH")),
            notify_timeout=max(1, _env_int(_k("NOTIFY_TIMEOUT"), 10)),
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
