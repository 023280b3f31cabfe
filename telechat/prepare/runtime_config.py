import logging
import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_SESSION = "telechat.session"
DEFAULT_CAPACITY = 100
DEFAULT_FPS = 60
DEFAULT_WINDOW = (960, 640)


@dataclass
class RuntimeConfig:
    session_path: str = DEFAULT_SESSION
    log_level: str = "INFO"
    api_id: Optional[int] = None
    api_hash: Optional[str] = None
    channel_capacity: int = DEFAULT_CAPACITY
    ui_fps: int = DEFAULT_FPS
    window_size: tuple = DEFAULT_WINDOW

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_id and self.api_hash)


def _env_int(name: str, default: Optional[int], *, minimum: int = 1) -> Optional[int]:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        val = int(raw.strip(), 10)
    except ValueError:
        logging.warning("%s inválido (%r). Uso %s.", name, raw, default)
        return default
    if val < minimum:
        logging.warning("%s fuera de rango (%d < %d). Uso %s.", name, val, minimum, default)
        return default
    return val


def get_session_path() -> str:
    return os.environ.get("TELECHAT_SESSION", "").strip() or DEFAULT_SESSION


def get_log_level() -> str:
    return os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"


def get_runtime_config() -> RuntimeConfig:
    api_hash = os.environ.get("TELEGRAM_API_HASH", "").strip() or None
    width, height = DEFAULT_WINDOW
    return RuntimeConfig(
        session_path=get_session_path(),
        log_level=get_log_level(),
        api_id=_env_int("TELEGRAM_API_ID", None),
        api_hash=api_hash,
        channel_capacity=_env_int("CHANNEL_CAPACITY", DEFAULT_CAPACITY),
        ui_fps=_env_int("UI_FPS", DEFAULT_FPS),
        window_size=(_env_int("WINDOW_WIDTH", width, minimum=320),
                     _env_int("WINDOW_HEIGHT", height, minimum=240)),
    )
