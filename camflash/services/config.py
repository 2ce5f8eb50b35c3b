"""
Runtime settings.

Values come from the process environment, optionally seeded from
camflash/.env (never overriding variables that are already set).
"""
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ENV_FILE = Path(__file__).resolve().parent.parent / ".env"


def _default_native_target() -> str:
    if sys.platform == "win32":
        return "microsoft.windows.camera:"
    if sys.platform == "darwin":
        return "Photo Booth"
    return "cheese"


def _default_focus_target() -> Optional[str]:
    # Windows re-activates the shell so the camera app ends up in front
    return "shell:" if sys.platform == "win32" else None


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


@dataclass
class Settings:
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    camera_driver: str = "cv2"
    camera_index_back: int = 0
    camera_index_front: int = 1
    pictures_dir: Path = field(default_factory=lambda: Path.home() / "Pictures")
    photo_width: int = 1920
    photo_height: int = 1080

    native_target: str = field(default_factory=_default_native_target)
    native_focus_target: Optional[str] = field(default_factory=_default_focus_target)
    native_subdir: str = "Camera Roll"
    native_pattern: str = "*.jpg"
    native_detect_timeout_s: float = 60.0
    native_stable_attempts: int = 20
    native_stable_delay_s: float = 0.5
    native_poll_interval_s: float = 0.25

    ws_ping_interval_s: float = 120.0

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "Settings":
        if load_env_file:
            load_dotenv(dotenv_path=ENV_FILE, override=False)
        defaults = cls()
        pictures = os.getenv("PICTURES_DIR")
        return cls(
            host=os.getenv("HOST", defaults.host),
            port=_env_int("PORT", defaults.port),
            log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
            camera_driver=os.getenv("CAMERA_DRIVER", defaults.camera_driver).lower(),
            camera_index_back=_env_int("CAMERA_INDEX_BACK", defaults.camera_index_back),
            camera_index_front=_env_int("CAMERA_INDEX_FRONT", defaults.camera_index_front),
            pictures_dir=Path(pictures).expanduser() if pictures else defaults.pictures_dir,
            photo_width=_env_int("PHOTO_WIDTH", defaults.photo_width),
            photo_height=_env_int("PHOTO_HEIGHT", defaults.photo_height),
            native_target=os.getenv("NATIVE_CAMERA_TARGET", defaults.native_target),
            native_focus_target=os.getenv("NATIVE_FOCUS_TARGET", defaults.native_focus_target),
            native_subdir=os.getenv("NATIVE_CAMERA_SUBDIR", defaults.native_subdir),
            native_pattern=os.getenv("NATIVE_PHOTO_PATTERN", defaults.native_pattern),
            native_detect_timeout_s=_env_float("NATIVE_DETECT_TIMEOUT_S", defaults.native_detect_timeout_s),
            native_stable_attempts=_env_int("NATIVE_STABLE_ATTEMPTS", defaults.native_stable_attempts),
            native_stable_delay_s=_env_float("NATIVE_STABLE_DELAY_S", defaults.native_stable_delay_s),
            native_poll_interval_s=_env_float("NATIVE_POLL_INTERVAL_S", defaults.native_poll_interval_s),
            ws_ping_interval_s=_env_float("WS_PING_INTERVAL_S", defaults.ws_ping_interval_s),
        )
