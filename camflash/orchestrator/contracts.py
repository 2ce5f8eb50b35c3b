from dataclasses import dataclass
from enum import Enum
from typing import Optional


class FlashMode(str, Enum):
    AUTO = "AUTO"
    ON = "ON"
    OFF = "OFF"


class CameraFacing(str, Enum):
    BACK = "BACK"
    FRONT = "FRONT"


class CommandKind(str, Enum):
    TAKE_PHOTO = "TakePhoto"
    TAKE_PHOTO_NATIVE = "TakePhotoNative"
    FLASH_ON = "FlashOn"
    FLASH_OFF = "FlashOff"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class Command:
    kind: CommandKind
    raw_type: Optional[str] = None     # envelope "type" as received
    raw_command: Optional[str] = None  # envelope "command" as received


@dataclass
class OpResult:
    ok: bool
    error_code: Optional[str] = None
    error: Optional[str] = None


@dataclass
class CaptureResult(OpResult):
    file_path: str = ""
    image_data: bytes = b""

    @classmethod
    def success(cls, file_path: str, image_data: bytes) -> "CaptureResult":
        return cls(ok=True, file_path=file_path, image_data=image_data)

    @classmethod
    def failure(cls, error_code: str, error: str) -> "CaptureResult":
        return cls(ok=False, error_code=error_code, error=error)
