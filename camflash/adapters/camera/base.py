from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from camflash.orchestrator.contracts import CameraFacing


class CameraDriver(ABC):
    """Low-level still-capture device. Handles are opaque to callers."""

    name = "base"

    @abstractmethod
    def open(self, facing: CameraFacing) -> Any:
        """Open the sensor for `facing`. Raises DeviceNotFoundError if absent."""
        ...

    def flash_supported(self, handle: Any) -> bool:
        return False

    def set_flash(self, handle: Any, enabled: bool, auto: bool) -> None:
        raise NotImplementedError

    @abstractmethod
    def capture_still(self, handle: Any, width: int, height: int, path: Path) -> None:
        """Write one JPEG still to `path`. Raises CaptureError on failure."""
        ...

    @abstractmethod
    def close(self, handle: Any) -> None:
        ...
