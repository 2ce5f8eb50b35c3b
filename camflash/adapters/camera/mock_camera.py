"""Mock camera driver: writes a small placeholder JPEG, for running without hardware."""
import time
from pathlib import Path

from camflash.adapters.camera.base import CameraDriver
from camflash.orchestrator.contracts import CameraFacing
from camflash.orchestrator.errors import CaptureError, DeviceNotFoundError

_SOI = b"\xff\xd8\xff\xe0"
_EOI = b"\xff\xd9"


class MockHandle:
    def __init__(self, facing: CameraFacing):
        self.facing = facing
        self.flash_enabled = False
        self.flash_auto = False
        self.closed = False


class MockCamera(CameraDriver):
    name = "mock"

    def __init__(self, available=(CameraFacing.BACK, CameraFacing.FRONT),
                 flash: bool = True, fail_capture: bool = False, capture_delay: float = 0.0):
        self.available = set(available)
        self.flash = flash
        self.fail_capture = fail_capture
        self.capture_delay = capture_delay
        self.opened = 0
        self.open_now = 0
        self.max_open = 0
        self.last_handle: MockHandle | None = None

    def open(self, facing: CameraFacing) -> MockHandle:
        if facing not in self.available:
            raise DeviceNotFoundError(f"Unable to find {facing.value} camera")
        self.opened += 1
        self.open_now += 1
        self.max_open = max(self.max_open, self.open_now)
        self.last_handle = MockHandle(facing)
        return self.last_handle

    def flash_supported(self, handle: MockHandle) -> bool:
        return self.flash

    def set_flash(self, handle: MockHandle, enabled: bool, auto: bool) -> None:
        handle.flash_enabled = enabled
        handle.flash_auto = auto

    def capture_still(self, handle: MockHandle, width: int, height: int, path: Path) -> None:
        if self.capture_delay:
            time.sleep(self.capture_delay)
        if self.fail_capture:
            raise CaptureError("mock capture failure")
        body = f"mock {handle.facing.value} {width}x{height} flash={handle.flash_enabled}".encode()
        path.write_bytes(_SOI + body + _EOI)

    def close(self, handle: MockHandle) -> None:
        if not handle.closed:
            handle.closed = True
            self.open_now -= 1
