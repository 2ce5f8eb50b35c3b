import json
import threading
from pathlib import Path

import pytest

from camflash.adapters.camera.mock_camera import MockCamera
from camflash.adapters.watch.dir_observer import PollingDirectoryObserver
from camflash.orchestrator.device import CaptureDeviceAdapter
from camflash.orchestrator.native_capture import NativeCaptureWatcher
from camflash.services.config import Settings
from camflash.services.status_store import StatusStore

JPEG = b"\xff\xd8\xff\xe0" + b"\x00" * 64 + b"\xff\xd9"


class FakeLauncher:
    """Stands in for the OS camera app; optionally drops a photo after launch."""

    def __init__(self, ok=True, focus_ok=True, on_launch=None):
        self.ok = ok
        self.focus_ok = focus_ok
        self.on_launch = on_launch
        self.launched = 0
        self.timers = []

    def launch(self) -> bool:
        self.launched += 1
        if self.ok and self.on_launch:
            self.on_launch(self)
        return self.ok

    def focus(self) -> bool:
        return self.focus_ok

    def write_later(self, path: Path, data: bytes = JPEG, delay: float = 0.1):
        def write():
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

        t = threading.Timer(delay, write)
        self.timers.append(t)
        t.start()

    def join(self):
        for t in self.timers:
            t.join()


class FakeWebSocket:
    """Minimal ASGI-style websocket: scripted inbound frames, recorded outbound ones."""

    def __init__(self, frames, fail_send=False):
        self.incoming = []
        for f in frames:
            key = "text" if isinstance(f, str) else "bytes"
            self.incoming.append({"type": "websocket.receive", key: f})
        self.incoming.append({"type": "websocket.disconnect", "code": 1000})
        self.fail_send = fail_send
        self.accepted = False
        self.sent = []

    async def accept(self):
        self.accepted = True

    async def receive(self):
        return self.incoming.pop(0)

    async def send_text(self, text: str):
        if self.fail_send:
            raise ConnectionResetError("peer went away")
        self.sent.append(json.loads(text))


@pytest.fixture
def status():
    return StatusStore()


@pytest.fixture
def pictures_dir(tmp_path):
    d = tmp_path / "Pictures"
    d.mkdir()
    return d


@pytest.fixture
def driver():
    return MockCamera()


@pytest.fixture
def device(driver, status, pictures_dir):
    return CaptureDeviceAdapter(driver, status, pictures_dir)


@pytest.fixture
def camera_roll(pictures_dir):
    return pictures_dir / "Camera Roll"


@pytest.fixture
def make_watcher(status, pictures_dir):
    def _make(launcher, **kw):
        kw.setdefault("detect_timeout", 0.5)
        kw.setdefault("stable_attempts", 20)
        kw.setdefault("stable_delay", 0.01)
        observer = PollingDirectoryObserver(status, poll_interval=0.01)
        return NativeCaptureWatcher(launcher, observer, status, pictures_dir, **kw)
    return _make


@pytest.fixture
def settings(pictures_dir):
    return Settings(
        camera_driver="mock",
        pictures_dir=pictures_dir,
        native_detect_timeout_s=0.5,
        native_stable_delay_s=0.01,
        native_poll_interval_s=0.01,
    )
