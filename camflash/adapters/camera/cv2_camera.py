"""
OpenCV still-capture driver.
CAMERA_INDEX_BACK / CAMERA_INDEX_FRONT env vars (default 0 / 1) map facing to
a cv2 device index. OpenCV exposes no flash control, so flash is reported as
unsupported.
"""
from pathlib import Path

import cv2

from camflash.adapters.camera.base import CameraDriver
from camflash.orchestrator.contracts import CameraFacing
from camflash.orchestrator.errors import CaptureError, DeviceNotFoundError

JPEG_QUALITY = 95
WARMUP_FRAMES = 3  # first frames after open are often dark on webcams


class CV2Camera(CameraDriver):
    name = "cv2"

    def __init__(self, index_back: int = 0, index_front: int = 1):
        self._indexes = {CameraFacing.BACK: index_back, CameraFacing.FRONT: index_front}

    def open(self, facing: CameraFacing):
        index = self._indexes[facing]
        cap = cv2.VideoCapture(index)
        if not cap.isOpened():
            cap.release()
            raise DeviceNotFoundError(f"Unable to find {facing.value} camera (index {index})")
        return cap

    def capture_still(self, handle, width: int, height: int, path: Path) -> None:
        handle.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        handle.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        for _ in range(WARMUP_FRAMES):
            handle.grab()
        ret, frame = handle.read()
        if not ret or frame is None:
            raise CaptureError("frame capture failed")
        if not cv2.imwrite(str(path), frame, [cv2.IMWRITE_JPEG_QUALITY, JPEG_QUALITY]):
            raise CaptureError(f"could not write {path}")

    def close(self, handle) -> None:
        if handle is not None and handle.isOpened():
            handle.release()
