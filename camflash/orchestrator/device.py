import threading
from pathlib import Path

from camflash.orchestrator.contracts import CameraFacing, CaptureResult, FlashMode, OpResult
from camflash.orchestrator import errors
from camflash.orchestrator.errors import CameraError

PHOTO_STEM = "photo"
PHOTO_SUFFIX = ".jpg"


def reserve_unique_file(folder: Path, stem: str = PHOTO_STEM, suffix: str = PHOTO_SUFFIX) -> Path:
    """Create an empty, uniquely named file: photo.jpg, photo (2).jpg, ..."""
    n = 1
    while True:
        name = f"{stem}{suffix}" if n == 1 else f"{stem} ({n}){suffix}"
        path = folder / name
        try:
            with open(path, "xb"):
                return path
        except FileExistsError:
            n += 1


class CaptureDeviceAdapter:
    """
    Owns the single device handle of the process.

    Every public method takes the device lock; take_photo() holds it across the
    whole initialize -> configure -> capture -> cleanup cycle so concurrent
    sessions queue instead of sharing the handle.
    """

    def __init__(self, driver, status_store, pictures_dir: Path):
        self.driver = driver
        self.status = status_store
        self.pictures_dir = Path(pictures_dir)
        self._handle = None
        self._lock = threading.RLock()

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    def initialize(self, facing: CameraFacing) -> OpResult:
        with self._lock:
            if self._handle is not None:
                return OpResult(ok=True)
            self.status.log(f"device: opening {facing.value} camera via {self.driver.name}")
            try:
                self._handle = self.driver.open(facing)
            except CameraError as e:
                self.status.error(f"device: {e}")
                return OpResult(ok=False, error_code=e.code, error=str(e))
            except Exception as e:
                self.status.error(f"device: driver error {type(e).__name__}: {e}")
                return OpResult(ok=False, error_code=errors.ERR_DRIVER, error=str(e))
            self.status.log("device: initialized")
            return OpResult(ok=True)

    def configure_flash(self, mode: FlashMode) -> OpResult:
        with self._lock:
            if self._handle is None:
                return OpResult(ok=False, error_code=errors.ERR_DRIVER, error="camera is not initialized")
            enabled = mode != FlashMode.OFF
            auto = mode == FlashMode.AUTO
            try:
                if not self.driver.flash_supported(self._handle):
                    self.status.warning("device: flash is not supported on this device")
                    return OpResult(ok=True)
                self.driver.set_flash(self._handle, enabled=enabled, auto=auto)
            except Exception as e:
                self.status.error(f"device: setting flash failed: {e}")
                return OpResult(ok=False, error_code=errors.ERR_DRIVER, error=str(e))
            self.status.log(f"device: flash enabled={enabled} auto={auto}")
            return OpResult(ok=True)

    def capture_still_image(self, width: int, height: int) -> CaptureResult:
        with self._lock:
            try:
                if self._handle is None:
                    return CaptureResult.failure(errors.ERR_CAPTURE_FAILED,
                                                 "Failed to take photo: camera is not initialized")
                self.pictures_dir.mkdir(parents=True, exist_ok=True)
                path = reserve_unique_file(self.pictures_dir)
                self.status.log(f"device: capturing {width}x{height} to {path}")
                try:
                    self.driver.capture_still(self._handle, width, height, path)
                    image_data = path.read_bytes()
                    if not image_data:
                        raise CameraError("captured file is empty")
                except Exception:
                    self._discard_if_empty(path)
                    raise
                self.status.log(f"device: photo saved to {path} ({len(image_data)} bytes)")
                return CaptureResult.success(str(path), image_data)
            except Exception as e:
                self.status.error(f"device: failed to take photo: {e}")
                return CaptureResult.failure(errors.ERR_CAPTURE_FAILED, f"Failed to take photo: {e}")
            finally:
                self.cleanup()

    def _discard_if_empty(self, path: Path) -> None:
        try:
            if path.stat().st_size == 0:
                path.unlink()
        except OSError as e:
            self.status.warning(f"device: could not remove placeholder {path}: {e}")

    def cleanup(self) -> None:
        with self._lock:
            if self._handle is None:
                return
            self.status.log("device: cleaning up")
            handle, self._handle = self._handle, None
            try:
                self.driver.close(handle)
            except Exception as e:
                self.status.warning(f"device: error while releasing camera: {e}")

    def take_photo(self, flash_mode: FlashMode, facing: CameraFacing, width: int, height: int) -> CaptureResult:
        with self._lock:
            self.status.set_busy(True)
            try:
                self.status.log(f"device: take_photo flash={flash_mode.value} facing={facing.value} size={width}x{height}")
                init = self.initialize(facing)
                if not init.ok:
                    return CaptureResult.failure(init.error_code, f"Failed to take photo: {init.error}")
                flash = self.configure_flash(flash_mode)
                if not flash.ok:
                    return CaptureResult.failure(flash.error_code, f"Failed to take photo: {flash.error}")
                return self.capture_still_image(width, height)
            finally:
                self.cleanup()
                self.status.set_busy(False)
