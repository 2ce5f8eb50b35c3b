import asyncio
from pathlib import Path
from typing import Optional

from starlette.concurrency import run_in_threadpool

from camflash.orchestrator.contracts import CaptureResult
from camflash.orchestrator import errors

DETECT_TIMEOUT_S = 60.0
STABLE_ATTEMPTS = 20
STABLE_DELAY_S = 0.5


class NativeCaptureWatcher:
    """
    Takes a photo through the OS camera application and recovers the file.

    The app is not under our control, so completion is inferred: wait for a
    new file in the camera folder, then poll its size until two consecutive
    samples agree before reading it.
    """

    def __init__(self, launcher, observer, status_store, pictures_dir: Path,
                 subdir: str = "Camera Roll", pattern: str = "*.jpg",
                 detect_timeout: float = DETECT_TIMEOUT_S,
                 stable_attempts: int = STABLE_ATTEMPTS,
                 stable_delay: float = STABLE_DELAY_S):
        self.launcher = launcher
        self.observer = observer
        self.status = status_store
        self.pictures_dir = Path(pictures_dir)
        self.subdir = subdir
        self.pattern = pattern
        self.detect_timeout = detect_timeout
        self.stable_attempts = stable_attempts
        self.stable_delay = stable_delay

    def camera_folder(self) -> Path:
        folder = self.pictures_dir / self.subdir
        folder.mkdir(parents=True, exist_ok=True)
        return folder

    async def capture(self) -> CaptureResult:
        try:
            if not await run_in_threadpool(self.launcher.launch):
                self.status.error("native: failed to launch the camera app")
                return CaptureResult.failure(errors.ERR_LAUNCH_FAILED, "Failed to launch the camera app.")

            try:
                if not await run_in_threadpool(self.launcher.focus):
                    self.status.warning("native: could not bring the camera app to the front")
            except Exception as e:
                self.status.warning(f"native: focus step failed: {e}")

            folder = self.camera_folder()
            self.status.log(f"native: photos will be saved to {folder}")

            new_file = await self.wait_for_new_file(folder)
            if new_file is None:
                msg = f"No new photo detected in the {self.subdir} folder."
                self.status.warning(f"native: {msg}")
                return CaptureResult.failure(errors.ERR_TIMEOUT, msg)

            self.status.log(f"native: new photo detected: {new_file}")
            return await self.read_when_stable(new_file)
        except Exception as e:
            self.status.error(f"native: error while capturing the photo: {e}")
            return CaptureResult.failure(errors.ERR_UNKNOWN, f"An error occurred while capturing the photo: {e}")

    async def wait_for_new_file(self, folder: Path) -> Optional[Path]:
        async with self.observer.watch(folder, self.pattern) as session:
            return await session.wait(self.detect_timeout)

    def file_size(self, path: Path) -> int:
        return path.stat().st_size

    async def read_when_stable(self, path: Path) -> CaptureResult:
        last_size = None
        for attempt in range(1, self.stable_attempts + 1):
            try:
                size = self.file_size(path)
                if last_size is not None and size == last_size:
                    image_data = await run_in_threadpool(path.read_bytes)
                    self.status.log(f"native: read {len(image_data)} bytes from {path}")
                    return CaptureResult.success(str(path), image_data)
                last_size = size
                self.status.log(f"native: attempt {attempt}: file size is {size} bytes, waiting for it to settle")
            except OSError as e:
                if attempt == self.stable_attempts:
                    self.status.error(f"native: giving up on {path}: {e}")
                    return CaptureResult.failure(errors.ERR_IO, f"Failed to read the image file: {e}")
                self.status.warning(f"native: attempt {attempt} to access file failed: {e}")
            await asyncio.sleep(self.stable_delay)

        self.status.error(f"native: {path} did not settle after {self.stable_attempts} attempts")
        return CaptureResult.failure(errors.ERR_READ_TIMEOUT,
                                     "Failed to read the image file after multiple attempts.")
