"""Unit tests for the capture device adapter."""

import threading

from camflash.adapters.camera.mock_camera import MockCamera
from camflash.orchestrator import errors
from camflash.orchestrator.contracts import CameraFacing, FlashMode
from camflash.orchestrator.device import CaptureDeviceAdapter, reserve_unique_file


class FlashQueryFails(MockCamera):
    def flash_supported(self, handle):
        raise RuntimeError("flash query failed")


class WritesNothing(MockCamera):
    def capture_still(self, handle, width, height, path):
        pass


class TestInitialize:
    def test_initialize_opens_once(self, device, driver):
        assert device.initialize(CameraFacing.BACK).ok
        assert device.initialize(CameraFacing.FRONT).ok
        assert driver.opened == 1
        # facing is not re-applied to an open handle
        assert driver.last_handle.facing is CameraFacing.BACK

    def test_initialize_after_cleanup_switches_facing(self, device, driver):
        device.initialize(CameraFacing.BACK)
        device.cleanup()
        device.initialize(CameraFacing.FRONT)
        assert driver.opened == 2
        assert driver.last_handle.facing is CameraFacing.FRONT

    def test_missing_camera(self, status, pictures_dir):
        device = CaptureDeviceAdapter(MockCamera(available=[CameraFacing.FRONT]), status, pictures_dir)
        result = device.initialize(CameraFacing.BACK)
        assert not result.ok
        assert result.error_code == errors.ERR_DEVICE_NOT_FOUND
        assert not device.is_open

    def test_unexpected_driver_error(self, status, pictures_dir):
        class Broken(MockCamera):
            def open(self, facing):
                raise RuntimeError("usb bus reset")

        result = CaptureDeviceAdapter(Broken(), status, pictures_dir).initialize(CameraFacing.BACK)
        assert result.error_code == errors.ERR_DRIVER
        assert "usb bus reset" in result.error


class TestConfigureFlash:
    def test_flash_modes(self, device, driver):
        device.initialize(CameraFacing.BACK)
        handle = driver.last_handle

        device.configure_flash(FlashMode.ON)
        assert (handle.flash_enabled, handle.flash_auto) == (True, False)
        device.configure_flash(FlashMode.AUTO)
        assert (handle.flash_enabled, handle.flash_auto) == (True, True)
        device.configure_flash(FlashMode.OFF)
        assert (handle.flash_enabled, handle.flash_auto) == (False, False)

    def test_unsupported_flash_is_not_an_error(self, status, pictures_dir):
        device = CaptureDeviceAdapter(MockCamera(flash=False), status, pictures_dir)
        device.initialize(CameraFacing.BACK)
        assert device.configure_flash(FlashMode.ON).ok
        assert any("flash is not supported" in line for line in status.logs)

    def test_flash_query_error_is_a_driver_error(self, status, pictures_dir):
        device = CaptureDeviceAdapter(FlashQueryFails(), status, pictures_dir)
        device.initialize(CameraFacing.BACK)
        result = device.configure_flash(FlashMode.ON)
        assert not result.ok
        assert result.error_code == errors.ERR_DRIVER
        assert "flash query failed" in result.error

    def test_requires_open_handle(self, device):
        result = device.configure_flash(FlashMode.ON)
        assert not result.ok
        assert result.error_code == errors.ERR_DRIVER


class TestTakePhoto:
    def test_success_writes_file_and_releases_device(self, device, driver, pictures_dir):
        result = device.take_photo(FlashMode.ON, CameraFacing.BACK, 1920, 1080)

        assert result.ok
        assert result.file_path == str(pictures_dir / "photo.jpg")
        assert (pictures_dir / "photo.jpg").read_bytes() == result.image_data
        assert b"1920x1080" in result.image_data
        assert b"flash=True" in result.image_data
        assert not device.is_open
        assert driver.open_now == 0

    def test_never_overwrites(self, device, pictures_dir):
        first = device.take_photo(FlashMode.OFF, CameraFacing.BACK, 640, 480)
        second = device.take_photo(FlashMode.OFF, CameraFacing.BACK, 640, 480)
        assert first.file_path.endswith("photo.jpg")
        assert second.file_path.endswith("photo (2).jpg")
        assert (pictures_dir / "photo.jpg").exists()

    def test_capture_failure_cleans_up(self, status, pictures_dir):
        driver = MockCamera(fail_capture=True)
        device = CaptureDeviceAdapter(driver, status, pictures_dir)

        result = device.take_photo(FlashMode.ON, CameraFacing.BACK, 1920, 1080)

        assert not result.ok
        assert result.error_code == errors.ERR_CAPTURE_FAILED
        assert result.error.startswith("Failed to take photo:")
        assert not device.is_open
        assert driver.open_now == 0
        assert list(pictures_dir.iterdir()) == []
        assert status.last_error is not None

    def test_flash_query_error_releases_device(self, status, pictures_dir):
        driver = FlashQueryFails()
        device = CaptureDeviceAdapter(driver, status, pictures_dir)

        result = device.take_photo(FlashMode.ON, CameraFacing.BACK, 1920, 1080)

        assert not result.ok
        assert result.error_code == errors.ERR_DRIVER
        assert not device.is_open
        assert driver.open_now == 0
        assert status.busy is False

    def test_empty_capture_removes_placeholder(self, status, pictures_dir):
        driver = WritesNothing()
        device = CaptureDeviceAdapter(driver, status, pictures_dir)

        result = device.take_photo(FlashMode.OFF, CameraFacing.BACK, 640, 480)

        assert not result.ok
        assert result.error_code == errors.ERR_CAPTURE_FAILED
        assert "captured file is empty" in result.error
        assert list(pictures_dir.iterdir()) == []
        assert driver.open_now == 0

    def test_missing_camera_reports_init_error(self, status, pictures_dir):
        device = CaptureDeviceAdapter(MockCamera(available=[]), status, pictures_dir)
        result = device.take_photo(FlashMode.ON, CameraFacing.BACK, 1920, 1080)
        assert result.error_code == errors.ERR_DEVICE_NOT_FOUND
        assert "Unable to find BACK camera" in result.error

    def test_creates_pictures_folder(self, status, tmp_path):
        target = tmp_path / "nested" / "Pictures"
        device = CaptureDeviceAdapter(MockCamera(), status, target)
        assert device.take_photo(FlashMode.ON, CameraFacing.BACK, 10, 10).ok
        assert target.is_dir()

    def test_busy_flag_cleared(self, device, status):
        device.take_photo(FlashMode.ON, CameraFacing.BACK, 10, 10)
        assert status.busy is False

    def test_concurrent_callers_are_serialized(self, status, pictures_dir):
        driver = MockCamera(capture_delay=0.02)
        device = CaptureDeviceAdapter(driver, status, pictures_dir)
        results = []

        def worker():
            results.append(device.take_photo(FlashMode.ON, CameraFacing.BACK, 10, 10))

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert all(r.ok for r in results)
        assert driver.max_open == 1
        assert len({r.file_path for r in results}) == 4


def test_cleanup_without_handle_is_safe(device):
    device.cleanup()
    device.cleanup()
    assert not device.is_open


def test_reserve_unique_file(tmp_path):
    names = [reserve_unique_file(tmp_path).name for _ in range(3)]
    assert names == ["photo.jpg", "photo (2).jpg", "photo (3).jpg"]
