ERR_DECODE = "DECODE_ERROR"
ERR_DEVICE_NOT_FOUND = "DEVICE_NOT_FOUND"
ERR_DRIVER = "DRIVER_ERROR"
ERR_CAPTURE_FAILED = "CAPTURE_FAILED"
ERR_LAUNCH_FAILED = "LAUNCH_FAILED"
ERR_TIMEOUT = "TIMEOUT"
ERR_READ_TIMEOUT = "READ_TIMEOUT"
ERR_IO = "IO_ERROR"
ERR_UNKNOWN = "UNKNOWN"


class CameraError(Exception):
    """Raised by camera drivers; `code` maps onto the ERR_* constants."""

    code = ERR_DRIVER


class DeviceNotFoundError(CameraError):
    code = ERR_DEVICE_NOT_FOUND


class CaptureError(CameraError):
    code = ERR_CAPTURE_FAILED
