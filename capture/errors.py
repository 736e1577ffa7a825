# ============================================================
# FILE: capture/errors.py
# ============================================================

from typing import List, Tuple


class MotionDetectorError(Exception):
    """Base class for errors raised by the motion detector."""


class SourceOpenError(MotionDetectorError):
    def __init__(self, device_id):
        self.device_id = device_id
        super().__init__(f"Failed to open video device {device_id}")


class DeviceClosedError(MotionDetectorError):
    def __init__(self, message: str = "Video device closed"):
        super().__init__(message)


class DetectorClosedError(MotionDetectorError):
    def __init__(self, message: str = "Detector is closed and cannot be restarted"):
        super().__init__(message)


class SnapshotUnavailableError(MotionDetectorError):
    pass


class ResourceReleaseError(MotionDetectorError):
    """Raised once every release has been attempted, listing the ones that failed."""

    def __init__(self, failures: List[Tuple[str, BaseException]]):
        self.failures = list(failures)
        names = ", ".join(f"{name} ({err})" for name, err in self.failures)
        super().__init__(f"Could not release {len(self.failures)} resource(s): {names}")
