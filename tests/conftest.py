"""Shared fixtures and fake collaborators for the motion detector tests."""

import threading

import cv2
import numpy as np
import pytest

from capture.motion_detector import MotionDetector
from capture.policy import Sensitivity
from ui.display import ESCAPE_KEY

FRAME_SHAPE = (240, 320, 3)


def blank_frame() -> np.ndarray:
    return np.zeros(FRAME_SHAPE, dtype=np.uint8)


def moving_frame(*rects) -> np.ndarray:
    """Frame with white (x, y, w, h) rectangles on black.

    After the 3x3 dilation a w x h block becomes a contour of area
    (w + 1) * (h + 1), so 99x69 gives 7000 and 99x59 gives 6000.
    """
    frame = blank_frame()
    for x, y, w, h in rects:
        frame[y:y + h, x:x + w] = 255
    return frame


class FakeCamera:
    def __init__(self, frames, log=None):
        self.frames = list(frames)
        self.log = log
        self.reads = 0
        self.released = False
        self.fail_release = False

    def read(self):
        self.reads += 1
        if self.released or not self.frames:
            return False, None
        return True, self.frames.pop(0)

    def release(self):
        if self.log is not None:
            self.log.append("camera")
        self.released = True
        if self.fail_release:
            raise RuntimeError("camera busy")


class FakeDisplay:
    """Records the detector status for every presented frame.

    Returns ESC once stop_after frames have been shown.
    """

    def __init__(self, stop_after=None, log=None):
        self.stop_after = stop_after
        self.log = log
        self.detector = None
        self.statuses = []
        self.frames = []
        self.closed = False
        self.fail_close = False

    def show(self, frame):
        self.frames.append(frame)
        if self.detector is not None:
            self.statuses.append(self.detector.status)

    def wait_key(self, delay_ms=1):
        if self.stop_after is not None and len(self.frames) >= self.stop_after:
            return ESCAPE_KEY
        return -1

    def present(self, frame):
        self.show(frame)
        return self.wait_key(1) == ESCAPE_KEY

    def close(self):
        if self.log is not None:
            self.log.append("window")
        self.closed = True
        if self.fail_close:
            raise RuntimeError("window already destroyed")


class PassthroughBackground:
    """Foreground mask is the frame's first channel, so the moving region is whatever is painted."""

    def __init__(self, log=None, **options):
        self.options = options
        self.log = log
        self.applied = 0
        self.released = False

    def apply(self, frame):
        self.applied += 1
        return np.ascontiguousarray(frame[:, :, 0])

    def release(self):
        if self.log is not None:
            self.log.append("background model")
        self.released = True


class CountingCallback:
    def __init__(self):
        self.count = 0
        self._lock = threading.Lock()

    def __call__(self):
        with self._lock:
            self.count += 1


@pytest.fixture
def make_detector():
    created = []

    def factory(frames, on_detect=None, min_area=Sensitivity.DEFAULT_SENSITIVE, stop_after=None, log=None):
        camera = FakeCamera(frames, log=log)
        display = FakeDisplay(stop_after=stop_after, log=log)
        background = PassthroughBackground(log=log)
        detector = MotionDetector(
            device_id=0,
            window_title="test",
            on_detect=on_detect,
            min_area=min_area,
            source_factory=lambda device_id: camera,
            display_factory=lambda title: display,
            background_factory=lambda **options: background,
        )
        display.detector = detector
        created.append(detector)
        return detector, camera, display, background

    yield factory

    for detector in created:
        if not detector.closed:
            try:
                detector.close()
            except Exception:
                pass


def decode_jpg(data: bytes):
    return cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)
