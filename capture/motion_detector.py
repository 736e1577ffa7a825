# ============================================================
# FILE: capture/motion_detector.py
# ============================================================

import threading
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

import cv2
import numpy as np

from alerts.dispatcher import CallbackDispatcher
from capture.background import BackgroundModel
from capture.camera import Camera
from capture.errors import (
    DetectorClosedError,
    DeviceClosedError,
    ResourceReleaseError,
    SnapshotUnavailableError,
)
from capture.policy import STATUS_COLORS, DetectionPolicy, DetectorStatus, Sensitivity
from capture.regions import Region, extract_regions, refine_mask
from ui.display import Display, annotate
from utils.resources import ResourceStack

logger = logging.getLogger(__name__)

class MotionDetector:
    """Reads frames from a capture device and reports motion against an adaptive background.

    start() runs the processing loop on the calling thread. status and
    snapshot_jpg() may be called from other threads while it runs. The
    detector owns the camera, the window, the background model and the
    callback worker; close() releases all of them.
    """

    def __init__(
        self,
        device_id: int = 0,
        window_title: str = "Motion Detector",
        on_detect: Optional[Callable[[], None]] = None,
        min_area: float = Sensitivity.NOT_SENSITIVE,
        queue_size: int = 64,
        background_options: Optional[Dict[str, Any]] = None,
        source_factory: Callable[[int], Any] = Camera,
        display_factory: Callable[[str], Any] = Display,
        background_factory: Callable[..., Any] = BackgroundModel,
    ):
        self.policy = DetectionPolicy(min_area)
        self.device_id = device_id
        self.window_title = window_title
        self.on_detect = on_detect

        self._status = DetectorStatus.READY
        self._status_lock = threading.Lock()
        self._frame_lock = threading.Lock()
        self._cycle_lock = threading.Lock()
        self.frame: Optional[np.ndarray] = None
        self.foreground_mask: Optional[np.ndarray] = None
        self.binary_mask: Optional[np.ndarray] = None

        self._resources = ResourceStack()
        try:
            self.camera = source_factory(device_id)
            self._resources.push("camera", self.camera.release)

            self.display = display_factory(window_title)
            self._resources.push("window", self.display.close)

            self._resources.push("frame buffers", self._release_buffers)

            self.background = background_factory(**(background_options or {}))
            self._resources.push("background model", self.background.release)

            self.dispatcher = None
            if on_detect is not None:
                self.dispatcher = CallbackDispatcher(on_detect, queue_size)
                self._resources.push("callback dispatcher", self.dispatcher.stop)
        except Exception:
            try:
                self._resources.release_all()
            except ResourceReleaseError as e:
                logger.error(f"Cleanup after failed initialization was incomplete: {e}")
            raise

        logger.info(f"Motion detector initialized on device {device_id} with min area {self.policy.min_area}")

    @property
    def min_area(self) -> float:
        return self.policy.min_area

    @property
    def status(self) -> str:
        with self._status_lock:
            return self._status.value

    def get_status(self) -> str:
        return self.status

    @property
    def status_color(self) -> Tuple[int, int, int]:
        with self._status_lock:
            return STATUS_COLORS[self._status]

    @property
    def closed(self) -> bool:
        with self._status_lock:
            return self._status is DetectorStatus.CLOSED

    def _set_status(self, status: DetectorStatus):
        with self._status_lock:
            if self._status is DetectorStatus.CLOSED:
                return
            self._status = status

    def _current_status(self) -> DetectorStatus:
        with self._status_lock:
            return self._status

    def _wait_for_next_frame(self) -> Optional[np.ndarray]:
        # empty frames are retried; None is returned only once closed
        while True:
            ok, frame = self.camera.read()
            if self.closed:
                return None
            if not ok:
                raise DeviceClosedError()
            if frame is None or frame.size == 0:
                continue

            with self._frame_lock:
                self.frame = frame
            self._set_status(DetectorStatus.READY)
            return frame

    def _prepare_current_frame(self, frame: np.ndarray) -> List[Region]:
        self.foreground_mask = self.background.apply(frame)
        self.binary_mask = refine_mask(self.foreground_mask)
        return extract_regions(self.binary_mask)

    def _detect(self, regions: List[Region]) -> List[Region]:
        qualifying = self.policy.evaluate(regions)
        # one callback per qualifying region, not per cycle
        for _ in qualifying:
            self._set_status(DetectorStatus.MOTION_DETECTED)
            if self.dispatcher is not None and not self.closed:
                self.dispatcher.submit()

        if qualifying:
            logger.debug(f"Motion detected: {len(qualifying)} region(s), largest area={max(r.area for r in qualifying)}")
        return qualifying

    def _display_result(self, frame: np.ndarray, regions: List[Region]) -> bool:
        with self._frame_lock:
            annotate(frame, regions, self._current_status())
        return self.display.present(frame)

    def _run_cycle(self) -> bool:
        """Process one frame; True when the loop should stop."""
        frame = self._wait_for_next_frame()
        if frame is None:
            logger.info("Detector closed, leaving detection loop")
            return True

        regions = self._prepare_current_frame(frame)
        qualifying = self._detect(regions)
        if self._display_result(frame, qualifying):
            logger.info("Escape pressed, stopping motion detection")
            return True
        return False

    def start(self):
        """Run the detection loop until ESC is pressed or the detector is closed.

        Raises DeviceClosedError when the capture device goes away; the
        detector should then be closed rather than restarted.
        """
        if self.closed:
            raise DetectorClosedError()

        logger.info("Starting motion detection loop...")
        while True:
            with self._cycle_lock:
                if self.closed or self._run_cycle():
                    return

    def snapshot_jpg(self) -> bytes:
        """Return the latest frame encoded as JPEG."""
        with self._frame_lock:
            frame = None if self.frame is None else self.frame.copy()

        if frame is None:
            raise SnapshotUnavailableError("No frame has been captured yet")

        ok, buffer = cv2.imencode('.jpg', frame)
        if not ok:
            raise SnapshotUnavailableError("Failed to encode frame as JPEG")
        return buffer.tobytes()

    def _release_buffers(self):
        with self._frame_lock:
            self.frame = None
        self.foreground_mask = None
        self.binary_mask = None

    def close(self):
        """Release every owned resource in reverse acquisition order.

        All releases are attempted; failures are raised together as a
        ResourceReleaseError afterwards.
        """
        with self._status_lock:
            if self._status is DetectorStatus.CLOSED:
                logger.warning("Motion detector already closed")
                return
            self._status = DetectorStatus.CLOSED

        logger.info("Closing motion detector...")
        # a running cycle finishes before its resources go away
        with self._cycle_lock:
            self._resources.release_all()
        logger.info("Motion detector closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.close()
            return
        # keep the exception that ended the block
        try:
            self.close()
        except ResourceReleaseError as e:
            logger.error(f"Cleanup after {exc_type.__name__} was incomplete: {e}")
