"""Tests for the frame annotator and the Flask status endpoints."""

import numpy as np
import pytest

from capture.errors import SnapshotUnavailableError
from capture.policy import BOUNDING_RECT_COLOR, STATUS_COLORS, DetectorStatus
from capture.regions import extract_regions
from tests.conftest import decode_jpg
from ui import app as web
from ui.display import ESCAPE_KEY, HeadlessDisplay, annotate


class StubDetector:
    def __init__(self, snapshot=None, status="Ready"):
        self._snapshot = snapshot
        self.status = status
        self.min_area = 6000
        self.device_id = 0
        self.closed = False

    def snapshot_jpg(self):
        if self._snapshot is None:
            raise SnapshotUnavailableError("No frame has been captured yet")
        return self._snapshot


@pytest.fixture
def client():
    def make(detector):
        web.init_app(detector)
        web.app.config["TESTING"] = True
        return web.app.test_client()

    yield make
    web.init_app(None)


class TestAnnotate:
    def test_draws_status_text(self):
        frame = np.zeros((60, 200, 3), dtype=np.uint8)

        annotate(frame, [], DetectorStatus.READY)

        assert frame[5:25, 5:80].any()

    def test_draws_contour_and_bounding_box(self):
        mask = np.zeros((100, 100), dtype=np.uint8)
        mask[30:60, 40:80] = 255
        regions = extract_regions(mask)
        frame = np.full((100, 100, 3), 255, dtype=np.uint8)

        annotate(frame, regions, DetectorStatus.MOTION_DETECTED)

        # box drawn last, over the contour
        assert tuple(frame[30, 60]) == BOUNDING_RECT_COLOR
        assert STATUS_COLORS[DetectorStatus.MOTION_DETECTED] == (255, 0, 255)


def test_headless_display_never_requests_stop():
    display = HeadlessDisplay("test")

    assert display.wait_key(1) != ESCAPE_KEY
    assert display.present(np.zeros((10, 10, 3), dtype=np.uint8)) is False
    display.close()


class TestWebApp:
    def test_status(self, client):
        response = client(StubDetector(status="Motion Detected")).get("/api/status")

        assert response.status_code == 200
        assert response.get_json()["status"] == "Motion Detected"

    def test_status_without_detector(self, client):
        response = client(None).get("/api/status")

        assert response.status_code == 503

    def test_snapshot(self, client):
        import cv2

        ok, encoded = cv2.imencode(".jpg", np.zeros((20, 20, 3), dtype=np.uint8))
        response = client(StubDetector(snapshot=encoded.tobytes())).get("/api/snapshot")

        assert response.status_code == 200
        assert response.mimetype == "image/jpeg"
        assert decode_jpg(response.data) is not None

    def test_snapshot_unavailable(self, client):
        response = client(StubDetector()).get("/api/snapshot")

        assert response.status_code == 503
        assert "error" in response.get_json()

    def test_live_stream_serves_frames(self, client):
        import cv2

        ok, encoded = cv2.imencode(".jpg", np.zeros((20, 20, 3), dtype=np.uint8))
        detector = StubDetector(snapshot=encoded.tobytes())
        response = client(detector).get("/api/live-stream")

        chunk = next(response.response)
        detector.closed = True

        assert response.mimetype == "multipart/x-mixed-replace"
        assert chunk.startswith(b"--frame\r\nContent-Type: image/jpeg")
        response.close()
