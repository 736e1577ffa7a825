# ============================================================
# FILE: ui/display.py
# ============================================================

import cv2
import numpy as np
from typing import Iterable
import logging

from capture.policy import BOUNDING_RECT_COLOR, STATUS_COLORS, DetectorStatus
from capture.regions import Region

logger = logging.getLogger(__name__)

ESCAPE_KEY = 27

def annotate(frame: np.ndarray, regions: Iterable[Region], status: DetectorStatus) -> np.ndarray:
    """Draw region outlines, bounding boxes and the status text onto frame in place."""
    color = STATUS_COLORS[status]
    for region in regions:
        cv2.drawContours(frame, [region.contour], -1, color, 2)
        x, y, w, h = region.bounding_rect
        cv2.rectangle(frame, (x, y), (x + w, y + h), BOUNDING_RECT_COLOR, 2)
    
    cv2.putText(frame, status.value, (10, 20), cv2.FONT_HERSHEY_PLAIN, 1.2, color, 2)
    return frame


class Display:
    def __init__(self, title: str):
        self.title = title
        cv2.namedWindow(self.title, cv2.WINDOW_AUTOSIZE)
        logger.info(f"Window opened: {title}")
    
    def show(self, frame: np.ndarray):
        cv2.imshow(self.title, frame)
    
    def wait_key(self, delay_ms: int = 1) -> int:
        return cv2.waitKey(delay_ms) & 0xFF
    
    def present(self, frame: np.ndarray) -> bool:
        """Show the frame; True when the user pressed ESC."""
        self.show(frame)
        return self.wait_key(1) == ESCAPE_KEY
    
    def close(self):
        cv2.destroyWindow(self.title)
        logger.info(f"Window closed: {self.title}")


class HeadlessDisplay(Display):
    """Display for machines without a window system; never asks to stop."""

    def __init__(self, title: str = ""):
        self.title = title
        logger.info("Running headless, frames will not be displayed")
    
    def show(self, frame: np.ndarray):
        pass
    
    def wait_key(self, delay_ms: int = 1) -> int:
        return -1
    
    def close(self):
        pass
