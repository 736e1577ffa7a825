# ============================================================
# FILE: capture/camera.py
# ============================================================

import cv2
import numpy as np
from typing import Optional, Tuple
import logging

from capture.errors import SourceOpenError

logger = logging.getLogger(__name__)

class Camera:
    def __init__(self, device_id: int = 0, resolution: Optional[Tuple[int, int]] = None):
        self.device_id = device_id
        self.resolution = resolution
        self.cap = None
        self._initialize()
    
    def _initialize(self):
        self.cap = cv2.VideoCapture(self.device_id)
        if not self.cap.isOpened():
            self.cap.release()
            self.cap = None
            raise SourceOpenError(self.device_id)
        
        if self.resolution:
            self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.resolution[0])
            self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.resolution[1])
            logger.info(f"Camera {self.device_id} initialized: {self.resolution[0]}x{self.resolution[1]}")
        else:
            logger.info(f"Camera {self.device_id} initialized")
    
    def read(self) -> Tuple[bool, Optional[np.ndarray]]:
        # ok=False means the device is gone; ok=True with an empty frame is transient
        if not self.cap or not self.cap.isOpened():
            return False, None
        
        return self.cap.read()
    
    def release(self):
        if self.cap:
            self.cap.release()
            self.cap = None
            logger.info(f"Camera {self.device_id} released")
