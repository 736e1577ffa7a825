# ============================================================
# FILE: capture/background.py
# ============================================================

import cv2
import numpy as np
import logging

logger = logging.getLogger(__name__)

class BackgroundModel:
    """Adaptive MOG2 model of the static scene.

    Every call to apply() feeds the frame into the model, so frames must be
    applied in capture order.
    """

    def __init__(self, history: int = 500, var_threshold: float = 16, detect_shadows: bool = True):
        self.history = history
        self.var_threshold = var_threshold
        self.detect_shadows = detect_shadows
        self.subtractor = cv2.createBackgroundSubtractorMOG2(
            history=history,
            varThreshold=var_threshold,
            detectShadows=detect_shadows
        )
        logger.info(f"Background model initialized: history={history}, varThreshold={var_threshold}")
    
    def apply(self, frame: np.ndarray) -> np.ndarray:
        if self.subtractor is None:
            raise RuntimeError("Background model has been released")
        return self.subtractor.apply(frame)
    
    def release(self):
        self.subtractor = None
