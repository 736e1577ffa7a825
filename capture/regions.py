# ============================================================
# FILE: capture/regions.py
# ============================================================

from dataclasses import dataclass
from typing import List, Tuple

import cv2
import numpy as np

# pixels at or above this magnitude count as foreground
MASK_THRESHOLD = 25
DILATE_KERNEL = cv2.getStructuringElement(cv2.MORPH_RECT, (3, 3))


@dataclass
class Region:
    contour: np.ndarray
    area: float
    bounding_rect: Tuple[int, int, int, int]


def refine_mask(mask: np.ndarray) -> np.ndarray:
    """Threshold a foreground mask to {0, 255} and dilate it with a 3x3 rectangle."""
    # THRESH_BINARY keeps values strictly greater than thresh
    _, binary = cv2.threshold(mask, MASK_THRESHOLD - 1, 255, cv2.THRESH_BINARY)
    return cv2.dilate(binary, DILATE_KERNEL)


def extract_regions(binary: np.ndarray) -> List[Region]:
    contours, _ = cv2.findContours(binary, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
    return [
        Region(contour=c, area=cv2.contourArea(c), bounding_rect=tuple(cv2.boundingRect(c)))
        for c in contours
    ]
