# ============================================================
# FILE: capture/policy.py
# ============================================================

import math
from enum import Enum, IntEnum
from typing import Iterable, List, Union

from capture.regions import Region


class Sensitivity(IntEnum):
    """Minimum contour area presets; a smaller area is more sensitive."""

    NOT_SENSITIVE = 9000
    DEFAULT_SENSITIVE = 6000
    VERY_SENSITIVE = 3000

    @classmethod
    def parse(cls, value: Union[str, int, float]) -> int:
        """Accept a preset name, a preset value or a plain positive area."""
        if isinstance(value, bool):
            raise ValueError(f"Unknown sensitivity: {value!r}")
        if isinstance(value, str):
            key = value.strip().replace("-", "").replace("_", "").replace(" ", "").upper()
            for preset in cls:
                if preset.name.replace("_", "") == key:
                    return preset
            try:
                value = float(value)
            except ValueError:
                raise ValueError(f"Unknown sensitivity: {value!r}") from None
        if not math.isfinite(value) or value <= 0:
            raise ValueError(f"Sensitivity area must be positive and finite, got {value}")
        try:
            return cls(value)
        except ValueError:
            return value


class DetectorStatus(str, Enum):
    READY = "Ready"
    MOTION_DETECTED = "Motion Detected"
    CLOSED = "Closed"

    def __str__(self):
        return self.value


# BGR
STATUS_COLORS = {
    DetectorStatus.READY: (255, 255, 255),
    DetectorStatus.MOTION_DETECTED: (255, 0, 255),
    DetectorStatus.CLOSED: (128, 128, 128),
}
BOUNDING_RECT_COLOR = (0, 0, 0)


class DetectionPolicy:
    def __init__(self, min_area: Union[int, float] = Sensitivity.NOT_SENSITIVE):
        if isinstance(min_area, bool) or not math.isfinite(min_area) or min_area <= 0:
            raise ValueError(f"min_area must be positive and finite, got {min_area}")
        self.min_area = min_area
    
    def qualifies(self, region: Region) -> bool:
        return region.area >= self.min_area
    
    def evaluate(self, regions: Iterable[Region]) -> List[Region]:
        return [r for r in regions if self.qualifies(r)]
