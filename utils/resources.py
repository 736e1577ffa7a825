# ============================================================
# FILE: utils/resources.py
# ============================================================

import logging
from typing import Callable, List, Tuple

from capture.errors import ResourceReleaseError

logger = logging.getLogger(__name__)

class ResourceStack:
    """Resources registered in acquisition order and released in reverse."""

    def __init__(self):
        self._entries: List[Tuple[str, Callable[[], None]]] = []
    
    def push(self, name: str, release: Callable[[], None]):
        self._entries.append((name, release))
    
    def __len__(self):
        return len(self._entries)
    
    def release_all(self):
        failures = []
        while self._entries:
            name, release = self._entries.pop()
            try:
                release()
                logger.debug(f"Released {name}")
            except Exception as e:
                logger.error(f"Could not release {name}: {e}")
                failures.append((name, e))
        
        if failures:
            raise ResourceReleaseError(failures)
