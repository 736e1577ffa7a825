# ============================================================
# FILE: alerts/dispatcher.py
# ============================================================

import logging
import queue
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)

_STOP = object()

class CallbackDispatcher:
    """Runs a zero-argument callback on a single worker thread.

    submit() never blocks the caller. When the queue is full the event is
    dropped and logged.
    """

    def __init__(self, callback: Callable[[], None], queue_size: int = 64, name: str = "on-detect"):
        if queue_size <= 0:
            raise ValueError(f"queue_size must be positive, got {queue_size}")
        self.callback = callback
        self.queue = queue.Queue(maxsize=queue_size)
        self.dropped = 0
        self._stopped = False
        self._worker = threading.Thread(target=self._run, name=name, daemon=True)
        self._worker.start()
    
    def submit(self) -> bool:
        if self._stopped:
            return False
        try:
            self.queue.put_nowait(None)
            return True
        except queue.Full:
            self.dropped += 1
            logger.warning(f"Callback queue full, dropped detection event ({self.dropped} dropped so far)")
            return False
    
    def _run(self):
        while True:
            item = self.queue.get()
            try:
                if item is _STOP:
                    return
                self.callback()
            except Exception:
                logger.exception("Detection callback raised")
            finally:
                self.queue.task_done()
    
    def stop(self, timeout: Optional[float] = 5.0):
        if self._stopped:
            return
        self._stopped = True
        # pending events run before the sentinel is reached
        try:
            self.queue.put(_STOP, timeout=timeout)
        except queue.Full:
            logger.warning(f"Callback queue still full, abandoning {self.queue.qsize()} pending event(s)")
            return
        self._worker.join(timeout)
        if self._worker.is_alive():
            logger.warning("Callback worker did not finish within timeout")
