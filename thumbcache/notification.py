"""
ReindexSignal - Coalescing notification from a repository to a worker.
"""

import queue
from typing import Optional


class ReindexSignal:
    """
    A notification channel with room for one pending signal.

    A signal sent while the worker is busy is kept until it is consumed.
    Further signals sent before that collapse into the pending one.
    """

    def __init__(self):
        self._queue: "queue.Queue[bool]" = queue.Queue(maxsize=1)

    def notify(self) -> bool:
        """
        Send a signal without blocking.

        Returns:
            True if a new signal was queued, False if one was already pending
        """
        try:
            self._queue.put_nowait(True)
            return True
        except queue.Full:
            return False

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for a signal and consume it.

        Args:
            timeout: Seconds to wait, or None to wait forever

        Returns:
            True if a signal was received, False on timeout
        """
        try:
            self._queue.get(timeout=timeout)
            return True
        except queue.Empty:
            return False

    @property
    def pending(self) -> bool:
        return not self._queue.empty()

    def __call__(self) -> bool:
        return self.notify()
