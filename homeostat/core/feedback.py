"""
core/feedback.py

One flinch at a time.

Every induced damage asks the outside world to react (lights, sounds).
The reaction runs beside the control loop, never inside it. If the body
is still reacting to the last hurt, the new one passes silently.
"""

from __future__ import annotations
from typing import Callable, Optional
import logging
import threading

logger = logging.getLogger(__name__)


class FeedbackGuard:
    """
    Single-slot busy flag for damage feedback tasks.

    The flag is checked and set under a lock before a task is spawned.
    Requests arriving while a task is in flight are dropped: never queued,
    never cancelling the running task.
    """

    def __init__(self, name: str = "damage-feedback"):
        self.name = name
        self._lock = threading.Lock()
        self._busy = False
        self._thread: Optional[threading.Thread] = None

        self.spawned = 0
        self.dropped = 0

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._busy

    def try_spawn(self, task: Callable[[], None]) -> bool:
        """
        Run task on a background thread unless one is already running.

        Returns True if the task was started.
        """
        with self._lock:
            if self._busy:
                self.dropped += 1
                logger.debug(f"{self.name} busy, dropping request")
                return False
            self._busy = True
            self.spawned += 1

        thread = threading.Thread(
            target=self._run,
            args=(task,),
            name=f"{self.name}-{self.spawned}",
            daemon=True,
        )
        self._thread = thread
        thread.start()
        return True

    def _run(self, task: Callable[[], None]) -> None:
        try:
            task()
        except Exception as e:
            logger.warning(f"{self.name} task failed: {e}")
        finally:
            with self._lock:
                self._busy = False

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the in-flight task finishes.

        Returns True when no task is left running.
        """
        thread = self._thread
        if thread is not None:
            thread.join(timeout)
        return not self.busy

    def __repr__(self) -> str:
        return (
            f"FeedbackGuard(busy={self.busy}, "
            f"spawned={self.spawned}, dropped={self.dropped})"
        )
