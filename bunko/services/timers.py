import threading
from typing import Callable


class TimerHandle:
    def __init__(self, timer: threading.Timer):
        self._timer = timer

    def cancel(self) -> None:
        self._timer.cancel()


class ThreadingScheduler:
    """Runs callbacks after a delay on daemon timer threads.

    Anything exposing the same ``call_later`` signature can stand in for it,
    which is how tests drive the debounce window without sleeping.
    """

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return TimerHandle(timer)
