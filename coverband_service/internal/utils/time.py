import time as _time
from typing import Optional  # noqa:F401


class Time(object):
    """Clocks used for report timestamps and save timings.

    Components read the clock through this class so a test can pin it with
    ``mock.patch.object(Time, "time")`` without touching the ``time`` module.
    """

    time = _time.time
    monotonic = _time.monotonic


class StopWatch(object):
    """Seconds spent in a block, measured on the monotonic clock.

    ``elapsed`` keeps growing until the ``with`` block exits and is frozen
    afterwards.
    """

    def __init__(self):
        # type: () -> None
        self._started_at = None  # type: Optional[float]
        self._stopped_at = None  # type: Optional[float]

    def start(self):
        # type: () -> StopWatch
        self._started_at = Time.monotonic()
        self._stopped_at = None
        return self

    def elapsed(self):
        # type: () -> float
        if self._started_at is None:
            raise RuntimeError("stopwatch was never started")
        end = Time.monotonic() if self._stopped_at is None else self._stopped_at
        return end - self._started_at

    def __enter__(self):
        # type: () -> StopWatch
        return self.start()

    def __exit__(self, exc_type, exc_value, traceback):
        self._stopped_at = Time.monotonic()
