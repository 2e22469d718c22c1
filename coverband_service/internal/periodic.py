import threading
import typing as t

import attr

from . import forksafe
from .service import Service


class PeriodicThread(threading.Thread):
    """Daemon thread calling ``target`` every ``interval`` seconds until stopped.

    ``on_shutdown`` runs once on this thread after the last call, so whatever
    accumulated since the previous tick can still be flushed.
    """

    def __init__(
        self,
        interval,  # type: float
        target,  # type: t.Callable[[], t.Any]
        name=None,  # type: t.Optional[str]
        on_shutdown=None,  # type: t.Optional[t.Callable[[], t.Any]]
    ):
        # type: (...) -> None
        super(PeriodicThread, self).__init__(name=name, daemon=True)
        self.interval = interval
        self._tick = target
        self._on_shutdown = on_shutdown
        self._stopping = forksafe.Event()

    def stop(self):
        # type: () -> None
        # the thread does not survive a fork, there is nobody to wake up in the child
        if self.is_alive():
            self._stopping.set()

    def run(self):
        # type: () -> None
        # interval is read on each wait, a new value applies from the next tick
        while not self._stopping.wait(self.interval):
            self._tick()
        if self._on_shutdown is not None:
            self._on_shutdown()


@attr.s(eq=False)
class PeriodicService(Service):
    """Service running ``periodic`` on its own thread every ``interval`` seconds."""

    _interval = attr.ib(type=float)
    _worker = attr.ib(default=None, init=False, repr=False)

    @property
    def interval(self):
        # type: () -> float
        return self._interval

    @interval.setter
    def interval(self, value):
        # type: (float) -> None
        self._interval = value
        if self._worker is not None:
            self._worker.interval = value

    def _start_service(self):
        # type: () -> None
        self._worker = PeriodicThread(
            self._interval,
            self.periodic,
            name="coverband:%s" % self.__class__.__name__,
            on_shutdown=self.on_shutdown,
        )
        self._worker.start()

    def _stop_service(self):
        # type: () -> None
        self._worker.stop()

    def join(self, timeout=None):
        # type: (t.Optional[float]) -> None
        if self._worker is not None:
            self._worker.join(timeout)

    def periodic(self):
        # type: () -> None
        """Called on the worker thread every ``interval`` seconds."""

    def on_shutdown(self):
        # type: () -> None
        """Called on the worker thread once, after it has been asked to stop."""
