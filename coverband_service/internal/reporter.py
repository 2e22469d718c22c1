import random
import typing as t

import attr

from coverband_service.internal.logger import get_logger
from coverband_service.internal.periodic import PeriodicService
from coverband_service.settings import ServiceConfig


log = get_logger(__name__)

ReportCallable = t.Callable[[], t.Any]


@attr.s(eq=False)
class BackgroundReporter(PeriodicService):
    """Runs the report callables every ``interval`` seconds, plus a random wiggle.

    The wiggle spreads reports of processes started together (e.g. after a
    deploy) so they do not all hit the collector at once. Every callable is
    run one last time when the reporter is stopped.
    """

    _targets = attr.ib(factory=list, type=t.List[ReportCallable])
    wiggle = attr.ib(default=0, type=int)
    _base_interval = attr.ib(default=None, init=False, repr=False)

    def __attrs_post_init__(self):
        self._base_interval = self._interval
        self._interval = self._next_interval()

    @classmethod
    def from_config(cls, config, targets):
        # type: (ServiceConfig, t.Iterable[ReportCallable]) -> BackgroundReporter
        return cls(interval=config.reporting_interval, targets=list(targets), wiggle=config.reporting_wiggle)

    def register(self, target):
        # type: (ReportCallable) -> ReportCallable
        self._targets.append(target)
        return target

    def _next_interval(self):
        # type: () -> float
        if self.wiggle <= 0:
            return self._base_interval
        return self._base_interval + random.randint(0, self.wiggle)  # nosec

    def report(self):
        # type: () -> None
        for target in list(self._targets):
            try:
                target()
            except Exception:
                log.error("Coverband: background report %r failed", target, exc_info=True)

    def periodic(self):
        # type: () -> None
        try:
            self.report()
        finally:
            self.interval = self._next_interval()

    def on_shutdown(self):
        # type: () -> None
        self.report()
