import re
import typing as t

from coverband_service.constants import SAVE_TIME_METRIC
from coverband_service.internal.logger import get_logger


if t.TYPE_CHECKING:  # pragma: no cover
    from datadog.dogstatsd import DogStatsd


log = get_logger(__name__)

_FIRST_CAP = re.compile(r"(.)([A-Z][a-z]+)")
_ALL_CAP = re.compile(r"([a-z0-9])([A-Z])")


def device_label(obj):
    # type: (t.Any) -> str
    """Snake-cased class name of ``obj``, e.g. ``persistent_http_transport``."""
    name = obj if isinstance(obj, str) else type(obj).__name__
    return _ALL_CAP.sub(r"\1_\2", _FIRST_CAP.sub(r"\1_\2", name)).lower()


class TimingSink(object):
    """Ships save durations to DogStatsD when a stats backend is configured."""

    def __init__(self, dogstatsd, hostname, device, runtime_env):
        # type: (t.Optional[DogStatsd], str, str, str) -> None
        self.dogstatsd = dogstatsd
        self.tags = ["hostname:%s" % hostname, "device:%s" % device, "env:%s" % runtime_env]

    @property
    def enabled(self):
        # type: () -> bool
        return self.dogstatsd is not None

    def report_timing(self, duration_seconds):
        # type: (float) -> None
        if self.dogstatsd is None:
            return
        try:
            self.dogstatsd.timing(SAVE_TIME_METRIC, duration_seconds * 1000.0, tags=self.tags)
        except Exception:
            log.debug("failed to report save timing", exc_info=True)
