import typing as t

from coverband_service.internal import forksafe
from coverband_service.internal.logger import get_logger
from coverband_service.internal.payload import build_tracked_views
from coverband_service.internal.payload import make_envelope
from coverband_service.internal.payload import relative_view_path
from coverband_service.internal.transport import HTTPTransport
from coverband_service.internal.transport import Transport
from coverband_service.internal.utils.time import Time
from coverband_service.settings import ServiceConfig


log = get_logger(__name__)


class ViewTracker(object):
    """Records which templates were rendered and reports them to the collector.

    Delivery is at most once: the recorded views are handed over and cleared
    before sending, so a failed send loses them.
    """

    def __init__(
        self,
        config=None,  # type: t.Optional[ServiceConfig]
        transport=None,  # type: t.Optional[Transport]
        roots=None,  # type: t.Optional[t.Iterable[str]]
    ):
        # type: (...) -> None
        if config is None:
            from coverband_service.settings import config
        self.config = config
        self.runtime_env = config.env
        self.enabled = config.track_views
        self.roots = list(config.root_paths if roots is None else roots)
        self.transport = transport or HTTPTransport(
            config.url, config.api_key, config.timeout_seconds, coverband_id=config.coverband_id
        )
        self._views = {}  # type: t.Dict[str, None]
        self._lock = forksafe.Lock()

    @property
    def views_to_record(self):
        # type: () -> t.List[str]
        with self._lock:
            return list(self._views)

    def track(self, view):
        # type: (str) -> None
        if not self.enabled:
            return
        with self._lock:
            self._views.setdefault(view, None)

    def reset(self):
        # type: () -> None
        with self._lock:
            self._views = {}

    def report_views_tracked(self):
        # type: () -> None
        if not self.enabled:
            return
        reported_time = int(Time.time())
        with self._lock:
            views, self._views = list(self._views), {}

        if not views:
            return

        try:
            relative_views = [relative_view_path(view, self.roots) for view in views]
            package = build_tracked_views(relative_views, self.runtime_env, reported_time)
            self.transport.send(make_envelope(package))
        except Exception:
            # never propagate into the application
            log.error("Coverband: view_tracker failed to store", exc_info=True)
