"""Stores shipping coverage deltas to the Coverband collector service."""
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
import threading
import typing as t
import weakref

from coverband_service.constants import DEFAULT_ENV_FILTER
from coverband_service.errors import NotSupportedError
from coverband_service.internal import forksafe
from coverband_service.internal.dogstatsd import get_dogstatsd_client
from coverband_service.internal.identity import ClientIdentity
from coverband_service.internal.logger import get_logger
from coverband_service.internal.payload import build_delta
from coverband_service.internal.payload import make_envelope
from coverband_service.internal.timing import TimingSink
from coverband_service.internal.timing import device_label
from coverband_service.internal.transport import HTTPTransport
from coverband_service.internal.transport import PersistentHTTPTransport
from coverband_service.internal.transport import Transport
from coverband_service.internal.transport import TransportResult
from coverband_service.internal.utils.time import StopWatch
from coverband_service.settings import ServiceConfig

from .base import Store


if t.TYPE_CHECKING:  # pragma: no cover
    from datadog.dogstatsd import DogStatsd


log = get_logger(__name__)

_stores = weakref.WeakSet()  # type: weakref.WeakSet[ServiceStore]


@forksafe.register
def _reset_stores_after_fork():
    # type: () -> None
    for store in list(_stores):
        store._after_fork()


class ServiceStore(Store):
    """Ships every coverage report to the collector on a fresh connection."""

    TRANSPORT_CLASS = HTTPTransport  # type: t.Type[Transport]

    def __init__(
        self,
        config=None,  # type: t.Optional[ServiceConfig]
        transport=None,  # type: t.Optional[Transport]
        dogstatsd=None,  # type: t.Optional[DogStatsd]
        identity=None,  # type: t.Optional[ClientIdentity]
    ):
        # type: (...) -> None
        super(ServiceStore, self).__init__()
        if config is None:
            from coverband_service.settings import config
        self.config = config
        self.runtime_env = config.env
        self.transport = transport or self.TRANSPORT_CLASS(
            config.url, config.api_key, config.timeout_seconds, coverband_id=config.coverband_id
        )
        self.identity = identity or ClientIdentity(config.process_type, config.hostname)

        if dogstatsd is None and config.stats_url:
            try:
                dogstatsd = get_dogstatsd_client(config.stats_url)
            except ValueError:
                log.warning("Coverband: invalid stats URL %r, save timings disabled", config.stats_url)
        self.timing = TimingSink(dogstatsd, self.identity.hostname, device_label(self.transport), self.runtime_env)

        self._executor = None  # type: t.Optional[ThreadPoolExecutor]
        self._executor_lock = threading.Lock()
        _stores.add(self)

    def __repr__(self):
        return "%s(transport=%r, runtime_env=%r)" % (self.__class__.__name__, self.transport, self.runtime_env)

    @property
    def process_type(self):
        # type: () -> str
        return self.identity.process_type

    def clear(self):
        # type: () -> None
        # clearing is done on the service side
        pass

    def clear_file(self, filename):
        # type: (str) -> None
        pass

    def size(self):
        # type: () -> t.Optional[int]
        # TODO: return None once the engine accepts it as "size not supported"
        return 0

    def raw_store(self):
        # type: () -> t.Any
        raise NotSupportedError("raw_store is not supported by %s" % self.__class__.__name__)

    def coverage(self, local_type=None, opts=None):
        # type: (t.Optional[str], t.Optional[t.Dict[str, t.Any]]) -> t.Optional[t.Dict[str, t.Any]]
        opts = opts or {}
        if local_type is None:
            local_type = opts["override_type"] if "override_type" in opts else self.type
        env_filter = opts.get("env_filter", DEFAULT_ENV_FILTER)
        return self.transport.fetch_coverage(local_type, env_filter)

    def save_report(self, report):
        # type: (t.Mapping[str, t.Any]) -> None
        """Send a coverage delta and wait for it to be saved.

        The work runs on a small worker pool, off the thread that collected the
        report, but this call still waits for it (up to ``save_timeout``) so a
        report is not lost when the process exits right after. Nothing raised
        while saving escapes this method.
        """
        if not report:
            return

        self.identity.bind_pid()
        # the engine keeps mutating its report, send what it holds now
        report = dict(report)
        coverage_type = self.type
        try:
            future = self._get_executor().submit(self._save_report, report, coverage_type)
            future.result(timeout=self.config.save_timeout)
        except FutureTimeoutError:
            log.warning("Coverband: saving coverage took more than %ss, giving up waiting", self.config.save_timeout)
        except Exception:
            log.error("Coverband: failed to save coverage", exc_info=True)

    def _save_report(self, report, coverage_type):
        # type: (t.Dict[str, t.Any], str) -> TransportResult
        data = build_delta(
            report,
            self.identity,
            self.runtime_env,
            coverage_type=coverage_type,
            roots=self.config.root_paths,
        )
        with StopWatch() as sw:
            result = self.transport.send(make_envelope(data))
        self.timing.report_timing(sw.elapsed())
        return result

    def _get_executor(self):
        # type: () -> ThreadPoolExecutor
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.config.max_workers, thread_name_prefix="coverband-report"
                )
            return self._executor

    def close(self):
        # type: () -> None
        with self._executor_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)
        self.transport.close()

    def _after_fork(self):
        # type: () -> None
        # the pool threads only exist in the parent
        self._executor = None
        self._executor_lock = threading.Lock()
        self.identity.reset_pid()
        self.transport._after_fork()


class PersistentServiceStore(ServiceStore):
    """Ships coverage reports over one long-lived connection, reconnecting once on failure."""

    TRANSPORT_CLASS = PersistentHTTPTransport

    def __init__(self, *args, **kwargs):
        super(PersistentServiceStore, self).__init__(*args, **kwargs)
        if isinstance(self.transport, PersistentHTTPTransport):
            self.transport.initiate()

    def raw_store(self):
        # type: () -> t.Any
        return self
