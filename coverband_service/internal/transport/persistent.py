import enum
import typing as t

from coverband_service.errors import TransportError
from coverband_service.internal import forksafe
from coverband_service.internal.http import ConnectionType
from coverband_service.internal.logger import get_logger

from .base import Response
from .base import Transport


log = get_logger(__name__)


class ConnectionState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    REINITIALIZING = "reinitializing"


class PersistentHTTPTransport(Transport):
    """Keeps one HTTP connection open across requests.

    Long-running workers report on a fixed interval, so reusing the
    connection saves a TCP and TLS handshake per report. Keep-alive
    connections go stale between reports, so a transport failure is retried
    exactly once on a brand new connection.
    """

    RETRY_ATTEMPTS = 1

    def __init__(self, url, api_key, timeout, coverband_id=None):
        # type: (str, t.Optional[str], float, t.Optional[str]) -> None
        super(PersistentHTTPTransport, self).__init__(url, api_key, timeout, coverband_id=coverband_id)
        self._conn = None  # type: t.Optional[ConnectionType]
        self.state = ConnectionState.UNINITIALIZED
        # Requests and connection swaps are serialized: a replacement connection
        # only becomes visible once the old one has been shut down.
        self._conn_lck = forksafe.RLock()

    def initiate(self):
        # type: () -> None
        with self._conn_lck:
            if self._conn is None:
                log.debug("creating new collector connection to %s with timeout %s", self.url, self.timeout)
                self._conn = self._new_connection()
            self.state = ConnectionState.READY

    def _reinitiate(self):
        # type: () -> None
        with self._conn_lck:
            self.state = ConnectionState.REINITIALIZING
            self._reset_connection()
            self.initiate()

    def _reset_connection(self):
        # type: () -> None
        with self._conn_lck:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def _perform(self, method, path, body, headers):
        # type: (str, str, t.Optional[bytes], t.Dict[str, str]) -> t.Tuple[Response, int]
        with self._conn_lck:
            if self._conn is None:
                self.initiate()
            try:
                return self._request_on(self._conn, method, path, body, headers), 1
            except TransportError as e:
                log.debug("request on persistent connection failed (%s), reconnecting", e)

            self._reinitiate()
            try:
                return self._request_on(self._conn, method, path, body, headers), 1 + self.RETRY_ATTEMPTS
            except TransportError:
                # http.client reconnects a closed connection on its next request
                self._conn.close()
                raise

    def close(self):
        # type: () -> None
        self._reset_connection()
        self.state = ConnectionState.UNINITIALIZED

    def _after_fork(self):
        # type: () -> None
        # the socket belongs to the parent, forget it without shutting it down
        self._conn = None
        self.state = ConnectionState.UNINITIALIZED
