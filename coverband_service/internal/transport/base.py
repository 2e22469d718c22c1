import abc
from enum import Enum
import http.client
import json
import socket
import typing as t
from urllib.parse import urlencode

import attr

from coverband_service.constants import COLLECTOR_ENDPOINT
from coverband_service.constants import COVERAGE_ENDPOINT
from coverband_service.constants import DEFAULT_ENV_FILTER
from coverband_service.constants import JSON_CONTENT_TYPE
from coverband_service.constants import TOKEN_HEADER
from coverband_service.errors import ConfigurationError
from coverband_service.errors import ParseError
from coverband_service.errors import TransportError
from coverband_service.internal.http import ConnectionType
from coverband_service.internal.http import get_connection
from coverband_service.internal.logger import get_logger
from coverband_service.internal.payload import encode_envelope
from coverband_service.internal.utils.time import StopWatch


log = get_logger(__name__)


class ErrorType(str, Enum):
    CONFIGURATION = "configuration"
    TIMEOUT = "timeout"
    NETWORK = "network"
    CODE_4XX = "status_code_4xx_response"
    CODE_5XX = "status_code_5xx_response"
    BAD_JSON = "bad_json"
    ENCODING = "encoding"
    UNKNOWN = "unknown"


@attr.s(eq=False)
class Response(object):
    status = attr.ib(type=int)
    reason = attr.ib(type=str, default="")
    body = attr.ib(type=bytes, default=b"")

    @classmethod
    def from_http_response(cls, resp):
        # type: (http.client.HTTPResponse) -> Response
        return cls(status=resp.status, reason=resp.reason, body=resp.read())


@attr.s(eq=False)
class TransportResult(object):
    error_type = attr.ib(default=None, type=t.Optional[ErrorType])
    error_description = attr.ib(default=None, type=t.Optional[str])
    response = attr.ib(default=None, type=t.Optional[Response])
    parsed_response = attr.ib(default=None)
    attempts = attr.ib(default=0, type=int)
    elapsed_seconds = attr.ib(default=0.0, type=float)

    @property
    def ok(self):
        # type: () -> bool
        return self.error_type is None

    @property
    def status(self):
        # type: () -> t.Optional[int]
        return self.response.status if self.response is not None else None


def _error_type_for_status(status):
    # type: (int) -> t.Optional[ErrorType]
    if status >= 500:
        return ErrorType.CODE_5XX
    if status >= 400:
        return ErrorType.CODE_4XX
    return None


class Transport(metaclass=abc.ABCMeta):
    """Sends envelopes to the collector and reads coverage back.

    ``send`` and ``fetch_coverage`` never raise: failures are logged and
    reported through the returned ``TransportResult`` (or ``None`` for reads).
    Subclasses decide how connections are obtained by implementing
    ``_perform``, which raises ``TransportError`` on transport failures.
    """

    def __init__(self, url, api_key, timeout, coverband_id=None):
        # type: (str, t.Optional[str], float, t.Optional[str]) -> None
        self.url = url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.coverband_id = coverband_id

    def __repr__(self):
        return "%s(url=%r, timeout=%r)" % (self.__class__.__name__, self.url, self.timeout)

    def _headers(self):
        # type: () -> t.Dict[str, str]
        if not self.api_key:
            raise ConfigurationError("no Coverband API key was found, set COVERBAND_API_KEY")
        return {"Content-Type": JSON_CONTENT_TYPE, TOKEN_HEADER: self.api_key}

    @staticmethod
    def _request_on(conn, method, path, body, headers):
        # type: (ConnectionType, str, str, t.Optional[bytes], t.Dict[str, str]) -> Response
        try:
            conn.request(method, path, body, headers)
            return Response.from_http_response(conn.getresponse())
        except (socket.timeout, TimeoutError) as e:
            raise TransportError("timed out after %ss: %s" % (conn.timeout, e), timeout=True) from e
        except (OSError, http.client.HTTPException) as e:
            raise TransportError("%s: %s" % (e.__class__.__name__, e)) from e

    def _new_connection(self):
        # type: () -> ConnectionType
        return get_connection(self.url, self.timeout)

    @abc.abstractmethod
    def _perform(self, method, path, body, headers):
        # type: (str, str, t.Optional[bytes], t.Dict[str, str]) -> t.Tuple[Response, int]
        """Run one logical request, returning the response and the number of attempts made."""

    def request(self, method, path, body=None):
        # type: (str, str, t.Optional[bytes]) -> TransportResult
        result = TransportResult()
        sw = StopWatch().start()
        try:
            headers = self._headers()
            log.debug("Sending request: %s %s/%s", method, self.url, path)
            result.response, result.attempts = self._perform(method, path, body, headers)
            log.debug("Got response: %s %s", result.response.status, result.response.reason)
        except ConfigurationError as e:
            result.error_type = ErrorType.CONFIGURATION
            result.error_description = str(e)
        except TransportError as e:
            result.error_type = ErrorType.TIMEOUT if e.timeout else ErrorType.NETWORK
            result.error_description = str(e)
        except Exception as e:
            result.error_type = ErrorType.UNKNOWN
            result.error_description = str(e)
            log.debug("Unexpected error requesting %s %s", method, path, exc_info=True)
        else:
            result.error_type = _error_type_for_status(result.response.status)
            if result.error_type is not None:
                result.error_description = "HTTP error status %s, reason %s" % (
                    result.response.status,
                    result.response.reason,
                )
        finally:
            result.elapsed_seconds = sw.elapsed()
        return result

    def send(self, envelope):
        # type: (t.Dict[str, t.Any]) -> TransportResult
        """POST an envelope to the collector endpoint."""
        try:
            # encoded once, every attempt sends the same bytes
            body = encode_envelope(envelope)
        except (TypeError, ValueError) as e:
            log.warning("Coverband: could not encode coverage for %s/%s: %s", self.url, COLLECTOR_ENDPOINT, e)
            return TransportResult(error_type=ErrorType.ENCODING, error_description=str(e))
        log.debug("Coverband: saving %s", body)
        result = self.request("POST", COLLECTOR_ENDPOINT, body)
        if result.error_type is ErrorType.CONFIGURATION:
            log.warning("Coverband: Error: %s", result.error_description)
        elif not result.ok:
            log.warning(
                "Coverband: Error while saving coverage to %s/%s: %s",
                self.url,
                COLLECTOR_ENDPOINT,
                result.error_description,
            )
        return result

    def coverage_path(self, coverage_type, env_filter=DEFAULT_ENV_FILTER):
        # type: (str, t.Optional[str]) -> str
        if self.coverband_id:
            return "%s/%s?%s" % (COVERAGE_ENDPOINT, self.coverband_id, urlencode({"type": coverage_type}))
        params = {"type": coverage_type}
        if env_filter is not None:
            params["env_filter"] = env_filter
        return "%s?%s" % (COVERAGE_ENDPOINT, urlencode(params))

    def fetch_coverage(self, coverage_type, env_filter=DEFAULT_ENV_FILTER):
        # type: (str, t.Optional[str]) -> t.Optional[t.Dict[str, t.Any]]
        """GET the merged coverage snapshot of the given type, ``None`` on any failure."""
        result = self.request("GET", self.coverage_path(coverage_type, env_filter))
        if result.ok:
            try:
                result.parsed_response = self._parse(result.response.body)
            except ParseError as e:
                result.error_type = ErrorType.BAD_JSON
                result.error_description = str(e)

        if not result.ok:
            log.error("Coverband: Error while retrieving coverage: %s", result.error_description)
            return None
        return result.parsed_response

    @staticmethod
    def _parse(body):
        # type: (bytes) -> t.Any
        try:
            return json.loads(body)
        except (ValueError, UnicodeDecodeError) as e:
            raise ParseError("invalid JSON in coverage response: %s" % e) from e

    def close(self):
        # type: () -> None
        pass

    def _after_fork(self):
        # type: () -> None
        pass


class HTTPTransport(Transport):
    """One connection per request, closed as soon as the response is read.

    Suited to short-lived processes and tests where reusing a connection buys
    nothing.
    """

    def _perform(self, method, path, body, headers):
        conn = self._new_connection()
        try:
            return self._request_on(conn, method, path, body, headers), 1
        finally:
            conn.close()
