import http.client as httplib
import socket
from typing import Any
from typing import Union
from urllib import parse

from coverband_service._version import __version__


USER_AGENT = "coverband-service-client/%s" % __version__


class HTTPConnectionMixin:
    """
    Mixin for HTTP(S) connections to the collector service.

    Currently this mixin performs the following adjustments:
    - insert a base path to requested URLs
    - add the client User-Agent to every request
    """

    _base_path: str = "/"

    def putrequest(self, method: str, url: str, skip_host: bool = False, skip_accept_encoding: bool = False) -> None:
        url = parse.urljoin(self._base_path, url)
        return super().putrequest(  # type: ignore[misc]
            method, url, skip_host=skip_host, skip_accept_encoding=skip_accept_encoding
        )

    @classmethod
    def with_base_path(cls, *args, **kwargs):
        base_path = kwargs.pop("base_path", None) or "/"
        if not base_path.endswith("/"):
            base_path += "/"
        obj = cls(*args, **kwargs)
        obj._base_path = base_path
        return obj

    def request(self, method, url, body=None, headers={}, *, encode_chunked=False):
        _headers = headers.copy()
        _headers.setdefault("User-Agent", USER_AGENT)

        return super().request(method, url, body=body, headers=_headers, encode_chunked=encode_chunked)


class HTTPConnection(HTTPConnectionMixin, httplib.HTTPConnection):
    """
    httplib.HTTPConnection wrapper to add a base path to requested URLs
    """


class HTTPSConnection(HTTPConnectionMixin, httplib.HTTPSConnection):
    """
    httplib.HTTPSConnection wrapper to add a base path to requested URLs
    """


class UDSHTTPConnection(HTTPConnectionMixin, httplib.HTTPConnection):
    """An HTTP connection established over a Unix Domain Socket."""

    # The hostname and port are unused to connect but still end up in the `Host` header.
    def __init__(self, path: str, *args: Any, **kwargs: Any) -> None:
        super(UDSHTTPConnection, self).__init__(*args, **kwargs)
        self.path = path

    def connect(self) -> None:
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        sock.settimeout(self.timeout)
        sock.connect(self.path)
        self.sock = sock


ConnectionType = Union[HTTPConnection, HTTPSConnection, UDSHTTPConnection]


def get_connection(url: str, timeout: float) -> ConnectionType:
    """Return an HTTP connection to the given URL.

    The same ``timeout`` bounds connecting, the TLS handshake and every read.
    The path of ``url`` is used as base path for relative request paths.
    """
    parsed = parse.urlparse(url)
    hostname = parsed.hostname or ""

    if parsed.scheme == "https":
        return HTTPSConnection.with_base_path(hostname, parsed.port, timeout=timeout, base_path=parsed.path)
    elif parsed.scheme == "http":
        return HTTPConnection.with_base_path(hostname, parsed.port, timeout=timeout, base_path=parsed.path)
    elif parsed.scheme == "unix":
        return UDSHTTPConnection.with_base_path(parsed.path, "localhost", timeout=timeout)

    raise ValueError("Unsupported protocol '%s' in collector URL %r" % (parsed.scheme, url))
