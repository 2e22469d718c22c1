class CoverbandError(Exception):
    """Base class for errors raised inside the reporting client.

    None of these ever reach the host application: they are raised at the
    point of failure and turned into a logged ``TransportResult`` (or simply
    logged) at the public boundary.
    """


class ConfigurationError(CoverbandError):
    """The client is missing a setting it needs, e.g. the API key."""


class TransportError(CoverbandError):
    """A connection, timeout or TLS failure while talking to the collector."""

    def __init__(self, message, timeout=False):
        super(TransportError, self).__init__(message)
        self.timeout = timeout


class ParseError(CoverbandError):
    """The collector answered with a body that is not valid JSON."""


class NotSupportedError(CoverbandError):
    pass
