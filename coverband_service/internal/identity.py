import os
from typing import Optional

from coverband_service.internal import forksafe
from coverband_service.internal.hostname import get_hostname
from coverband_service.internal.hostname import sanitize_hostname


class ClientIdentity(object):
    """Who is reporting: process type, host and process id.

    The pid is bound lazily on the first report rather than at construction,
    since the client is usually created in a preforking parent and the
    reports are sent from its children.
    """

    def __init__(self, process_type, hostname=None):
        # type: (str, Optional[str]) -> None
        self.process_type = process_type
        self.hostname = sanitize_hostname(hostname) if hostname else get_hostname()
        self._pid = None  # type: Optional[int]
        self._lock = forksafe.Lock()

    @property
    def pid(self):
        # type: () -> Optional[int]
        return self._pid

    def bind_pid(self):
        # type: () -> int
        with self._lock:
            if self._pid is None:
                self._pid = os.getpid()
            return self._pid

    def reset_pid(self):
        # type: () -> None
        self._pid = None

    def __repr__(self):
        return "ClientIdentity(process_type=%r, hostname=%r, pid=%r)" % (self.process_type, self.hostname, self._pid)
