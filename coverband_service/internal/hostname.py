import re
import socket
from typing import Union


_hostname = ""  # type: str

# stray quotes and undecodable bytes show up in some container hostnames
_HOSTNAME_JUNK = re.compile("['\"‘’�]")


def sanitize_hostname(name):
    # type: (Union[str, bytes]) -> str
    if isinstance(name, bytes):
        name = name.decode("utf-8", errors="replace")
    return _HOSTNAME_JUNK.sub("", name).strip()


def get_hostname():
    # type: () -> str
    global _hostname
    if not _hostname:
        _hostname = sanitize_hostname(socket.gethostname())
    return _hostname


def _reset():
    global _hostname
    _hostname = ""
