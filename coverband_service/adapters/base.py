import abc
import typing as t

from coverband_service.constants import COVERAGE_TYPES
from coverband_service.constants import RUNTIME_TYPE


class Store(metaclass=abc.ABCMeta):
    """Sink for coverage deltas produced by the instrumentation engine.

    The engine only depends on this interface, so any backend (the remote
    collector service here) can be plugged in without patching the engine.
    """

    def __init__(self):
        # type: () -> None
        self._type = RUNTIME_TYPE

    @property
    def type(self):
        # type: () -> str
        return self._type

    @type.setter
    def type(self, value):
        # type: (str) -> None
        if value not in COVERAGE_TYPES:
            raise ValueError("unknown coverage type %r, expected one of %s" % (value, ", ".join(COVERAGE_TYPES)))
        self._type = value

    @abc.abstractmethod
    def save_report(self, report):
        # type: (t.Mapping[str, t.Any]) -> None
        pass

    @abc.abstractmethod
    def coverage(self, local_type=None, opts=None):
        # type: (t.Optional[str], t.Optional[t.Dict[str, t.Any]]) -> t.Optional[t.Dict[str, t.Any]]
        pass

    @abc.abstractmethod
    def clear(self):
        # type: () -> None
        pass

    @abc.abstractmethod
    def clear_file(self, filename):
        # type: (str) -> None
        pass

    @abc.abstractmethod
    def size(self):
        # type: () -> t.Optional[int]
        pass

    @abc.abstractmethod
    def raw_store(self):
        # type: () -> t.Any
        pass
