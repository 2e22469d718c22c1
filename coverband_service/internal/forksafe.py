"""
Fork-safety helpers.

The reporting client keeps process-local state (the bound pid, a persistent
connection, a worker pool, locks) that must not leak from a parent process
into a forked child. Components register a hook here and drop that state in
the child.
"""
import logging
import os
import threading
import typing
import weakref

import wrapt


log = logging.getLogger(__name__)


_registry = []  # type: typing.List[typing.Callable[[], None]]


def run_after_in_child_hooks():
    # type: () -> None
    # iterate over a copy, hooks may register new hooks
    for hook in list(_registry):
        try:
            hook()
        except Exception:
            log.exception("Exception ignored in forksafe hook %r", hook)


def register(after_in_child):
    # type: (typing.Callable[[], None]) -> typing.Callable[[], None]
    """Register a function to be called in the child process after a fork.

    Can be used as a decorator. The hook runs after every fork until it is
    unregistered.
    """
    _registry.append(after_in_child)
    return after_in_child


def unregister(after_in_child):
    # type: (typing.Callable[[], None]) -> None
    """Unregister an after-fork hook. Raises `ValueError` if it was never registered."""
    _registry.remove(after_in_child)


if hasattr(os, "register_at_fork"):
    os.register_at_fork(after_in_child=run_after_in_child_hooks)


_resetable_objects = weakref.WeakSet()  # type: weakref.WeakSet[ResetObject]


@register
def _reset_objects():
    # type: (...) -> None
    for obj in list(_resetable_objects):
        try:
            obj._reset_object()
        except Exception:
            log.exception("Exception ignored in object reset forksafe hook %r", obj)


_T = typing.TypeVar("_T")


class ResetObject(wrapt.ObjectProxy, typing.Generic[_T]):
    """Proxy to a synchronization primitive that is recreated in forked children.

    A lock held by another thread at fork time stays held forever in the child,
    since that thread does not exist there. Replacing the wrapped object after
    the fork gives the child a fresh, released primitive.
    """

    def __init__(
        self, factory  # type: typing.Callable[[], _T]
    ):
        # type: (...) -> None
        super(ResetObject, self).__init__(factory())
        self._self_factory = factory
        _resetable_objects.add(self)

    def _reset_object(self):
        # type: (...) -> None
        self.__wrapped__ = self._self_factory()


def Lock():
    # type: (...) -> ResetObject[threading.Lock]
    return ResetObject(threading.Lock)


def RLock():
    # type: (...) -> ResetObject[threading.RLock]
    return ResetObject(threading.RLock)


def Event():
    # type: (...) -> ResetObject[threading.Event]
    return ResetObject(threading.Event)
