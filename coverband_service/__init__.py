"""Reports in-process coverage and view usage to the Coverband collector service."""
from ._version import __version__
from .internal import logger as _logger
from .settings import config


_logger.configure(config.verbose)

from .adapters import PersistentServiceStore  # noqa: E402
from .adapters import ServiceStore  # noqa: E402
from .adapters import Store  # noqa: E402
from .adapters import get_store  # noqa: E402
from .collectors import ViewTracker  # noqa: E402
from .internal.reporter import BackgroundReporter  # noqa: E402


__all__ = [
    "BackgroundReporter",
    "PersistentServiceStore",
    "ServiceStore",
    "Store",
    "ViewTracker",
    "__version__",
    "config",
    "get_store",
]
