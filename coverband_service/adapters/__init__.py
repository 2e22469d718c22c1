import typing as t

from coverband_service.settings import ServiceConfig

from .base import Store
from .service import PersistentServiceStore
from .service import ServiceStore


def get_store(config=None):
    # type: (t.Optional[ServiceConfig]) -> ServiceStore
    """Return the store matching ``config.persistent_connection``."""
    if config is None:
        from coverband_service.settings import config
    if config.persistent_connection:
        return PersistentServiceStore(config)
    return ServiceStore(config)


__all__ = ["PersistentServiceStore", "ServiceStore", "Store", "get_store"]
