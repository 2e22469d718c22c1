from .service import ServiceConfig
from .service import config


__all__ = ["ServiceConfig", "config"]
