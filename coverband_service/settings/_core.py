from collections import ChainMap
import os
from typing import Dict  # noqa:F401
from typing import Optional  # noqa:F401

from envier import Env


class CoverbandConfig(Env):
    """Provides support for loading configurations from code and the environment.

    Values passed explicitly through ``source`` take precedence over the
    process environment, so that a configuration object can be constructed
    once at startup and handed to every component by reference.
    """

    def __init__(
        self,
        source: Optional[Dict[str, str]] = None,
        parent: Optional["Env"] = None,
        dynamic: Optional[Dict[str, str]] = None,
    ) -> None:
        self.code_source = dict(source or {})
        self.env_source = os.environ

        full_source = ChainMap(self.code_source, self.env_source)

        super().__init__(source=full_source, parent=parent, dynamic=dynamic)
