"""Re-export of the top-level :mod:`config` module for ``core`` imports.

Modules inside ``core`` import settings as ``from .config import BATCH_SIZE``
so the package can be used without knowing where the settings file lives.
"""

from config import *  # type: ignore  # noqa: F401,F403
