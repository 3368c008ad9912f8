# Core modules

from .config import settings, get_settings, Settings
from .flags import FlagRegistry, flag_registry

__all__ = ["settings", "get_settings", "Settings", "FlagRegistry", "flag_registry"]
