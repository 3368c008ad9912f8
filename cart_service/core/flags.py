"""Live feature flag holder"""

import logging
import threading

from ..models.flags import FlagSet
from .config import settings

logger = logging.getLogger(__name__)

# Toggle endpoint names -> FlagSet fields
BUG_ALIASES: dict[str, str] = {
    "calculation": "enable_calculation_bug",
    "overflow": "enable_overflow_bug",
    "imageurl": "enable_image_url_bug",
    "response": "enable_response_bug",
    "infoleak": "enable_info_leak_bug",
    "validation": "enable_validation_bug",
    "breakorder": "break_order_creation",
    "noaddchange": "no_quantity_change_on_add",
    "noremovechange": "no_quantity_change_on_remove",
    "nocartclear": "no_cart_clear_after_order",
}


class FlagRegistry:
    """
    Holds the current FlagSet.

    Operations call snapshot() once at their start and keep using that
    value, so a toggle landing mid-operation only affects later calls.
    """

    def __init__(self, flags: FlagSet | None = None):
        self._flags = flags or FlagSet()
        self._lock = threading.Lock()

    def snapshot(self) -> FlagSet:
        return self._flags

    def update(self, **changes) -> FlagSet:
        """Replace the current FlagSet with a copy carrying the changes"""
        unknown = [name for name in changes if name not in FlagSet.model_fields]
        if unknown:
            raise KeyError(f"Unknown feature flags: {unknown}")

        with self._lock:
            self._flags = FlagSet.model_validate({**self._flags.model_dump(), **changes})
            logger.info(f"Feature flags updated: {changes}")
            return self._flags

    def toggle_bug(self, bug_name: str, enable: bool) -> FlagSet:
        """Toggle a bug by its short name (see BUG_ALIASES)"""
        field = BUG_ALIASES.get(bug_name.lower())
        if field is None:
            raise KeyError(f"Unknown bug: {bug_name}")
        return self.update(**{field: enable})


# Singleton instance
flag_registry = FlagRegistry(settings.feature_flags)
