"""Feature flag models for the cart service"""

from pydantic import BaseModel, ConfigDict, Field

FEATURE_CONTROLS = (
    "enable_new_cart_logic",
    "enable_order_service_integration",
    "cart_item_limit",
    "order_service_url",
)


class FlagSet(BaseModel):
    """
    Snapshot of every bug toggle and feature control.

    Instances are frozen: a runtime toggle swaps in a new FlagSet rather
    than mutating the one an in-flight operation is reading.
    """

    model_config = ConfigDict(frozen=True)

    # Order / checkout bugs
    break_order_creation: bool = False
    no_quantity_change_on_add: bool = False
    no_quantity_change_on_remove: bool = False
    no_cart_clear_after_order: bool = False

    # Cart bugs
    enable_calculation_bug: bool = False
    enable_overflow_bug: bool = False
    enable_image_url_bug: bool = False
    enable_response_bug: bool = False
    enable_info_leak_bug: bool = False
    enable_validation_bug: bool = False

    # Reported by the admin view only, the engine does not read these
    enable_duplicate_cart_item_bug: bool = False
    enable_quantity_update_bug: bool = False
    enable_wrong_basket_bug: bool = False
    enable_partial_clear_bug: bool = False
    enable_skip_stock_validation_bug: bool = False
    enable_invalid_quantity_bug: bool = False

    # Feature controls
    # Reported by the admin view only, the engine does not read these two
    enable_new_cart_logic: bool = False
    enable_order_service_integration: bool = True
    cart_item_limit: int = Field(default=50, ge=1)
    order_service_url: str = "http://localhost:8096"

    @property
    def bug_flags(self) -> dict[str, bool]:
        """All bug toggles keyed by field name"""
        return {
            name: getattr(self, name)
            for name in type(self).model_fields
            if name not in FEATURE_CONTROLS
        }

    @property
    def feature_controls(self) -> dict[str, object]:
        return {name: getattr(self, name) for name in FEATURE_CONTROLS}
