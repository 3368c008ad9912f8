"""Cart service exceptions"""


class CartServiceError(Exception):
    """Base exception for cart service errors"""
    pass


class CartValidationError(CartServiceError):
    """Malformed or missing input, message is shown to the caller"""
    pass


class ItemNotFoundError(CartServiceError):
    """Referenced line item does not exist"""
    pass


class StorageError(CartServiceError):
    """Cart store failure (constraint violation, lost connection)"""
    pass


class OrderServiceError(CartServiceError):
    """Order service call failed"""
    pass


class OrderServiceUnavailableError(OrderServiceError):
    """Order service could not be reached"""
    pass
