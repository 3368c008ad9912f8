# Database modules

from .carts import cart_store, CartStore, InMemoryCartStore

__all__ = [
    "cart_store",
    "CartStore",
    "InMemoryCartStore",
]
