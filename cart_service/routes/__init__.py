# API Routes

from .cart import router as cart_router
from .features import router as features_router

__all__ = ["cart_router", "features_router"]
