"""
Cart Service Application

Basket and order backend with switchable, deliberately injected defects
for QA and bug-reproduction training.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

from .core.config import PROJECT_ROOT, settings
from .core.flags import flag_registry
from .middleware.request_logging import RequestLoggingMiddleware
from .routes import cart_router, features_router

# Load environment variables
load_dotenv(PROJECT_ROOT / ".env")

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    flags = flag_registry.snapshot()
    logger.info("Cart Service starting up...")
    logger.info(f"Order service URL: {flags.order_service_url}")
    enabled = [name for name, value in flags.bug_flags.items() if value]
    logger.info(f"Active bugs: {enabled or 'none'}")

    yield

    logger.info("Cart Service shutting down...")
    # Cleanup order service client
    from .routes.cart import order_client
    if order_client:
        await order_client.close()


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Basket and order API with switchable injected defects",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware, flags=flag_registry)

# Include API routers
app.include_router(cart_router)
app.include_router(features_router)


@app.get("/")
async def home():
    """API index"""
    return {
        "message": "Cart Service API",
        "docs": "/docs",
        "endpoints": {
            "cart": "/api/cart",
            "features": "/api/features",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "cart-service",
        "order_service_url": flag_registry.snapshot().order_service_url,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "cart_service.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
