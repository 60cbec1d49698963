"""
Caterpillar Ranch Application

Gamified discount and cart engine for the horror print-on-demand
storefront: mini-game scoring, per-session replay throttling, pending
discount ledger and the discount-locking cart.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

from .core.config import Settings, get_settings
from .core.session_middleware import BrowsingSessionMiddleware, SESSION_HEADER
from .routes import (
    products_router,
    sessions_router,
    games_router,
    discounts_router,
    cart_router,
    checkout_router,
)
from .services.scheduler import CountdownScheduler
from .services.store import RanchStore

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    store: RanchStore = app.state.store
    logger.info("Caterpillar Ranch starting up...")
    logger.info(f"Discount TTL: {store.settings.discount_ttl_minutes} min, tiers: "
                f"{[(t.threshold, t.percent) for t in store.tiers.tiers]}")

    scheduler = CountdownScheduler(
        tick=store.tick,
        interval=store.settings.tick_interval_seconds,
        maintenance=store.cleanup,
    )
    app.state.scheduler = scheduler
    scheduler.start()

    yield

    await scheduler.stop()
    logger.info("Caterpillar Ranch shutting down...")


def create_app(store: Optional[RanchStore] = None, settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI app around a RanchStore (a fresh one when not given)"""
    settings = settings or (store.settings if store else get_settings())
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Gamified discount and cart engine for the Caterpillar Ranch storefront",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.store = store or RanchStore(settings=settings)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, restrict this
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[SESSION_HEADER],
    )

    # Browsing session middleware
    app.add_middleware(
        BrowsingSessionMiddleware,
        manager_factory=lambda: app.state.store.sessions,
    )

    # Include API routers
    app.include_router(products_router)
    app.include_router(sessions_router)
    app.include_router(games_router)
    app.include_router(discounts_router)
    app.include_router(cart_router)
    app.include_router(checkout_router)

    @app.get("/")
    async def home():
        return {
            "message": "Caterpillar Ranch API",
            "docs": "/docs",
            "endpoints": {
                "products": "/api/products",
                "sessions": "/api/sessions",
                "games": "/api/games",
                "discounts": "/api/discounts",
                "cart": "/api/cart",
                "checkout": "/api/checkout",
            },
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "service": "caterpillar-ranch"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "caterpillar_ranch.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
