"""
FastAPI application factory.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import get_settings
from .core.redis import close_redis
from .api.router import router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="theIshop",
        description="Storefront with AI design commissions",
        version="1.0.0",
        docs_url="/docs" if settings.env == "development" else None,
        redoc_url="/redoc" if settings.env == "development" else None,
    )

    # ── CORS ─────────────────────────────────────────────────────
    origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Startup ──────────────────────────────────────────────────
    @app.on_event("startup")
    async def on_startup():
        logging.basicConfig(
            level=getattr(logging, settings.log_level.upper(), logging.INFO),
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
        logger.info("Starting theIshop (env=%s)", settings.env)

        from .services.catalog import get_catalog
        await get_catalog().initialize_if_absent()

        from .core.flags import get_flags
        flags = get_flags()
        logger.info(
            "Flags: redis=%s razorpay=%s ai_concepts=%s",
            flags.use_redis, flags.use_razorpay, flags.enable_ai_concepts,
        )
        logger.info(
            "Image tiers: %s → %s → placeholder",
            settings.primary_image_model, settings.secondary_image_model,
        )

    # ── Shutdown ─────────────────────────────────────────────────
    @app.on_event("shutdown")
    async def on_shutdown():
        from .services.payments import close_client
        await close_client()
        await close_redis()
        logger.info("theIshop shut down")

    # ── Routes ───────────────────────────────────────────────────
    app.include_router(router)

    return app
