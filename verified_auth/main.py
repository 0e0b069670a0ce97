import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from verified_auth.infrastructure.db.pool import close_pool, open_pool
from verified_auth.infrastructure.redis_cache.pool import close_redis, get_redis
from verified_auth.logging import setup_logging
from verified_auth.presentation.api import api
from verified_auth.presentation.routes.health import router as health_router
from verified_auth.settings import Settings, get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    await open_pool(settings)
    get_redis(settings)
    logger.info("api started", extra={"env": settings.app_env})
    try:
        yield
    finally:
        await close_redis()
        await close_pool()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level)
    app = FastAPI(title="Verified Auth API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.include_router(health_router)
    app.include_router(api)
    return app


app = create_app()
