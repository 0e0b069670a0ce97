import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from verified_auth.infrastructure.db.pool import ping_pool
from verified_auth.infrastructure.redis_cache.pool import ping_redis

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz():
    checks = {}
    for name, probe in (("postgres", ping_pool), ("redis", ping_redis)):
        try:
            checks[name] = await probe()
        except Exception as e:  # noqa: BLE001
            logger.warning("readiness probe failed", extra={"dependency": name, "error": str(e)})
            checks[name] = False
    status = 200 if all(checks.values()) else 503
    return JSONResponse(status_code=status, content={"ready": status == 200, "checks": checks})
