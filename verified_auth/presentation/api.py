from fastapi import APIRouter

from verified_auth.presentation.routers.v1.auth import router as auth_router

api = APIRouter(prefix="/v1")
api.include_router(auth_router)
