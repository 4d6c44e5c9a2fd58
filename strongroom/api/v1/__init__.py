"""API v1 routes."""

from fastapi import APIRouter

from strongroom.api.v1 import auth, files, health, roles, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(roles.router, prefix="/roles", tags=["roles"])
router.include_router(files.router, prefix="/files", tags=["files"])
