from fastapi import APIRouter

from .internal import router as internal_router
from .posts import router as posts_router

api_router = APIRouter()
api_router.include_router(posts_router, prefix="/posts", tags=["posts"])
api_router.include_router(internal_router, prefix="/internal", tags=["internal"])
