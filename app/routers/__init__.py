"""init file for routers module."""
from app.routers.admin_users import router as admin_users_router
from app.routers.auth import router as auth_router
from app.routers.instagram import admin_router as admin_instagram_router
from app.routers.menus import router as menus_router
from app.routers.shops import (
    admin_router as admin_shops_router,
    owner_router as owner_shops_router,
    router as shops_router,
)
from app.routers.submissions import (
    admin_router as admin_submissions_router,
    router as submissions_router,
)
from app.routers.tags import admin_router as admin_tags_router, router as tags_router

__all__ = [
    "admin_users_router",
    "auth_router",
    "admin_instagram_router",
    "menus_router",
    "admin_shops_router",
    "owner_shops_router",
    "shops_router",
    "admin_submissions_router",
    "submissions_router",
    "admin_tags_router",
    "tags_router",
]
