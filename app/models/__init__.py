"""init file for models module."""
from app.models.types import NonEscapedJSON
from app.models.accounts import AdminUser, GeneralUser
from app.models.menus import Menu, AdminMenuPermission
from app.models.shops import Shop, ShopOwner, Tag
from app.models.associations import shop_tags
from app.models.submissions import UserSubmission, AuditLog
from app.models.instagram import InstagramCredential, InstagramHashtag


__all__ = [
    "NonEscapedJSON",
    "AdminUser",
    "GeneralUser",
    "Menu",
    "AdminMenuPermission",
    "Shop",
    "ShopOwner",
    "Tag",
    "shop_tags",
    "UserSubmission",
    "AuditLog",
    "InstagramCredential",
    "InstagramHashtag",
]
