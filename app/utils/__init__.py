from .db import get_db
from .menus import build_menu_tree

__all__ = ["get_db", "build_menu_tree"]
