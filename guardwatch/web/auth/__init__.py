"""Authentication module."""

from .jwt import create_access_token, decode_token, TokenData
from .dependencies import (
    AuthContext,
    get_current_user,
    require_manager,
    CurrentUser,
    ManagerUser,
)

__all__ = [
    "create_access_token",
    "decode_token",
    "TokenData",
    "AuthContext",
    "get_current_user",
    "require_manager",
    "CurrentUser",
    "ManagerUser",
]
