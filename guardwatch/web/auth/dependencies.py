"""FastAPI authentication dependencies."""

from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, status

from .jwt import decode_token, TokenData

# Roles allowed to change the camera and zone catalog
MANAGER_ROLES = ("admin", "supervisor")


class AuthContext:
    """The user a request acts for, decoded from the bearer token."""

    def __init__(self, token_data: TokenData):
        self.token_data = token_data

    @property
    def user_id(self) -> str:
        return self.token_data.user_id

    @property
    def role(self) -> str:
        return self.token_data.role

    @property
    def name(self) -> str:
        return self.token_data.name

    @property
    def is_manager(self) -> bool:
        return self.role in MANAGER_ROLES


def get_token_from_header(request: Request) -> Optional[str]:
    """Extract token from the Authorization: Bearer header."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


async def get_current_user(request: Request) -> AuthContext:
    """
    Get current authenticated user from the bearer token.

    This is the main authentication dependency for protected routes.

    Raises:
        HTTPException 401: If not authenticated or token invalid
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )

    token = get_token_from_header(request)
    if not token:
        raise credentials_exception

    token_data = decode_token(token)
    if not token_data or token_data.is_expired:
        raise credentials_exception

    return AuthContext(token_data)


async def require_manager(
    auth: AuthContext = Depends(get_current_user),
) -> AuthContext:
    """
    Require supervisor or admin role.

    Raises:
        HTTPException 403: If user is neither
    """
    if not auth.is_manager:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Supervisor access required",
        )
    return auth


# Type aliases for cleaner route signatures
CurrentUser = Annotated[AuthContext, Depends(get_current_user)]
ManagerUser = Annotated[AuthContext, Depends(require_manager)]
