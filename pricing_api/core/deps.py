"""
FastAPI dependencies for authentication and authorization.

WHY: Every calculator and proposal route needs the same bearer-token
check. Dependencies keep that logic in one place and let routes declare
the role they require.
"""

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from pricing_api.core.auth import verify_token, is_token_blacklisted
from pricing_api.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    TokenExpiredError,
    TokenInvalidError,
)
from pricing_api.db.session import get_db
from pricing_api.models.user import User, UserRole
from pricing_api.dao.user import UserDAO


# HTTP Bearer token security scheme
# Format: "Authorization: Bearer <token>"
security = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Get current authenticated user from JWT token.

    This dependency:
    1. Verifies token signature and expiration
    2. Checks if token is blacklisted (logged out)
    3. Fetches the user and ensures it is still active

    Args:
        credentials: JWT token from Authorization header
        db: Database session

    Returns:
        Authenticated User instance

    Raises:
        AuthenticationError: If token is invalid, expired, or user not found
    """
    token = credentials.credentials

    try:
        payload = verify_token(token)
    except (TokenExpiredError, TokenInvalidError) as e:
        raise AuthenticationError(
            message=str(e),
            status_code=e.status_code,
        )

    if await is_token_blacklisted(token):
        raise AuthenticationError(
            message="Token has been revoked",
            reason="logged_out",
        )

    user_id = payload.get("user_id")
    if not user_id:
        raise AuthenticationError(
            message="Invalid token: missing user_id",
        )

    # WHY: Role in the token might be stale; always fetch current data
    user_dao = UserDAO(db)
    user = await user_dao.get_by_id(user_id)

    if not user:
        raise AuthenticationError(
            message="User not found",
            user_id=user_id,
        )

    if not user.is_active:
        raise AuthenticationError(
            message="User account is inactive",
            user_id=user_id,
        )

    return user


def require_role(*allowed_roles: UserRole):
    """
    Factory function to create a role requirement dependency.

    Usage:
        @router.put("/prices")
        async def edit(user: User = Depends(require_role(UserRole.ADMIN, UserRole.DIRECTOR))):
            ...

    Args:
        allowed_roles: Roles that may call the route

    Returns:
        Dependency function that checks the current user's role
    """

    async def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed_roles:
            raise AuthorizationError(
                message=f"{' or '.join(r.value for r in allowed_roles)} access required",
                user_id=current_user.id,
                user_role=current_user.role.value,
            )
        return current_user

    return role_checker


async def require_admin(
    current_user: User = Depends(get_current_user),
) -> User:
    """
    Require user to have the admin role.

    WHY: Price tables and commission tables are shared by every seller;
    only admins may change them.

    Raises:
        AuthorizationError: If user is not an admin
    """
    if current_user.role != UserRole.ADMIN:
        raise AuthorizationError(
            message="Admin access required",
            user_id=current_user.id,
            user_role=current_user.role.value,
            required_role=UserRole.ADMIN.value,
        )

    return current_user
