"""
Authentication API endpoints.

WHAT: Login, logout and current-user routes, plus user management: the
first administrator bootstraps a fresh deployment, later accounts are
created and deactivated by admins.

WHY: Every calculator and proposal route requires a bearer token. Sellers
log in with email and password; logout blacklists the token in Redis so it
cannot be replayed until it expires.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from pricing_api.core.auth import (
    hash_password,
    verify_password,
    create_access_token,
    blacklist_token,
)
from pricing_api.core.deps import get_current_user, require_admin, security
from pricing_api.core.exceptions import (
    AuthenticationError,
    ResourceAlreadyExistsError,
    ResourceNotFoundError,
    ValidationError,
)
from pricing_api.core.config import settings
from pricing_api.db.session import get_db
from pricing_api.dao.user import UserDAO
from pricing_api.models.user import User, UserRole
from pricing_api.schemas.auth import (
    FirstAdminRequest,
    LoginRequest,
    TokenResponse,
    UserResponse,
    LogoutResponse,
    UserCreateRequest,
)


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post(
    "/login",
    response_model=TokenResponse,
    status_code=status.HTTP_200_OK,
    summary="User login",
    description="Authenticate with email and password, receive JWT access token",
)
async def login(
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> TokenResponse:
    """
    Authenticate user and return JWT access token.

    Security:
    - Passwords are compared with bcrypt (constant time)
    - Generic error messages prevent user enumeration

    Raises:
        AuthenticationError (401): If credentials are invalid
    """
    user = await UserDAO(db).get_by_email(credentials.email)

    # WHY: Same message whether the email or the password is wrong
    if not user or not verify_password(credentials.password, user.hashed_password):
        logger.warning(f"Failed login attempt for {credentials.email}")
        raise AuthenticationError(message="Invalid email or password")

    if not user.is_active:
        logger.warning(f"Login attempt on inactive account {user.id}")
        raise AuthenticationError(message="Account is inactive", user_id=user.id)

    access_token = create_access_token(
        {
            "user_id": user.id,
            "role": user.role.value,
            "email": user.email,
        }
    )
    logger.info(f"User {user.id} logged in")

    return TokenResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in=settings.JWT_EXPIRATION_MINUTES * 60,
        user=UserResponse.model_validate(user),
    )


@router.post(
    "/logout",
    response_model=LogoutResponse,
    status_code=status.HTTP_200_OK,
    summary="Logout user",
    description="Blacklist current token to prevent further use",
)
async def logout(
    current_user: User = Depends(get_current_user),
    credentials=Depends(security),
) -> LogoutResponse:
    """
    Logout user by blacklisting their token.

    WHY: JWT tokens are stateless and can't be "deleted". The blacklist
    entry lives in Redis for the remaining lifetime of the token.
    """
    await blacklist_token(credentials.credentials, current_user.id)
    logger.info(f"User {current_user.id} logged out")
    return LogoutResponse(message="Successfully logged out")


@router.get(
    "/me",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="Get current user",
    description="Get information about the currently authenticated user",
)
async def get_current_user_info(
    current_user: User = Depends(get_current_user),
) -> UserResponse:
    """Profile of the authenticated user; the role drives which tables the UI lets them edit."""
    return UserResponse.model_validate(current_user)


@router.post(
    "/first-admin",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create first administrator",
    description="Create the initial admin account; only allowed while no admin exists",
)
async def create_first_admin(
    data: FirstAdminRequest,
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """
    Bootstrap the first administrator.

    WHY: Every other route needs a token, so a new deployment would have no
    way in. The endpoint closes itself as soon as one admin exists.

    Raises:
        ResourceAlreadyExistsError (409): If an administrator already exists
            or the email is taken
    """
    dao = UserDAO(db)
    if await dao.exists(role=UserRole.ADMIN):
        raise ResourceAlreadyExistsError(
            message="An administrator already exists",
            resource_type="User",
        )

    user = await dao.create_user(
        email=data.email,
        hashed_password=hash_password(data.password),
        name=data.name,
        role=UserRole.ADMIN,
    )
    logger.info(f"First administrator {user.id} created")
    return UserResponse.model_validate(user)


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
    description="Create a seller, director or admin account (admin only)",
)
async def create_user(
    data: UserCreateRequest,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """
    Raises:
        AuthorizationError (403): If the caller is not an admin
        ResourceAlreadyExistsError (409): If the email is taken
    """
    user = await UserDAO(db).create_user(
        email=data.email,
        hashed_password=hash_password(data.password),
        name=data.name,
        role=data.role,
    )
    logger.info(f"User {user.id} ({user.role.value}) created by admin {current_user.id}")
    return UserResponse.model_validate(user)


@router.delete(
    "/users/{user_id}",
    response_model=UserResponse,
    summary="Deactivate user",
    description="Deactivate an account; its proposals are kept (admin only)",
)
async def deactivate_user(
    user_id: int,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """
    Raises:
        ValidationError (400): If an admin tries to deactivate themselves
        ResourceNotFoundError (404): If the user doesn't exist
    """
    if user_id == current_user.id:
        raise ValidationError(message="Cannot deactivate your own account", user_id=user_id)

    user = await UserDAO(db).deactivate_user(user_id)
    if not user:
        raise ResourceNotFoundError(
            message="User not found",
            resource_type="User",
            resource_id=user_id,
        )

    logger.info(f"User {user_id} deactivated by admin {current_user.id}")
    return UserResponse.model_validate(user)
