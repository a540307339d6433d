"""
JWT authentication and password hashing utilities.

WHY: The calculators call the API with a bearer token issued at login.
This module provides:
1. Password hashing with bcrypt
2. JWT token generation and verification
3. Token blacklist for logout
"""

from datetime import datetime, timedelta
from typing import Dict, Any, Optional
from jose import jwt, JWTError
from passlib.context import CryptContext
import redis.asyncio as aioredis

from pricing_api.core.config import settings
from pricing_api.core.exceptions import (
    TokenExpiredError,
    TokenInvalidError,
)


pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# Redis connection for token blacklist
# WHY: Lazily created and reused across requests
_redis_client: Optional[aioredis.Redis] = None


async def get_redis() -> aioredis.Redis:
    """
    Get Redis client for token blacklist.

    Returns:
        Redis client instance
    """
    global _redis_client
    if _redis_client is None:
        _redis_client = await aioredis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
        )
    return _redis_client


# ============================================================================
# Password Hashing
# ============================================================================


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Hashed password (includes salt and cost factor)
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its hash.

    Args:
        plain_password: Password provided by user
        hashed_password: Hashed password from database

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)


# ============================================================================
# JWT Token Management
# ============================================================================


def create_access_token(
    data: Dict[str, Any],
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a JWT access token.

    Token includes:
    - User data (user_id, role, email)
    - exp: Expiration time (default: JWT_EXPIRATION_MINUTES)
    - iat: Issued at time
    - nbf: Not before time

    Args:
        data: User data to encode in token
        expires_delta: Optional custom expiration time

    Returns:
        JWT token string

    Example:
        >>> token = create_access_token({"user_id": 1, "role": "admin"})
        >>> verify_token(token)["user_id"]
        1
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.JWT_EXPIRATION_MINUTES)

    to_encode.update(
        {
            "exp": expire,
            "iat": datetime.utcnow(),
            "nbf": datetime.utcnow(),
        }
    )

    return jwt.encode(
        to_encode,
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )


def verify_token(token: str) -> Dict[str, Any]:
    """
    Verify and decode a JWT token.

    Args:
        token: JWT token string

    Returns:
        Decoded token payload with user data

    Raises:
        TokenExpiredError: If token has expired
        TokenInvalidError: If token is malformed or signature invalid
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )

    except jwt.ExpiredSignatureError:
        # WHY: Separate exception lets the frontend send the user back to login
        raise TokenExpiredError(message="Token has expired")

    except JWTError as e:
        raise TokenInvalidError(
            message="Invalid token",
            error=str(e),
        )


# ============================================================================
# Token Blacklist (Logout)
# ============================================================================


async def blacklist_token(
    token: str,
    user_id: int,
    ttl_seconds: Optional[int] = None,
) -> None:
    """
    Add a token to the blacklist (for logout).

    WHY: JWT tokens are stateless and can't be "deleted". Blacklisting
    prevents a token from being used after logout until it expires.

    Args:
        token: JWT token to blacklist
        user_id: User ID stored as the blacklist value
        ttl_seconds: Optional TTL (defaults to the token's remaining lifetime)
    """
    redis = await get_redis()

    if ttl_seconds is None:
        try:
            payload = jwt.decode(
                token,
                settings.JWT_SECRET,
                algorithms=[settings.JWT_ALGORITHM],
                options={"verify_signature": False, "verify_exp": False},
            )
            exp_timestamp = payload.get("exp")
            if exp_timestamp:
                ttl_seconds = max(
                    int(exp_timestamp - datetime.utcnow().timestamp()),
                    0,
                )
            else:
                ttl_seconds = settings.JWT_EXPIRATION_MINUTES * 60
        except JWTError:
            ttl_seconds = settings.JWT_EXPIRATION_MINUTES * 60

    # WHY: Redis expires the entry on its own once the token would be dead anyway
    blacklist_key = f"blacklist:token:{token}"
    await redis.setex(
        blacklist_key,
        max(ttl_seconds, 1),
        str(user_id),
    )


async def is_token_blacklisted(token: str) -> bool:
    """
    Check if a token is blacklisted.

    Args:
        token: JWT token to check

    Returns:
        True if token is blacklisted, False otherwise
    """
    redis = await get_redis()
    blacklist_key = f"blacklist:token:{token}"
    exists = await redis.exists(blacklist_key)
    return exists > 0
