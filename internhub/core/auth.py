"""
Authentication Utility - JWT handling.

Tokens are issued by the identity service (registration, passwords and
email verification live there); this module only verifies them and
resolves the acting user.

Provides:
- JWT token creation/verification
- FastAPI dependencies for protected routes
"""

from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from internhub.api.dependencies import get_store
from internhub.core.config import get_settings
from internhub.core.errors import NotFoundError
from internhub.models import User
from internhub.services.mongo_service import MongoStore

# Bearer token extractor
bearer_scheme = HTTPBearer()


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token for `user_id`."""
    settings = get_settings()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode = {"sub": user_id, "exp": expire}
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    store: MongoStore = Depends(get_store),
) -> User:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @router.get("/protected")
        async def route(user: User = Depends(get_current_user)):
            return user
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(credentials.credentials)
    if not payload:
        raise credentials_exception

    user_id = payload.get("sub")
    if not user_id:
        raise credentials_exception

    try:
        user = store.users.get_by_id(user_id)
    except NotFoundError:
        user = None

    if not user:
        raise credentials_exception

    return user


async def get_current_student(user: User = Depends(get_current_user)) -> User:
    """Dependency - Require student role."""
    if not user.is_student:
        raise HTTPException(status_code=403, detail="Students only")
    return user


async def get_current_professor(user: User = Depends(get_current_user)) -> User:
    """Dependency - Require professor role."""
    if not user.is_professor:
        raise HTTPException(status_code=403, detail="Professors only")
    return user
