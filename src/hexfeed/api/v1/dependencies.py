"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from hexfeed.core.security import decode_subject
from hexfeed.db.session import get_db
from hexfeed.models import User
from hexfeed.services.reputation import ReputationService
from hexfeed.services.reputation_cache import ReputationCache, get_reputation_cache

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer()

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def _credentials_error(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
    db: SessionDep,
) -> User:
    """Get the current authenticated user from JWT token.

    Args:
        credentials: HTTP Bearer token credentials
        db: Database session

    Returns:
        User object for the authenticated user

    Raises:
        HTTPException: If token is invalid or user not found
    """
    try:
        user_id = decode_subject(credentials.credentials)
    except JWTError as err:
        raise _credentials_error() from err

    if user_id is None:
        raise _credentials_error()

    user = db.get(User, user_id)
    if user is None:
        raise _credentials_error("User not found")
    return user


def get_reputation_service(db: SessionDep) -> ReputationService:
    """Return a reputation service bound to the request's session."""
    return ReputationService(db)


def get_reputation_cache_dep() -> ReputationCache:
    """Return the shared reputation summary cache."""
    return get_reputation_cache()


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]
ReputationServiceDep = Annotated[ReputationService, Depends(get_reputation_service)]
ReputationCacheDep = Annotated[ReputationCache, Depends(get_reputation_cache_dep)]
