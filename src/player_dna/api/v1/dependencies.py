"""Shared API dependencies for authentication and the registry facade."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from player_dna.core.security import decode_access_token
from player_dna.db.session import get_db
from player_dna.services.registry import Registry

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer()

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_registry(db: SessionDep) -> Registry:
    """Bind a registry facade to the request's database session."""
    return Registry(db)


def get_current_caller(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
) -> str:
    """Resolve the caller address from the bearer token.

    Raises:
        HTTPException: If the token is invalid or expired
    """
    try:
        return decode_access_token(credentials.credentials)
    except ValueError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from err


RegistryDep = Annotated[Registry, Depends(get_registry)]
CurrentCallerDep = Annotated[str, Depends(get_current_caller)]
