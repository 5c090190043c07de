"""FastAPI dependencies for authentication, database and lifecycle services."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from src.database import get_db
from src.models.user import User
from src.services.auth import decode_access_token
from src.services.lifecycle import LifecycleEngine
from src.services.trash_query import TrashQueryService

security = HTTPBearer()


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Get the current authenticated user from JWT token."""
    payload = decode_access_token(credentials.credentials)
    user_id = payload.get("sub") if payload else None

    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = db.query(User).filter(User.id == int(user_id)).first()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


def get_lifecycle_engine(
    db: Annotated[Session, Depends(get_db)],
) -> LifecycleEngine:
    """Get lifecycle engine with default collaborators."""
    return LifecycleEngine(db)


def get_trash_query_service(
    db: Annotated[Session, Depends(get_db)],
) -> TrashQueryService:
    """Get trash query service with default collaborators."""
    return TrashQueryService(db)
