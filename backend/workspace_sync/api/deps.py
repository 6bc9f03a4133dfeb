"""FastAPI dependency injection — auth & services."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from workspace_sync.config import settings
from workspace_sync.database import get_db
from workspace_sync.models.user import User
from workspace_sync.services import get_sync_service, get_workspace_service
from workspace_sync.services.sync_service import SyncService
from workspace_sync.services.workspace_service import WorkspaceService

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(
    description="JWT issued by the external identity provider; `sub` is the user id.",
    auto_error=False,
)


def create_access_token(user_id: int, expires_minutes: int | None = None) -> str:
    """Issue a bearer token whose ``sub`` is the user id."""
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=expires_minutes or settings.token_expire_minutes
    )
    return jwt.encode(
        {"sub": str(user_id), "exp": expire},
        settings.secret_key,
        algorithm=settings.token_algorithm,
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Validate Bearer token and load the user it names."""
    token = credentials.credentials if credentials else None
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No authentication token provided",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.token_algorithm],
        )
        user_id = int(payload.get("sub") or 0)
    except (JWTError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    user = await db.get(User, user_id) if user_id else None
    if not user:
        logger.debug("Token for unknown user %s rejected", user_id)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown user",
        )
    return user


def workspace_service() -> WorkspaceService:
    return get_workspace_service()


def sync_service() -> SyncService:
    return get_sync_service()
