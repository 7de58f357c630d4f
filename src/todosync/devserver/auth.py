from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .repositories import UserRepository

_security = HTTPBearer(auto_error=False)


def get_user_repository(request: Request) -> UserRepository:
    return request.app.state.users


# PUBLIC_INTERFACE
async def require_user(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(_security),
    users: UserRepository = Depends(get_user_repository),
) -> Dict[str, Any]:
    """
    Resolve the bearer token to the calling user.

    Raises:
        HTTPException(401) if the Authorization header is missing, not a bearer
        credential, or carries an unknown token.
    """
    if creds is None or not creds.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = users.user_for_token(creds.credentials)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
