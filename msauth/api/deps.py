"""Request dependencies: the running authority and the admin bearer check."""

import secrets
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from msauth.authority.service import Authority

_bearer = HTTPBearer(description="MSAUTH_ADMIN_TOKEN")


def get_authority(request: Request) -> Authority:
    return request.app.state.authority


async def require_admin_token(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(_bearer)],
    authority: Annotated[Authority, Depends(get_authority)],
) -> str:
    """Admin routes stay closed until an admin token is configured."""
    configured = authority.settings.admin_token
    if not configured:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="admin API disabled",
        )
    if not secrets.compare_digest(credentials.credentials, configured):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid admin token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials
