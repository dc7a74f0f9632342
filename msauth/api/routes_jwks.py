"""Public JWKS endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response

from msauth.api.deps import get_authority
from msauth.authority.service import Authority
from msauth.crypto.types import JWKSResponse

router = APIRouter()


@router.get("/.well-known/jwks.json", response_model_exclude_none=True)
async def jwks(
    response: Response,
    authority: Annotated[Authority, Depends(get_authority)],
) -> JWKSResponse:
    """JSON Web Key Set endpoint."""
    max_age = authority.settings.jwks_max_age
    response.headers["Cache-Control"] = f"public, max-age={max_age}"
    return authority.jwks()
