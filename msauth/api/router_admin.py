"""Administrative endpoints over the authority's operations."""

from typing import Annotated

from fastapi import APIRouter, Depends, Form, Response
from starlette.responses import JSONResponse

from msauth.api.deps import get_authority, require_admin_token
from msauth.api.schemas import (
    ErrorResponse,
    RegisterClientPayload,
    RevocationListResponse,
)
from msauth.authority.service import Authority
from msauth.authority.types import RevocationEntry, Snapshot
from msauth.core.errors import (
    AuthError,
    KeyNotFound,
    StorageError,
    SyncError,
    ValidationError,
)
from msauth.crypto.types import JWKSResponse

router = APIRouter(prefix="/admin", tags=["admin"])

AuthorityDep = Annotated[Authority, Depends(get_authority)]
AdminToken = Annotated[str, Depends(require_admin_token)]

HTTP_NOT_FOUND = 404
HTTP_UNPROCESSABLE = 422
HTTP_BAD_GATEWAY = 502
HTTP_UNAVAILABLE = 503


def _error(exc: AuthError, status_code: int, **extra: object) -> JSONResponse:
    body = ErrorResponse(error=exc.code, error_description=exc.message).model_dump()
    body.update(extra)
    return JSONResponse(body, status_code=status_code)


@router.post("/clients", response_model=None)
async def register_client(
    payload: RegisterClientPayload,
    authority: AuthorityDep,
    _token: AdminToken,
) -> Snapshot | JSONResponse:
    """POST /admin/clients -- register a consumer, return its snapshot."""
    try:
        snapshot = await authority.register_client(payload.name, payload.url)
    except ValidationError as exc:
        return _error(exc, HTTP_UNPROCESSABLE)
    except StorageError as exc:
        return _error(exc, HTTP_UNAVAILABLE)
    return snapshot


@router.post("/keys/rotate", response_model=None)
async def rotate_keys(
    authority: AuthorityDep,
    _token: AdminToken,
) -> JWKSResponse | JSONResponse:
    """POST /admin/keys/rotate -- rotate now and sync clients."""
    try:
        return await authority.rotate()
    except SyncError as exc:
        return _error(exc, HTTP_BAD_GATEWAY, failed=sorted(exc.failures))
    except StorageError as exc:
        return _error(exc, HTTP_UNAVAILABLE)


@router.delete("/keys/{kid}", response_model=None)
async def revoke_key(
    kid: str,
    authority: AuthorityDep,
    _token: AdminToken,
) -> Response:
    """DELETE /admin/keys/{kid} -- retire one key."""
    try:
        await authority.revoke_key(kid)
    except KeyNotFound as exc:
        return _error(exc, HTTP_NOT_FOUND)
    except StorageError as exc:
        return _error(exc, HTTP_UNAVAILABLE)
    return Response(status_code=204)


@router.post("/keys/reset", response_model=None)
async def reset_keys(
    authority: AuthorityDep,
    _token: AdminToken,
) -> JWKSResponse | JSONResponse:
    """POST /admin/keys/reset -- replace every key."""
    try:
        await authority.reset()
    except StorageError as exc:
        return _error(exc, HTTP_UNAVAILABLE)
    return authority.jwks()


@router.post("/tokens/revoke", response_model=None)
async def revoke_token(
    token: Annotated[str, Form()],
    authority: AuthorityDep,
    _token: AdminToken,
) -> RevocationEntry | JSONResponse:
    """POST /admin/tokens/revoke -- add a token to the revocation ledger."""
    try:
        return await authority.revoke_token(token)
    except ValidationError as exc:
        return _error(exc, HTTP_UNPROCESSABLE)
    except StorageError as exc:
        return _error(exc, HTTP_UNAVAILABLE)


@router.get("/revocations")
async def list_revocations(
    authority: AuthorityDep,
    _token: AdminToken,
) -> RevocationListResponse:
    """GET /admin/revocations -- current revocation ledger."""
    return RevocationListResponse(entries=authority.revocation_list())
