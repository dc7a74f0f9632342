"""Request and response bodies for the administrative API."""

from pydantic import BaseModel

from msauth.authority.types import RevocationEntry


class RegisterClientPayload(BaseModel):
    """Request body for POST /admin/clients."""

    name: str
    url: str


class RevocationListResponse(BaseModel):
    """Response for GET /admin/revocations."""

    entries: list[RevocationEntry]


class ErrorResponse(BaseModel):
    """Error body shared by every admin route."""

    error: str
    error_description: str | None = None
