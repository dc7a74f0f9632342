"""SQLAlchemy models for the revocation ledger and registered clients."""

from typing import Any

from sqlalchemy import JSON, BigInteger, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from msauth.db.engine import StoreBase


class RevokedTokenEntity(StoreBase):
    """One revocation ledger entry."""

    __tablename__ = "revoked_tokens"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    jti: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    exp: Mapped[int] = mapped_column(BigInteger, nullable=False)
    extra: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)


class RegisteredClientEntity(StoreBase):
    """Downstream consumer receiving snapshot pushes."""

    __tablename__ = "registered_clients"

    name: Mapped[str] = mapped_column(String(255), primary_key=True)
    url: Mapped[str] = mapped_column(String(2048), nullable=False)
