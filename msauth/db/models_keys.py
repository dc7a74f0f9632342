"""SQLAlchemy model for JWT signing keys."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from msauth.db.engine import StoreBase


class SigningKeyEntity(StoreBase):
    """Signing key in the ring; ``position`` keeps the oldest-first order."""

    __tablename__ = "signing_keys"

    kid: Mapped[str] = mapped_column(String(50), primary_key=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    algorithm: Mapped[str] = mapped_column(String(10), nullable=False)
    crv_or_size: Mapped[str] = mapped_column(String(10), nullable=False)
    alg: Mapped[str] = mapped_column(
        String(10), nullable=False, server_default="ES256"
    )
    private_key_pem: Mapped[str | None] = mapped_column(Text, nullable=True)
    public_key_pem: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
