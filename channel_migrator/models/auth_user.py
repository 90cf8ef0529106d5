"""Identity-provider user table (``auth.users``)."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from channel_migrator.models.base import Base, JSONType


class AuthUser(Base):
    """Auth user row.

    The id is generated by the migration, never by the database, so it is
    known before any dependent row is written.
    """

    __tablename__ = "users"
    __table_args__ = {"schema": "auth"}

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)
    instance_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)
    aud: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    encrypted_password: Mapped[str | None] = mapped_column(Text, nullable=True)

    email_confirmed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_sign_in_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # {"provider": "google"} etc.
    raw_app_meta_data: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    raw_user_meta_data: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)

    confirmation_token: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    recovery_token: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    email_change_token_new: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    email_change: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    is_super_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<AuthUser {self.id} ({self.email})>"
