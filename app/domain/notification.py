"""SQLAlchemy ORM model for in-app notifications addressed to procurement users."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.domain.mixins import CreatedAtMixin


class Notification(Base, CreatedAtMixin):
    __tablename__ = "notifications"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    recipient_username: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    # NotificationType value
    type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    vendor_request_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("vendor_requests.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    action_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    read_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
