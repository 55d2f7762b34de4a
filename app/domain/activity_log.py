"""SQLAlchemy ORM model for the vendor activity log."""

from __future__ import annotations

import uuid
from typing import Any, Optional

from sqlalchemy import JSON, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.domain.mixins import CreatedAtMixin


class VendorActivityLog(Base, CreatedAtMixin):
    __tablename__ = "vendor_activity_log"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    vendor_request_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("vendor_requests.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Who
    performed_by: Mapped[str] = mapped_column(String(100), nullable=False)

    # What
    activity_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Change data
    old_status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    new_status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    details: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)

    # No updated_at / deleted_at: log rows are immutable
