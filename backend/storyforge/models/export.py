from __future__ import annotations
"""Export ORM model — a generated storyboard bundle."""

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storyforge.database import Base, Timestamp, new_id, utcnow


class ExportType(str, enum.Enum):
    PDF = "pdf"
    IMAGE_SEQUENCE = "image_sequence"
    METADATA_BUNDLE = "metadata_bundle"


class ExportStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class Export(Base):
    """Record of an export request and the file it produced."""

    __tablename__ = "exports"
    __table_args__ = {
        "mysql_charset": "utf8mb4",
        "mysql_collate": "utf8mb4_unicode_ci",
    }

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: new_id("EXP"),
    )
    project_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type: Mapped[str] = mapped_column(String(30), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ExportStatus.PENDING.value
    )
    file_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        Timestamp, default=utcnow
    )

    # Relationships
    project = relationship("Project", back_populates="exports")
