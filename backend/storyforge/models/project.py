from __future__ import annotations
"""Project ORM model — style and model settings shared by a storyboard."""

import enum
from datetime import datetime

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storyforge.database import Base, Timestamp, new_id, utcnow


class ProjectStatus(str, enum.Enum):
    """Project lifecycle statuses."""

    ACTIVE = "active"
    ARCHIVED = "archived"


class Project(Base):
    """A storyboard project owning assets, scripts, scenes and exports."""

    __tablename__ = "projects"
    __table_args__ = {
        "mysql_charset": "utf8mb4",
        "mysql_collate": "utf8mb4_unicode_ci",
    }

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: new_id("PRJ"),
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    visual_style: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    base_model: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    default_sampler: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    status: Mapped[str] = mapped_column(
        String(50), nullable=False, default=ProjectStatus.ACTIVE.value
    )
    created_at: Mapped[datetime] = mapped_column(
        Timestamp, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        Timestamp, default=utcnow, onupdate=utcnow
    )

    # Relationships
    assets = relationship(
        "Asset", back_populates="project", cascade="all, delete-orphan"
    )
    scripts = relationship(
        "Script", back_populates="project", cascade="all, delete-orphan"
    )
    scenes = relationship(
        "Scene",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="Scene.scene_number",
    )
    exports = relationship(
        "Export", back_populates="project", cascade="all, delete-orphan"
    )
