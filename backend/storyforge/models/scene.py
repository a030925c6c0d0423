from __future__ import annotations
"""Scene ORM models — composed shots, their asset assignments and render history."""

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storyforge.database import Base, Timestamp, new_id, utcnow


class RenderStatus(str, enum.Enum):
    """Scene render lifecycle: draft → rendering → completed | failed."""

    DRAFT = "draft"
    RENDERING = "rendering"
    COMPLETED = "completed"
    FAILED = "failed"


class Scene(Base):
    """A single storyboard frame composed from locked assets."""

    __tablename__ = "scenes"
    __table_args__ = {
        "mysql_charset": "utf8mb4",
        "mysql_collate": "utf8mb4_unicode_ci",
    }

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: new_id("SCN"),
    )
    project_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    script_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("scripts.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    scene_number: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Content fields
    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    mood: Mapped[str] = mapped_column(String(100), nullable=False, default="neutral")
    camera_angle: Mapped[str] = mapped_column(
        String(100), nullable=False, default="medium shot"
    )
    lighting: Mapped[str] = mapped_column(String(100), nullable=False, default="natural")

    # Render output
    render_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=RenderStatus.DRAFT.value
    )
    rendered_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    render_metadata: Mapped[Optional[dict]] = mapped_column(
        JSON, nullable=True, default=dict
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        Timestamp, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        Timestamp, default=utcnow, onupdate=utcnow
    )

    # Relationships
    project = relationship("Project", back_populates="scenes")
    asset_links = relationship(
        "SceneAsset", back_populates="scene", cascade="all, delete-orphan"
    )
    versions = relationship(
        "SceneVersion",
        back_populates="scene",
        cascade="all, delete-orphan",
        order_by="SceneVersion.version.desc()",
    )


class SceneAsset(Base):
    """Join row assigning an asset to a scene with a compositional role."""

    __tablename__ = "scene_assets"
    __table_args__ = {
        "mysql_charset": "utf8mb4",
        "mysql_collate": "utf8mb4_unicode_ci",
    }

    scene_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("scenes.id", ondelete="CASCADE"),
        primary_key=True,
    )
    asset_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("assets.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    role: Mapped[str] = mapped_column(String(50), nullable=False, default="primary")
    position_hint: Mapped[str] = mapped_column(String(50), nullable=False, default="center")

    # Relationships
    scene = relationship("Scene", back_populates="asset_links")
    asset = relationship("Asset", back_populates="scene_links")


class SceneVersion(Base):
    """One successful render of a scene."""

    __tablename__ = "scene_versions"
    __table_args__ = {
        "mysql_charset": "utf8mb4",
        "mysql_collate": "utf8mb4_unicode_ci",
    }

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: new_id("SV"),
    )
    scene_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("scenes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    rendered_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    render_metadata: Mapped[Optional[dict]] = mapped_column(
        JSON, nullable=True, default=dict
    )
    created_at: Mapped[datetime] = mapped_column(
        Timestamp, default=utcnow
    )

    # Relationships
    scene = relationship("Scene", back_populates="versions")
