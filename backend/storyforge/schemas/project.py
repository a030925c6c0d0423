from __future__ import annotations
"""Pydantic v2 schemas for Project model."""

from datetime import datetime

from pydantic import BaseModel, Field

from storyforge.models.project import ProjectStatus
from storyforge.schemas.asset import AssetRead
from storyforge.schemas.scene import SceneRead


class ProjectCreate(BaseModel):
    """Schema for creating a new project. Omitted settings use configured defaults."""

    name: str = Field(..., min_length=1, max_length=255)
    visual_style: str | None = Field(None, max_length=255)
    base_model: str | None = Field(None, max_length=100)
    default_sampler: str | None = Field(None, max_length=100)


class ProjectUpdate(BaseModel):
    """Schema for updating a project's settings."""

    name: str | None = Field(None, min_length=1, max_length=255)
    visual_style: str | None = Field(None, max_length=255)
    base_model: str | None = Field(None, max_length=100)
    default_sampler: str | None = Field(None, max_length=100)
    status: ProjectStatus | None = None


class ProjectRead(BaseModel):
    """Schema for reading a project."""

    id: str
    name: str
    visual_style: str
    base_model: str
    default_sampler: str
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AssetTypeCount(BaseModel):
    type: str
    count: int


class ProjectStats(BaseModel):
    """Dashboard counters; field names match the frontend contract."""

    assetCount: int
    sceneCount: int
    scriptCount: int
    lockedAssets: int
    renderedScenes: int
    assetsByType: list[AssetTypeCount]
    recentAssets: list[AssetRead]
    recentScenes: list[SceneRead]
