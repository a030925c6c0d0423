from __future__ import annotations
"""Pydantic v2 schemas for Scene, SceneAsset and SceneVersion models."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from storyforge.schemas.asset import AssetRead, AssetVariantRead, AssetVersionRead


class SceneCreate(BaseModel):
    """Schema for creating a single scene. scene_number defaults to the next free one."""

    title: str | None = Field(None, max_length=255)
    description: str | None = None
    scene_number: int | None = Field(None, ge=1)
    mood: str | None = Field(None, max_length=100)
    camera_angle: str | None = Field(None, max_length=100)
    lighting: str | None = Field(None, max_length=100)
    script_id: str | None = None


class SceneUpdate(BaseModel):
    """Schema for updating a scene."""

    title: str | None = Field(None, max_length=255)
    description: str | None = None
    mood: str | None = Field(None, max_length=100)
    camera_angle: str | None = Field(None, max_length=100)
    lighting: str | None = Field(None, max_length=100)
    scene_number: int | None = Field(None, ge=1)


class SceneAssetAssignment(BaseModel):
    asset_id: str
    role: str | None = Field(None, max_length=50)
    position_hint: str | None = Field(None, max_length=50)


class SceneAssetsUpdate(BaseModel):
    """Full replacement of a scene's asset assignments."""

    assets: list[SceneAssetAssignment]


class SceneRead(BaseModel):
    """Schema for reading a scene."""

    id: str
    project_id: str
    script_id: str | None = None
    scene_number: int
    title: str
    description: str
    mood: str
    camera_angle: str
    lighting: str
    render_status: str
    rendered_url: str | None = None
    render_metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("render_metadata", mode="before")
    @classmethod
    def _null_metadata(cls, v):
        return v or {}


class SceneAssetRead(AssetRead):
    """An assigned asset with its role in the scene."""

    role: str
    position_hint: str


class SceneVersionRead(BaseModel):
    id: str
    scene_id: str
    version: int
    rendered_url: str | None = None
    render_metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("render_metadata", mode="before")
    @classmethod
    def _null_metadata(cls, v):
        return v or {}


class SceneWithAssets(SceneRead):
    assets: list[SceneAssetRead] = []


class SceneDetail(SceneWithAssets):
    versions: list[SceneVersionRead] = []


class SceneAssetsResult(BaseModel):
    assets: list[SceneAssetRead]


class AssetDetail(AssetRead):
    """Asset with its history, current variants and the scenes that use it."""

    versions: list[AssetVersionRead] = []
    variants: list[AssetVariantRead] = []
    used_in_scenes: list[SceneRead] = []
