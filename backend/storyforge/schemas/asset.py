from __future__ import annotations
"""Pydantic v2 schemas for Asset, AssetVersion and AssetVariant models."""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator

from storyforge.models.asset import AssetType

# ORM rows keep JSON metadata in ``meta``; clients see ``metadata``.
_METADATA_ALIAS = AliasChoices("meta", "metadata")


class AssetCreate(BaseModel):
    """Schema for creating an asset."""

    name: str = Field(..., min_length=1, max_length=255)
    type: AssetType
    description: str | None = None
    visual_prompt: str | None = None
    negative_prompt: str | None = None
    seed: int | None = Field(None, ge=0)
    metadata: dict[str, Any] | None = None


class AssetUpdate(BaseModel):
    """Schema for editing an unlocked asset."""

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    visual_prompt: str | None = None
    negative_prompt: str | None = None
    metadata: dict[str, Any] | None = None


class AssetGenerateRequest(BaseModel):
    """Regenerate request; ``variants > 1`` produces candidate images instead."""

    variants: int = Field(0, ge=0)
    seed: int | None = Field(None, ge=0)


class VariantSelectRequest(BaseModel):
    variant_id: str | None = None


class GenerationAccepted(BaseModel):
    status: str
    message: str


class AssetRead(BaseModel):
    """Schema for reading an asset."""

    id: str
    project_id: str
    name: str
    type: str
    description: str
    visual_prompt: str
    negative_prompt: str
    seed: int | None = None
    version: int
    locked: bool
    thumbnail_url: str | None = None
    generation_status: str
    metadata: dict[str, Any] = Field(default_factory=dict, validation_alias=_METADATA_ALIAS)
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("metadata", mode="before")
    @classmethod
    def _null_metadata(cls, v):
        return v or {}


class AssetListItem(AssetRead):
    """Asset row in a listing, with the number of scenes referencing it."""

    usage_count: int = 0


class AssetVersionRead(BaseModel):
    id: str
    asset_id: str
    version: int
    visual_prompt: str
    negative_prompt: str
    seed: int | None = None
    thumbnail_url: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict, validation_alias=_METADATA_ALIAS)
    created_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("metadata", mode="before")
    @classmethod
    def _null_metadata(cls, v):
        return v or {}


class AssetVariantRead(BaseModel):
    id: str
    asset_id: str
    variant_index: int
    seed: int | None = None
    thumbnail_url: str | None = None
    selected: bool
    created_at: datetime

    model_config = {"from_attributes": True}
