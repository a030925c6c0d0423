from __future__ import annotations
"""Pydantic v2 schemas for Script model."""

from datetime import datetime

from pydantic import BaseModel, Field

from storyforge.schemas.scene import SceneRead


class ScriptCreate(BaseModel):
    """Schema for creating a script."""

    title: str = Field(..., min_length=1, max_length=255)
    content: str | None = None


class ScriptUpdate(BaseModel):
    """Schema for updating a script."""

    title: str | None = Field(None, min_length=1, max_length=255)
    content: str | None = None


class ScriptRead(BaseModel):
    """Schema for reading a script."""

    id: str
    project_id: str
    title: str
    content: str
    compiled: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ScriptDetail(ScriptRead):
    scenes: list[SceneRead] = []


class CompileResult(BaseModel):
    scenes: list[SceneRead]
    count: int
