from __future__ import annotations
"""Pydantic v2 schemas for Export model."""

from datetime import datetime

from pydantic import BaseModel

from storyforge.models.export import ExportType


class ExportCreate(BaseModel):
    type: ExportType


class ExportRead(BaseModel):
    id: str
    project_id: str
    type: str
    status: str
    file_url: str | None = None
    error_message: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}
