"""ORM model package — registers all models with Base.metadata."""

from storyforge.models.project import Project, ProjectStatus
from storyforge.models.asset import (
    Asset,
    AssetType,
    AssetVariant,
    AssetVersion,
    GenerationStatus,
)
from storyforge.models.script import Script
from storyforge.models.scene import RenderStatus, Scene, SceneAsset, SceneVersion
from storyforge.models.export import Export, ExportStatus, ExportType

__all__ = [
    "Project",
    "ProjectStatus",
    "Asset",
    "AssetType",
    "AssetVariant",
    "AssetVersion",
    "GenerationStatus",
    "Script",
    "Scene",
    "SceneAsset",
    "SceneVersion",
    "RenderStatus",
    "Export",
    "ExportStatus",
    "ExportType",
]
