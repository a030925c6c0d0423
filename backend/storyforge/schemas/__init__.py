"""Pydantic v2 schemas package."""

from storyforge.schemas.asset import (
    AssetCreate,
    AssetGenerateRequest,
    AssetListItem,
    AssetRead,
    AssetUpdate,
    AssetVariantRead,
    AssetVersionRead,
    GenerationAccepted,
    VariantSelectRequest,
)
from storyforge.schemas.scene import (
    AssetDetail,
    SceneAssetRead,
    SceneAssetsResult,
    SceneAssetsUpdate,
    SceneCreate,
    SceneDetail,
    SceneRead,
    SceneUpdate,
    SceneVersionRead,
    SceneWithAssets,
)
from storyforge.schemas.script import (
    CompileResult,
    ScriptCreate,
    ScriptDetail,
    ScriptRead,
    ScriptUpdate,
)
from storyforge.schemas.project import (
    ProjectCreate,
    ProjectRead,
    ProjectStats,
    ProjectUpdate,
)
from storyforge.schemas.export import ExportCreate, ExportRead

__all__ = [
    "AssetDetail",
    "AssetCreate",
    "AssetGenerateRequest",
    "AssetListItem",
    "AssetRead",
    "AssetUpdate",
    "AssetVariantRead",
    "AssetVersionRead",
    "GenerationAccepted",
    "VariantSelectRequest",
    "SceneAssetRead",
    "SceneAssetsResult",
    "SceneAssetsUpdate",
    "SceneCreate",
    "SceneDetail",
    "SceneRead",
    "SceneUpdate",
    "SceneVersionRead",
    "SceneWithAssets",
    "CompileResult",
    "ScriptCreate",
    "ScriptDetail",
    "ScriptRead",
    "ScriptUpdate",
    "ProjectCreate",
    "ProjectRead",
    "ProjectStats",
    "ProjectUpdate",
    "ExportCreate",
    "ExportRead",
]
