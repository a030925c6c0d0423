from __future__ import annotations
"""Project CRUD and dashboard statistics endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storyforge.api.deps import get_project_or_404
from storyforge.config import get_settings
from storyforge.database import get_db
from storyforge.models.asset import Asset
from storyforge.models.project import Project, ProjectStatus
from storyforge.models.scene import RenderStatus, Scene
from storyforge.models.script import Script
from storyforge.schemas.asset import AssetRead
from storyforge.schemas.project import (
    AssetTypeCount,
    ProjectCreate,
    ProjectRead,
    ProjectStats,
    ProjectUpdate,
)
from storyforge.schemas.scene import SceneRead

router = APIRouter()
settings = get_settings()


@router.get("", response_model=list[ProjectRead])
async def list_projects(db: AsyncSession = Depends(get_db)):
    """List all projects ordered by creation date (newest first)."""
    result = await db.execute(
        select(Project).order_by(Project.created_at.desc())
    )
    return result.scalars().all()


@router.post("", response_model=ProjectRead, status_code=201)
async def create_project(data: ProjectCreate, db: AsyncSession = Depends(get_db)):
    """Create a project; unset style and model settings take the configured defaults."""
    project = Project(
        name=data.name,
        visual_style=data.visual_style or settings.DEFAULT_VISUAL_STYLE,
        base_model=data.base_model or settings.DEFAULT_BASE_MODEL,
        default_sampler=data.default_sampler or settings.DEFAULT_SAMPLER,
        status=ProjectStatus.ACTIVE.value,
    )
    db.add(project)
    await db.flush()
    await db.refresh(project)
    return project


@router.get("/{project_id}", response_model=ProjectRead)
async def get_project(project: Project = Depends(get_project_or_404)):
    """Get a project by ID."""
    return project


@router.patch("/{project_id}", response_model=ProjectRead)
async def update_project(
    data: ProjectUpdate,
    project: Project = Depends(get_project_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Update a project's name, style settings or status."""
    update_data = data.model_dump(exclude_unset=True, mode="json")
    for key, value in update_data.items():
        if value is not None:
            setattr(project, key, value)

    await db.flush()
    await db.refresh(project)
    return project


@router.delete("/{project_id}")
async def delete_project(
    project: Project = Depends(get_project_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Delete a project with its assets, scripts, scenes and exports."""
    await db.delete(project)
    return {"success": True}


@router.get("/{project_id}/stats", response_model=ProjectStats)
async def project_stats(
    project: Project = Depends(get_project_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Dashboard counters and the most recently touched assets and scenes."""

    async def _count(model, *conditions) -> int:
        result = await db.execute(
            select(func.count()).select_from(model)
            .where(model.project_id == project.id, *conditions)
        )
        return result.scalar_one()

    by_type = await db.execute(
        select(Asset.type, func.count())
        .where(Asset.project_id == project.id)
        .group_by(Asset.type)
        .order_by(Asset.type)
    )
    recent_assets = await db.execute(
        select(Asset).where(Asset.project_id == project.id)
        .order_by(Asset.updated_at.desc()).limit(5)
    )
    recent_scenes = await db.execute(
        select(Scene).where(Scene.project_id == project.id)
        .order_by(Scene.updated_at.desc()).limit(5)
    )

    return ProjectStats(
        assetCount=await _count(Asset),
        sceneCount=await _count(Scene),
        scriptCount=await _count(Script),
        lockedAssets=await _count(Asset, Asset.locked.is_(True)),
        renderedScenes=await _count(Scene, Scene.render_status == RenderStatus.COMPLETED.value),
        assetsByType=[AssetTypeCount(type=t, count=c) for t, c in by_type.all()],
        recentAssets=[AssetRead.model_validate(a) for a in recent_assets.scalars()],
        recentScenes=[SceneRead.model_validate(s) for s in recent_scenes.scalars()],
    )
