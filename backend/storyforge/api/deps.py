from __future__ import annotations
"""Shared route dependencies — load a path resource or answer 404."""

from fastapi import Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from storyforge.database import get_db
from storyforge.models.asset import Asset
from storyforge.models.project import Project
from storyforge.models.scene import Scene
from storyforge.models.script import Script


async def get_project_or_404(project_id: str, db: AsyncSession = Depends(get_db)) -> Project:
    project = await db.get(Project, project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


async def get_asset_or_404(
    asset_id: str,
    project: Project = Depends(get_project_or_404),
    db: AsyncSession = Depends(get_db),
) -> Asset:
    asset = await db.get(Asset, asset_id)
    if not asset or asset.project_id != project.id:
        raise HTTPException(status_code=404, detail="Asset not found")
    return asset


async def get_script_or_404(
    script_id: str,
    project: Project = Depends(get_project_or_404),
    db: AsyncSession = Depends(get_db),
) -> Script:
    script = await db.get(Script, script_id)
    if not script or script.project_id != project.id:
        raise HTTPException(status_code=404, detail="Script not found")
    return script


async def get_scene_or_404(
    scene_id: str,
    project: Project = Depends(get_project_or_404),
    db: AsyncSession = Depends(get_db),
) -> Scene:
    scene = await db.get(Scene, scene_id)
    if not scene or scene.project_id != project.id:
        raise HTTPException(status_code=404, detail="Scene not found")
    return scene
