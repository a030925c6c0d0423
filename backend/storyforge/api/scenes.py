from __future__ import annotations
"""Scene endpoints — CRUD, asset assignment and rendering."""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from storyforge.api.deps import get_project_or_404, get_scene_or_404
from storyforge.database import get_db
from storyforge.models.asset import Asset
from storyforge.models.project import Project
from storyforge.models.scene import RenderStatus, Scene, SceneAsset, SceneVersion
from storyforge.models.script import Script
from storyforge.schemas.asset import AssetRead
from storyforge.schemas.scene import (
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
from storyforge.services.image_gen import random_seed
from storyforge.tasks import render_task

logger = logging.getLogger(__name__)
router = APIRouter()


async def _scene_assets(db: AsyncSession, scene_ids: list[str]) -> dict[str, list[SceneAssetRead]]:
    """Assigned assets with role and position hint, keyed by scene id."""
    by_scene: dict[str, list[SceneAssetRead]] = {scene_id: [] for scene_id in scene_ids}
    if not scene_ids:
        return by_scene

    result = await db.execute(
        select(SceneAsset.scene_id, Asset, SceneAsset.role, SceneAsset.position_hint)
        .join(Asset, Asset.id == SceneAsset.asset_id)
        .where(SceneAsset.scene_id.in_(scene_ids))
        .order_by(Asset.name)
    )
    for scene_id, asset, role, position_hint in result.all():
        by_scene[scene_id].append(SceneAssetRead(
            **AssetRead.model_validate(asset).model_dump(),
            role=role,
            position_hint=position_hint,
        ))
    return by_scene


@router.get("", response_model=list[SceneWithAssets])
async def list_scenes(
    project: Project = Depends(get_project_or_404),
    db: AsyncSession = Depends(get_db),
):
    """List a project's scenes by scene number, each with its assets."""
    result = await db.execute(
        select(Scene).where(Scene.project_id == project.id)
        .order_by(Scene.scene_number)
    )
    scenes = result.scalars().all()
    assets = await _scene_assets(db, [s.id for s in scenes])

    return [
        SceneWithAssets(**SceneRead.model_validate(s).model_dump(), assets=assets[s.id])
        for s in scenes
    ]


@router.post("", response_model=SceneRead, status_code=201)
async def create_scene(
    data: SceneCreate,
    project: Project = Depends(get_project_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Create a scene. scene_number defaults to one past the highest in the project."""
    if data.script_id:
        script = await db.get(Script, data.script_id)
        if not script or script.project_id != project.id:
            raise HTTPException(status_code=400, detail="Script does not belong to this project")

    scene_number = data.scene_number
    if scene_number is None:
        result = await db.execute(
            select(func.max(Scene.scene_number)).where(Scene.project_id == project.id)
        )
        scene_number = (result.scalar() or 0) + 1

    scene = Scene(
        project_id=project.id,
        script_id=data.script_id,
        scene_number=scene_number,
        title=data.title or f"Scene {scene_number}",
        description=data.description or "",
        mood=data.mood or "neutral",
        camera_angle=data.camera_angle or "medium shot",
        lighting=data.lighting or "natural",
        render_status=RenderStatus.DRAFT.value,
        render_metadata={},
    )
    db.add(scene)
    await db.flush()
    await db.refresh(scene)
    return scene


@router.get("/{scene_id}", response_model=SceneDetail)
async def get_scene(
    scene: Scene = Depends(get_scene_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Get a scene with its assets and render history (newest first)."""
    assets = await _scene_assets(db, [scene.id])
    versions = await db.execute(
        select(SceneVersion).where(SceneVersion.scene_id == scene.id)
        .order_by(SceneVersion.version.desc())
    )
    return SceneDetail(
        **SceneRead.model_validate(scene).model_dump(),
        assets=assets[scene.id],
        versions=[SceneVersionRead.model_validate(v) for v in versions.scalars()],
    )


@router.patch("/{scene_id}", response_model=SceneRead)
async def update_scene(
    data: SceneUpdate,
    scene: Scene = Depends(get_scene_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Update a scene's content fields or number."""
    update_data = data.model_dump(exclude_unset=True)
    for key, value in update_data.items():
        if value is not None:
            setattr(scene, key, value)

    await db.flush()
    await db.refresh(scene)
    return scene


@router.delete("/{scene_id}")
async def delete_scene(
    scene: Scene = Depends(get_scene_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Delete a scene with its asset links and render history."""
    await db.delete(scene)
    return {"success": True}


@router.put("/{scene_id}/assets", response_model=SceneAssetsResult)
async def set_scene_assets(
    data: SceneAssetsUpdate,
    scene: Scene = Depends(get_scene_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Replace all of a scene's asset assignments."""
    asset_ids = [item.asset_id for item in data.assets]
    if len(set(asset_ids)) != len(asset_ids):
        raise HTTPException(status_code=400, detail="Duplicate asset in assignment")

    if asset_ids:
        result = await db.execute(
            select(Asset.id).where(Asset.id.in_(asset_ids), Asset.project_id == scene.project_id)
        )
        missing = set(asset_ids) - set(result.scalars().all())
        if missing:
            raise HTTPException(
                status_code=400,
                detail=f"Assets not found in this project: {', '.join(sorted(missing))}",
            )

    await db.execute(
        delete(SceneAsset).where(SceneAsset.scene_id == scene.id)
        .execution_options(synchronize_session=False)
    )
    for item in data.assets:
        db.add(SceneAsset(
            scene_id=scene.id,
            asset_id=item.asset_id,
            role=item.role or "primary",
            position_hint=item.position_hint or "center",
        ))
    await db.flush()

    assets = await _scene_assets(db, [scene.id])
    return SceneAssetsResult(assets=assets[scene.id])


@router.post("/{scene_id}/render", response_model=SceneRead)
async def render_scene(
    background_tasks: BackgroundTasks,
    scene: Scene = Depends(get_scene_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Render a scene whose assets are all locked; the image call runs in the background."""
    result = await db.execute(
        select(Asset).join(SceneAsset, SceneAsset.asset_id == Asset.id)
        .where(SceneAsset.scene_id == scene.id)
    )
    assets = result.scalars().all()
    if not assets:
        raise HTTPException(
            status_code=400,
            detail="Scene has no assets assigned. Add assets before rendering.",
        )

    unlocked = [a.name for a in assets if not a.locked]
    if unlocked:
        raise HTTPException(
            status_code=400,
            detail={
                "error": "All assets must be locked before rendering",
                "unlocked_assets": unlocked,
            },
        )

    await db.execute(
        update(Scene).where(Scene.id == scene.id)
        .values(render_status=RenderStatus.RENDERING.value)
    )
    await db.flush()
    await db.refresh(scene)
    await db.commit()

    background_tasks.add_task(render_task.run_scene_render, scene.id, random_seed())
    logger.info("Scene %s queued for render with %d assets", scene.id, len(assets))
    return scene
