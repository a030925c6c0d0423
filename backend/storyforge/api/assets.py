from __future__ import annotations
"""Asset library endpoints — CRUD, locking, image generation and variants.

Generation requests only flip the status to ``generating`` and commit;
the image call itself runs as a background task after the response.
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from storyforge.api.deps import get_asset_or_404, get_project_or_404
from storyforge.config import get_settings
from storyforge.database import get_db
from storyforge.models.asset import (
    Asset,
    AssetType,
    AssetVariant,
    AssetVersion,
    GenerationStatus,
)
from storyforge.models.project import Project
from storyforge.models.scene import Scene, SceneAsset
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
from storyforge.schemas.scene import AssetDetail, SceneRead
from storyforge.services.image_gen import random_seed
from storyforge.tasks import asset_tasks

logger = logging.getLogger(__name__)
router = APIRouter()
settings = get_settings()


async def _usage_count(db: AsyncSession, asset_id: str) -> int:
    result = await db.execute(
        select(func.count()).select_from(SceneAsset).where(SceneAsset.asset_id == asset_id)
    )
    return result.scalar_one()


@router.get("", response_model=list[AssetListItem])
async def list_assets(
    type: AssetType | None = None,
    project: Project = Depends(get_project_or_404),
    db: AsyncSession = Depends(get_db),
):
    """List a project's assets (newest first), optionally filtered by type."""
    usage = (
        select(SceneAsset.asset_id, func.count().label("usage_count"))
        .group_by(SceneAsset.asset_id)
        .subquery()
    )
    query = (
        select(Asset, func.coalesce(usage.c.usage_count, 0))
        .outerjoin(usage, usage.c.asset_id == Asset.id)
        .where(Asset.project_id == project.id)
    )
    if type is not None:
        query = query.where(Asset.type == type.value)
    result = await db.execute(query.order_by(Asset.created_at.desc()))

    return [
        AssetListItem(**AssetRead.model_validate(asset).model_dump(), usage_count=count)
        for asset, count in result.all()
    ]


@router.post("", response_model=AssetRead, status_code=201)
async def create_asset(
    data: AssetCreate,
    background_tasks: BackgroundTasks,
    project: Project = Depends(get_project_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Create an asset at version 1; with a visual prompt its first image is generated."""
    visual_prompt = data.visual_prompt or ""
    asset = Asset(
        project_id=project.id,
        name=data.name,
        type=data.type.value,
        description=data.description or "",
        visual_prompt=visual_prompt,
        negative_prompt=data.negative_prompt or settings.DEFAULT_NEGATIVE_PROMPT,
        seed=data.seed if data.seed else random_seed(),
        version=1,
        locked=False,
        meta=data.metadata or {},
        generation_status=(
            GenerationStatus.GENERATING.value if visual_prompt else GenerationStatus.IDLE.value
        ),
    )
    db.add(asset)
    await db.flush()
    db.add(AssetVersion(
        asset_id=asset.id,
        version=1,
        visual_prompt=asset.visual_prompt,
        negative_prompt=asset.negative_prompt,
        seed=asset.seed,
        meta=dict(asset.meta),
    ))
    await db.flush()
    await db.refresh(asset)
    await db.commit()

    if visual_prompt:
        background_tasks.add_task(
            asset_tasks.run_initial_generation,
            asset.id,
            data.negative_prompt or settings.INITIAL_NEGATIVE_PROMPT,
        )

    return asset


@router.get("/{asset_id}", response_model=AssetDetail)
async def get_asset(
    asset: Asset = Depends(get_asset_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Asset with versions (newest first), variants and the scenes using it."""
    versions = await db.execute(
        select(AssetVersion).where(AssetVersion.asset_id == asset.id)
        .order_by(AssetVersion.version.desc())
    )
    variants = await db.execute(
        select(AssetVariant).where(AssetVariant.asset_id == asset.id)
        .order_by(AssetVariant.variant_index)
    )
    scenes = await db.execute(
        select(Scene).join(SceneAsset, SceneAsset.scene_id == Scene.id)
        .where(SceneAsset.asset_id == asset.id)
        .order_by(Scene.scene_number)
    )

    return AssetDetail(
        **AssetRead.model_validate(asset).model_dump(),
        versions=[AssetVersionRead.model_validate(v) for v in versions.scalars()],
        variants=[AssetVariantRead.model_validate(v) for v in variants.scalars()],
        used_in_scenes=[SceneRead.model_validate(s) for s in scenes.scalars()],
    )


@router.patch("/{asset_id}", response_model=AssetRead)
async def update_asset(
    data: AssetUpdate,
    asset: Asset = Depends(get_asset_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Edit an unlocked asset. Does not create a version."""
    if asset.locked:
        raise HTTPException(status_code=403, detail="Cannot edit a locked asset")

    update_data = data.model_dump(exclude_unset=True)
    for key, value in update_data.items():
        if value is None:
            continue
        setattr(asset, "meta" if key == "metadata" else key, value)

    await db.flush()
    await db.refresh(asset)
    return asset


@router.delete("/{asset_id}")
async def delete_asset(
    asset: Asset = Depends(get_asset_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Delete an asset that is neither locked nor used by any scene."""
    if await _usage_count(db, asset.id) > 0:
        raise HTTPException(status_code=403, detail="Cannot delete asset used in scenes")
    if asset.locked:
        raise HTTPException(status_code=403, detail="Cannot delete a locked asset")

    await db.delete(asset)
    return {"success": True}


@router.post("/{asset_id}/lock", response_model=AssetRead)
async def lock_asset(
    asset: Asset = Depends(get_asset_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Freeze an asset so scenes can render with it. Locking is one-way."""
    if asset.locked:
        raise HTTPException(status_code=400, detail="Asset is already locked")
    if asset.generation_status == GenerationStatus.GENERATING.value:
        raise HTTPException(status_code=409, detail="Cannot lock an asset while it is generating")

    asset.locked = True
    await db.flush()
    await db.refresh(asset)
    logger.info("Asset %s locked at v%d", asset.id, asset.version)
    return asset


@router.post("/{asset_id}/generate", response_model=GenerationAccepted)
async def generate_asset(
    background_tasks: BackgroundTasks,
    data: AssetGenerateRequest | None = None,
    asset: Asset = Depends(get_asset_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Regenerate the asset image, or produce up to four candidate variants."""
    data = data or AssetGenerateRequest()
    if asset.locked:
        raise HTTPException(status_code=403, detail="Cannot regenerate a locked asset")
    if not asset.visual_prompt:
        raise HTTPException(status_code=400, detail="Asset has no visual prompt")

    seed = data.seed if data.seed else random_seed()
    await db.execute(
        update(Asset).where(Asset.id == asset.id)
        .values(generation_status=GenerationStatus.GENERATING.value)
    )
    await db.commit()

    if data.variants > 1:
        count = min(data.variants, settings.MAX_VARIANTS)
        background_tasks.add_task(asset_tasks.run_variant_generation, asset.id, seed, count)
        return GenerationAccepted(status="generating", message=f"Generating {count} variants...")

    background_tasks.add_task(asset_tasks.run_regeneration, asset.id, seed)
    return GenerationAccepted(status="generating", message="Regenerating asset image...")


@router.get("/{asset_id}/variants", response_model=list[AssetVariantRead])
async def list_variants(
    asset: Asset = Depends(get_asset_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Current candidate images, by index."""
    result = await db.execute(
        select(AssetVariant).where(AssetVariant.asset_id == asset.id)
        .order_by(AssetVariant.variant_index)
    )
    return result.scalars().all()


@router.post("/{asset_id}/variants", response_model=AssetRead)
async def select_variant(
    data: VariantSelectRequest,
    asset: Asset = Depends(get_asset_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Promote a variant to the asset's current image as a new version."""
    if not data.variant_id:
        raise HTTPException(status_code=400, detail="variant_id is required")
    if asset.locked:
        raise HTTPException(status_code=403, detail="Cannot modify a locked asset")

    variant = await db.get(AssetVariant, data.variant_id)
    if not variant or variant.asset_id != asset.id:
        raise HTTPException(status_code=404, detail="Variant not found")

    asset.seed = variant.seed
    asset.thumbnail_url = variant.thumbnail_url
    asset.version += 1
    asset.generation_status = GenerationStatus.COMPLETED.value

    await db.execute(
        update(AssetVariant).where(AssetVariant.asset_id == asset.id)
        .values(selected=False)
    )
    await db.execute(
        update(AssetVariant).where(AssetVariant.id == variant.id)
        .values(selected=True)
    )
    db.add(AssetVersion(
        asset_id=asset.id,
        version=asset.version,
        visual_prompt=asset.visual_prompt,
        negative_prompt=asset.negative_prompt,
        seed=variant.seed,
        thumbnail_url=variant.thumbnail_url,
        meta=dict(asset.meta or {}),
    ))

    await db.flush()
    await db.refresh(asset)
    logger.info("Asset %s: variant %s selected as v%d", asset.id, variant.id, asset.version)
    return asset
