from __future__ import annotations
"""Asset image jobs: first image, regeneration and candidate variants."""

import logging

from sqlalchemy import delete, select, update

from storyforge.config import get_settings
from storyforge.database import async_session_factory
from storyforge.models.asset import Asset, AssetVariant, AssetVersion, GenerationStatus
from storyforge.services import media_store
from storyforge.services.image_gen import generate_asset_image, generate_variant_images

logger = logging.getLogger(__name__)
settings = get_settings()


async def _load_asset(asset_id: str) -> Asset | None:
    async with async_session_factory() as session:
        return await session.get(Asset, asset_id)


async def _update_asset_fields(asset_id: str, **kwargs) -> None:
    """Update multiple fields on an asset record."""
    async with async_session_factory() as session:
        await session.execute(
            update(Asset).where(Asset.id == asset_id).values(**kwargs)
        )
        await session.commit()


async def _mark_asset_failed(asset_id: str) -> None:
    try:
        await _update_asset_fields(asset_id, generation_status=GenerationStatus.FAILED.value)
    except Exception as err:
        logger.error("Failed to mark asset %s as failed: %s", asset_id, err)


def _skip_locked(asset: Asset, job: str) -> None:
    """Leave a locked asset exactly as it was frozen; only settle its status."""
    logger.warning("Asset %s was locked during %s; result discarded", asset.id, job)
    asset.generation_status = (
        GenerationStatus.COMPLETED.value if asset.thumbnail_url else GenerationStatus.IDLE.value
    )


async def run_initial_generation(asset_id: str, negative_prompt: str | None = None) -> None:
    """First image for a newly created asset; fills version 1 without bumping it.

    ``negative_prompt`` overrides the stored one for this call only.
    """
    asset = await _load_asset(asset_id)
    if asset is None:
        logger.warning("Asset %s vanished before initial generation", asset_id)
        return

    try:
        result = await generate_asset_image(
            asset.id,
            asset.visual_prompt,
            negative_prompt or asset.negative_prompt or settings.INITIAL_NEGATIVE_PROMPT,
            asset.seed,
            asset.type,
        )

        async with async_session_factory() as session:
            current = await session.get(Asset, asset_id)
            if current is None:
                logger.warning("Asset %s deleted during initial generation", asset_id)
                return
            if current.locked:
                _skip_locked(current, "initial generation")
                await session.commit()
                return
            current.thumbnail_url = result.url
            current.seed = result.seed
            current.generation_status = GenerationStatus.COMPLETED.value
            await session.execute(
                update(AssetVersion)
                .where(AssetVersion.asset_id == asset_id, AssetVersion.version == current.version)
                .values(thumbnail_url=result.url, seed=result.seed)
            )
            await session.commit()
        logger.info("Asset %s initial image: %s", asset_id, result.url)

    except Exception as exc:
        logger.error("Initial generation failed for asset %s: %s", asset_id, exc)
        await _mark_asset_failed(asset_id)


async def run_regeneration(asset_id: str, seed: int) -> None:
    """Regenerate the asset image; on success bump the version and snapshot it."""
    asset = await _load_asset(asset_id)
    if asset is None:
        logger.warning("Asset %s vanished before regeneration", asset_id)
        return

    negative_prompt = asset.negative_prompt or settings.DEFAULT_NEGATIVE_PROMPT
    try:
        result = await generate_asset_image(
            asset.id, asset.visual_prompt, negative_prompt, seed, asset.type,
        )

        async with async_session_factory() as session:
            current = await session.get(Asset, asset_id)
            if current is None:
                logger.warning("Asset %s deleted during regeneration", asset_id)
                return
            if current.locked:
                _skip_locked(current, "regeneration")
                await session.commit()
                return
            current.version += 1
            current.thumbnail_url = result.url
            current.seed = result.seed
            current.generation_status = GenerationStatus.COMPLETED.value
            session.add(AssetVersion(
                asset_id=asset_id,
                version=current.version,
                visual_prompt=current.visual_prompt,
                negative_prompt=negative_prompt,
                seed=result.seed,
                thumbnail_url=result.url,
                meta=dict(current.meta or {}),
            ))
            await session.commit()
        logger.info("Asset %s regenerated as v%d: %s", asset_id, current.version, result.url)

    except Exception as exc:
        logger.error("Regeneration failed for asset %s: %s", asset_id, exc)
        await _mark_asset_failed(asset_id)


async def run_variant_generation(asset_id: str, base_seed: int, count: int) -> None:
    """Generate ``count`` candidates, replacing the asset's previous variants."""
    asset = await _load_asset(asset_id)
    if asset is None:
        logger.warning("Asset %s vanished before variant generation", asset_id)
        return

    try:
        results = await generate_variant_images(
            asset.id,
            asset.visual_prompt,
            asset.negative_prompt or settings.DEFAULT_NEGATIVE_PROMPT,
            base_seed,
            count,
            asset.type,
        )

        async with async_session_factory() as session:
            current = await session.get(Asset, asset_id)
            if current is None:
                logger.warning("Asset %s deleted during variant generation", asset_id)
                return
            if current.locked:
                _skip_locked(current, "variant generation")
                await session.commit()
                return
            old_urls = (await session.execute(
                select(AssetVariant.thumbnail_url).where(AssetVariant.asset_id == asset_id)
            )).scalars().all()
            # A selected variant's file is shared with the asset and its history
            in_use = set((await session.execute(
                select(AssetVersion.thumbnail_url).where(AssetVersion.asset_id == asset_id)
            )).scalars().all())
            in_use.add(current.thumbnail_url)
            await session.execute(delete(AssetVariant).where(AssetVariant.asset_id == asset_id))
            for index, result in enumerate(results, start=1):
                session.add(AssetVariant(
                    asset_id=asset_id,
                    variant_index=index,
                    seed=result.seed,
                    thumbnail_url=result.url,
                    selected=False,
                ))
            current.generation_status = GenerationStatus.COMPLETED.value
            await session.commit()

        in_use.update(r.url for r in results)
        for url in old_urls:
            if url not in in_use:
                media_store.delete_media(url)
        logger.info("Asset %s: %d variants generated", asset_id, len(results))

    except Exception as exc:
        logger.error("Variant generation failed for asset %s: %s", asset_id, exc)
        await _mark_asset_failed(asset_id)
