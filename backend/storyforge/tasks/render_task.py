from __future__ import annotations
"""Scene render job — composes a storyboard frame from the scene's locked assets."""

import logging
from datetime import datetime, timezone

from sqlalchemy import func, select, update

from storyforge.config import get_settings
from storyforge.database import async_session_factory
from storyforge.models.asset import Asset
from storyforge.models.project import Project
from storyforge.models.scene import RenderStatus, Scene, SceneAsset, SceneVersion
from storyforge.services.image_gen import generate_scene_image, get_image_service
from storyforge.services.prompt_builder import AssetRef

logger = logging.getLogger(__name__)
settings = get_settings()


async def _update_scene_fields(scene_id: str, **kwargs) -> None:
    """Update multiple fields on a scene record."""
    async with async_session_factory() as session:
        await session.execute(
            update(Scene).where(Scene.id == scene_id).values(**kwargs)
        )
        await session.commit()


async def run_scene_render(scene_id: str, seed: int) -> None:
    """Render a scene and record the result as a new SceneVersion."""
    async with async_session_factory() as session:
        scene = await session.get(Scene, scene_id)
        if scene is None:
            logger.warning("Scene %s vanished before render", scene_id)
            return
        project = await session.get(Project, scene.project_id)
        rows = (await session.execute(
            select(Asset)
            .join(SceneAsset, SceneAsset.asset_id == Asset.id)
            .where(SceneAsset.scene_id == scene_id)
        )).scalars().all()

    assets = [
        AssetRef(
            name=a.name,
            type=a.type,
            visual_prompt=a.visual_prompt,
            thumbnail_url=a.thumbnail_url,
        )
        for a in rows
    ]
    visual_style = (project.visual_style if project else "") or settings.DEFAULT_VISUAL_STYLE

    try:
        result = await generate_scene_image(
            scene_id,
            assets,
            description=scene.description,
            mood=scene.mood,
            camera_angle=scene.camera_angle,
            lighting=scene.lighting,
            visual_style=visual_style,
            seed=seed,
        )

        render_metadata = {
            "render_engine": get_image_service().engine_label(),
            "seed": result.seed,
            "rendered_at": datetime.now(timezone.utc).isoformat(),
            "assets_used": len(rows),
            "asset_ids": [a.id for a in rows],
        }

        async with async_session_factory() as session:
            version_count = (await session.execute(
                select(func.count()).select_from(SceneVersion)
                .where(SceneVersion.scene_id == scene_id)
            )).scalar_one()
            await session.execute(
                update(Scene).where(Scene.id == scene_id).values(
                    render_status=RenderStatus.COMPLETED.value,
                    rendered_url=result.url,
                    render_metadata=render_metadata,
                )
            )
            session.add(SceneVersion(
                scene_id=scene_id,
                version=version_count + 1,
                rendered_url=result.url,
                render_metadata=render_metadata,
            ))
            await session.commit()
        logger.info("Scene %s rendered: %s", scene_id, result.url)

    except Exception as exc:
        logger.error("Render failed for scene %s: %s", scene_id, exc)
        try:
            await _update_scene_fields(scene_id, render_status=RenderStatus.FAILED.value)
        except Exception as err:
            logger.error("Failed to mark scene %s as failed: %s", scene_id, err)
