from __future__ import annotations
"""Export job — builds the requested storyboard file and stores it in the media volume."""

import asyncio
import logging
import time

from sqlalchemy import select, update

from storyforge.database import async_session_factory
from storyforge.models.asset import Asset
from storyforge.models.export import Export, ExportStatus, ExportType
from storyforge.models.project import Project
from storyforge.models.scene import RenderStatus, Scene, SceneAsset
from storyforge.schemas.asset import AssetRead
from storyforge.schemas.project import ProjectRead
from storyforge.schemas.scene import SceneRead
from storyforge.services import export_builder, media_store

logger = logging.getLogger(__name__)


async def _update_export_fields(export_id: str, **kwargs) -> None:
    async with async_session_factory() as session:
        await session.execute(
            update(Export).where(Export.id == export_id).values(**kwargs)
        )
        await session.commit()


async def _collect(project_id: str):
    """Snapshot the project, its rendered scenes, assets and scene links."""
    async with async_session_factory() as session:
        project = await session.get(Project, project_id)
        scenes = (await session.execute(
            select(Scene)
            .where(Scene.project_id == project_id, Scene.render_status == RenderStatus.COMPLETED.value)
            .order_by(Scene.scene_number)
        )).scalars().all()
        assets = (await session.execute(
            select(Asset).where(Asset.project_id == project_id).order_by(Asset.created_at)
        )).scalars().all()
        links = (await session.execute(
            select(SceneAsset).join(Scene, Scene.id == SceneAsset.scene_id)
            .where(Scene.project_id == project_id)
        )).scalars().all()
    return project, scenes, assets, links


def _frames(scenes: list[Scene]) -> list[export_builder.RenderedFrame]:
    return [
        export_builder.RenderedFrame(
            scene_number=s.scene_number,
            title=s.title,
            description=s.description,
            image=media_store.read_media(s.rendered_url),
        )
        for s in scenes
    ]


def _metadata_bundle(project, scenes, assets, links) -> bytes:
    links_by_scene: dict[str, list[dict]] = {}
    for link in links:
        links_by_scene.setdefault(link.scene_id, []).append({
            "asset_id": link.asset_id,
            "role": link.role,
            "position_hint": link.position_hint,
        })

    scene_payload = []
    for scene in scenes:
        item = SceneRead.model_validate(scene).model_dump(mode="json")
        item["assets"] = links_by_scene.get(scene.id, [])
        scene_payload.append(item)

    return export_builder.build_metadata_bundle(
        ProjectRead.model_validate(project).model_dump(mode="json"),
        scene_payload,
        [AssetRead.model_validate(a).model_dump(mode="json") for a in assets],
    )


async def run_export(export_id: str, project_id: str, export_type: str) -> None:
    """Build the export file: pending → processing → completed | failed."""
    try:
        await _update_export_fields(export_id, status=ExportStatus.PROCESSING.value)

        project, scenes, assets, links = await _collect(project_id)
        if project is None:
            raise LookupError(f"Project {project_id} not found")
        if not scenes:
            raise ValueError("No rendered scenes to export")

        if export_type == ExportType.PDF.value:
            data = await asyncio.to_thread(export_builder.build_pdf, _frames(scenes))
        elif export_type == ExportType.IMAGE_SEQUENCE.value:
            data = await asyncio.to_thread(export_builder.build_image_sequence, _frames(scenes))
        elif export_type == ExportType.METADATA_BUNDLE.value:
            data = _metadata_bundle(project, scenes, assets, links)
        else:
            raise ValueError(f"Unknown export type: {export_type}")

        filename = export_builder.export_filename(project_id, export_type, int(time.time() * 1000))
        file_url = media_store.save_bytes(data, "exports", filename)

        await _update_export_fields(
            export_id,
            status=ExportStatus.COMPLETED.value,
            file_url=file_url,
            error_message=None,
        )
        logger.info("Export %s (%s) written: %s (%d bytes)", export_id, export_type, file_url, len(data))

    except Exception as exc:
        logger.error("Export %s failed: %s", export_id, exc)
        try:
            await _update_export_fields(
                export_id,
                status=ExportStatus.FAILED.value,
                error_message=str(exc)[:500],
            )
        except Exception as err:
            logger.error("Failed to mark export %s as failed: %s", export_id, err)
