from __future__ import annotations
"""Export endpoints — request and list storyboard exports."""

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storyforge.api.deps import get_project_or_404
from storyforge.database import get_db
from storyforge.models.export import Export, ExportStatus
from storyforge.models.project import Project
from storyforge.models.scene import RenderStatus, Scene
from storyforge.schemas.export import ExportCreate, ExportRead
from storyforge.tasks import export_task

router = APIRouter()


@router.get("", response_model=list[ExportRead])
async def list_exports(
    project: Project = Depends(get_project_or_404),
    db: AsyncSession = Depends(get_db),
):
    """List a project's exports, newest first."""
    result = await db.execute(
        select(Export).where(Export.project_id == project.id)
        .order_by(Export.created_at.desc())
    )
    return result.scalars().all()


@router.post("", response_model=ExportRead, status_code=201)
async def create_export(
    data: ExportCreate,
    background_tasks: BackgroundTasks,
    project: Project = Depends(get_project_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Queue an export; requires at least one rendered scene."""
    result = await db.execute(
        select(func.count()).select_from(Scene).where(
            Scene.project_id == project.id,
            Scene.render_status == RenderStatus.COMPLETED.value,
        )
    )
    if result.scalar_one() == 0:
        raise HTTPException(status_code=400, detail="No rendered scenes to export")

    export = Export(
        project_id=project.id,
        type=data.type.value,
        status=ExportStatus.PENDING.value,
    )
    db.add(export)
    await db.flush()
    await db.refresh(export)
    await db.commit()

    background_tasks.add_task(export_task.run_export, export.id, project.id, export.type)
    return export
