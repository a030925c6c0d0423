from __future__ import annotations
"""Script endpoints — CRUD and compilation into scenes."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from storyforge.api.deps import get_project_or_404, get_script_or_404
from storyforge.database import get_db
from storyforge.models.project import Project
from storyforge.models.scene import Scene, SceneAsset, SceneVersion
from storyforge.models.script import Script
from storyforge.schemas.scene import SceneRead
from storyforge.schemas.script import (
    CompileResult,
    ScriptCreate,
    ScriptDetail,
    ScriptRead,
    ScriptUpdate,
)
from storyforge.services.script_parser import parse_script

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=list[ScriptRead])
async def list_scripts(
    project: Project = Depends(get_project_or_404),
    db: AsyncSession = Depends(get_db),
):
    """List a project's scripts, newest first."""
    result = await db.execute(
        select(Script).where(Script.project_id == project.id)
        .order_by(Script.created_at.desc())
    )
    return result.scalars().all()


@router.post("", response_model=ScriptRead, status_code=201)
async def create_script(
    data: ScriptCreate,
    project: Project = Depends(get_project_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Create an uncompiled script."""
    script = Script(
        project_id=project.id,
        title=data.title,
        content=data.content or "",
        compiled=False,
    )
    db.add(script)
    await db.flush()
    await db.refresh(script)
    return script


@router.get("/{script_id}", response_model=ScriptDetail)
async def get_script(
    script: Script = Depends(get_script_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Get a script with the scenes compiled from it."""
    scenes = await db.execute(
        select(Scene).where(Scene.script_id == script.id)
        .order_by(Scene.scene_number)
    )
    return ScriptDetail(
        **ScriptRead.model_validate(script).model_dump(),
        scenes=[SceneRead.model_validate(s) for s in scenes.scalars()],
    )


@router.patch("/{script_id}", response_model=ScriptRead)
async def update_script(
    data: ScriptUpdate,
    script: Script = Depends(get_script_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Update title or content. New content marks the script as not compiled."""
    if data.title is not None:
        script.title = data.title
    if data.content is not None:
        script.content = data.content
        script.compiled = False

    await db.flush()
    await db.refresh(script)
    return script


@router.delete("/{script_id}")
async def delete_script(
    script: Script = Depends(get_script_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Delete a script. Its scenes are kept and detached."""
    await db.execute(
        update(Scene).where(Scene.script_id == script.id).values(script_id=None)
    )
    await db.delete(script)
    return {"success": True}


@router.post("/{script_id}/compile", response_model=CompileResult)
async def compile_script(
    script: Script = Depends(get_script_or_404),
    db: AsyncSession = Depends(get_db),
):
    """Parse the script into scenes numbered 1..n, replacing earlier ones."""
    if not script.content or not script.content.strip():
        raise HTTPException(status_code=400, detail="Script has no content")

    blocks = parse_script(script.content)

    old_ids = select(Scene.id).where(Scene.script_id == script.id)
    for stmt in (
        delete(SceneAsset).where(SceneAsset.scene_id.in_(old_ids)),
        delete(SceneVersion).where(SceneVersion.scene_id.in_(old_ids)),
        delete(Scene).where(Scene.script_id == script.id),
    ):
        await db.execute(stmt.execution_options(synchronize_session=False))

    scenes = []
    for number, block in enumerate(blocks, start=1):
        scene = Scene(
            project_id=script.project_id,
            script_id=script.id,
            scene_number=number,
            title=block.title,
            description=block.description,
        )
        db.add(scene)
        scenes.append(scene)

    script.compiled = True
    await db.flush()
    for scene in scenes:
        await db.refresh(scene)

    logger.info("Script %s compiled into %d scenes", script.id, len(scenes))
    return CompileResult(
        scenes=[SceneRead.model_validate(s) for s in scenes],
        count=len(scenes),
    )
