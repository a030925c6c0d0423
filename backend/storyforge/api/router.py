from __future__ import annotations
"""Master API router — mounts all sub-routers."""

from fastapi import APIRouter

from storyforge.api.assets import router as assets_router
from storyforge.api.exports import router as exports_router
from storyforge.api.projects import router as projects_router
from storyforge.api.scenes import router as scenes_router
from storyforge.api.scripts import router as scripts_router
from storyforge.api.system import router as system_router

api_router = APIRouter(prefix="/api", redirect_slashes=False)

api_router.include_router(projects_router, prefix="/projects", tags=["Projects"])
api_router.include_router(assets_router, prefix="/projects/{project_id}/assets", tags=["Assets"])
api_router.include_router(scripts_router, prefix="/projects/{project_id}/scripts", tags=["Scripts"])
api_router.include_router(scenes_router, prefix="/projects/{project_id}/scenes", tags=["Scenes"])
api_router.include_router(exports_router, prefix="/projects/{project_id}/exports", tags=["Exports"])
api_router.include_router(system_router, prefix="/system", tags=["System"])
