"""Startup recovery of jobs interrupted by a restart."""

from storyforge.database import async_session_factory
from storyforge.main import recover_stuck_jobs
from storyforge.models import Asset, Export, Project, Scene


async def test_recover_stuck_jobs(db_tables):
    async with async_session_factory() as session:
        project = Project(name="Neon Harbor")
        session.add(project)
        await session.flush()
        session.add_all([
            Asset(project_id=project.id, name="Mira", type="character", generation_status="generating"),
            Asset(project_id=project.id, name="Kite", type="character", generation_status="completed"),
            Scene(project_id=project.id, title="Docks", render_status="rendering"),
            Export(project_id=project.id, type="pdf", status="pending"),
            Export(project_id=project.id, type="pdf", status="processing"),
        ])
        await session.commit()

    assert await recover_stuck_jobs() == 4

    async with async_session_factory() as session:
        assets = {a.name: a.generation_status for a in (await session.execute(Asset.__table__.select())).all()}
        scenes = (await session.execute(Scene.__table__.select())).all()
        exports = (await session.execute(Export.__table__.select())).all()

    assert assets == {"Mira": "failed", "Kite": "completed"}
    assert [s.render_status for s in scenes] == ["failed"]
    assert sorted(e.status for e in exports) == ["failed", "failed"]

    assert await recover_stuck_jobs() == 0
