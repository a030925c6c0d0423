"""API tests for storyboard exports."""

import io
import json
import zipfile

import pytest


@pytest.fixture
async def rendered_scene(client, project, make_asset, make_scene):
    mira = await make_asset(name="Mira", visual_prompt="courier in a yellow raincoat", locked=True)
    scene = await make_scene(title="Docks", description="Mira waits on the pier.")
    base = f"/api/projects/{project['id']}/scenes/{scene['id']}"
    await client.put(f"{base}/assets", json={"assets": [{"asset_id": mira["id"], "role": "hero"}]})
    await client.post(f"{base}/render")
    scene = (await client.get(base)).json()
    assert scene["render_status"] == "completed"
    return scene


def _url(project):
    return f"/api/projects/{project['id']}/exports"


async def test_export_requires_rendered_scene(client, project, make_scene):
    await make_scene()
    resp = await client.post(_url(project), json={"type": "pdf"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "No rendered scenes to export"}


async def test_unknown_export_type_rejected(client, project):
    resp = await client.post(_url(project), json={"type": "gif"})
    assert resp.status_code == 400


async def test_pdf_export(client, project, rendered_scene):
    resp = await client.post(_url(project), json={"type": "pdf"})
    assert resp.status_code == 201
    export = resp.json()
    assert export["id"].startswith("EXP_")
    assert export["status"] == "pending"

    exports = (await client.get(_url(project))).json()
    done = exports[0]
    assert done["status"] == "completed"
    assert done["error_message"] is None
    assert done["file_url"].startswith(f"/media/exports/{project['id']}_pdf_")
    assert done["file_url"].endswith(".pdf")

    download = await client.get(done["file_url"])
    assert download.status_code == 200
    assert download.content.startswith(b"%PDF")


async def test_image_sequence_export(client, project, rendered_scene, make_scene):
    await make_scene(title="Unrendered")
    await client.post(_url(project), json={"type": "image_sequence"})

    done = (await client.get(_url(project))).json()[0]
    assert done["status"] == "completed"
    assert done["file_url"].endswith(".zip")

    download = await client.get(done["file_url"])
    with zipfile.ZipFile(io.BytesIO(download.content)) as zf:
        assert zf.namelist() == ["scene_001.png"]


async def test_metadata_bundle_export(client, project, rendered_scene):
    await client.post(_url(project), json={"type": "metadata_bundle"})

    done = (await client.get(_url(project))).json()[0]
    assert done["status"] == "completed"
    assert "_metadata_bundle_" in done["file_url"]

    download = await client.get(done["file_url"])
    with zipfile.ZipFile(io.BytesIO(download.content)) as zf:
        project_json = json.loads(zf.read("project.json"))
        scenes = json.loads(zf.read("scenes.json"))
        assets = json.loads(zf.read("assets.json"))

    assert project_json["name"] == "Neon Harbor"
    assert [s["title"] for s in scenes] == ["Docks"]
    assert scenes[0]["assets"][0]["role"] == "hero"
    assert [a["name"] for a in assets] == ["Mira"]
    assert assets[0]["locked"] is True


async def test_exports_are_listed_per_project(client, project, rendered_scene):
    await client.post(_url(project), json={"type": "pdf"})
    await client.post(_url(project), json={"type": "metadata_bundle"})

    exports = (await client.get(_url(project))).json()
    assert sorted(e["type"] for e in exports) == ["metadata_bundle", "pdf"]

    other = (await client.post("/api/projects", json={"name": "Other"})).json()
    assert (await client.get(_url(other))).json() == []


async def test_image_sequence_without_files_fails(client, project, rendered_scene):
    from storyforge.services import media_store

    assert media_store.delete_media(rendered_scene["rendered_url"])

    resp = await client.post(_url(project), json={"type": "image_sequence"})
    assert resp.status_code == 201

    done = (await client.get(_url(project))).json()[0]
    assert done["status"] == "failed"
    assert done["file_url"] is None
    assert done["error_message"] == "No rendered scene images found to export"
