"""API tests for scenes: asset assignment and the render gate."""

from storyforge.services.providers import ImageGenerationError


def _url(project, scene=None, suffix=""):
    base = f"/api/projects/{project['id']}/scenes"
    if scene is not None:
        base += f"/{scene['id']}"
    return base + suffix


async def _assign(client, project, scene, *assets, **link):
    return await client.put(
        _url(project, scene, "/assets"),
        json={"assets": [{"asset_id": a["id"], **link} for a in assets]},
    )


async def test_create_applies_defaults_and_numbers(client, project, make_scene):
    first = await make_scene()
    assert first["id"].startswith("SCN_")
    assert first["scene_number"] == 1
    assert first["title"] == "Scene 1"
    assert first["mood"] == "neutral"
    assert first["camera_angle"] == "medium shot"
    assert first["lighting"] == "natural"
    assert first["render_status"] == "draft"
    assert first["render_metadata"] == {}

    await make_scene(scene_number=7)
    third = await make_scene(title="Pier")
    assert third["scene_number"] == 8


async def test_create_rejects_foreign_script(client, project):
    other = (await client.post("/api/projects", json={"name": "Other"})).json()
    script = (await client.post(
        f"/api/projects/{other['id']}/scripts", json={"title": "Elsewhere"},
    )).json()

    resp = await client.post(_url(project), json={"script_id": script["id"]})
    assert resp.status_code == 400


async def test_update_scene(client, project, make_scene):
    scene = await make_scene()
    resp = await client.patch(_url(project, scene), json={"mood": "tense", "lighting": "neon"})
    assert resp.status_code == 200
    assert resp.json()["mood"] == "tense"
    assert resp.json()["lighting"] == "neon"
    assert resp.json()["title"] == "Scene 1"


async def test_assign_assets_replaces_previous(client, project, make_asset, make_scene):
    mira = await make_asset(name="Mira")
    harbor = await make_asset(name="Harbor", type="environment")
    scene = await make_scene()

    resp = await _assign(client, project, scene, mira, harbor)
    assert resp.status_code == 200
    assigned = resp.json()["assets"]
    assert [a["name"] for a in assigned] == ["Harbor", "Mira"]
    assert all(a["role"] == "primary" and a["position_hint"] == "center" for a in assigned)

    resp = await client.put(
        _url(project, scene, "/assets"),
        json={"assets": [{"asset_id": harbor["id"], "role": "background", "position_hint": "full"}]},
    )
    assigned = resp.json()["assets"]
    assert [(a["name"], a["role"], a["position_hint"]) for a in assigned] == [
        ("Harbor", "background", "full"),
    ]

    listing = (await client.get(_url(project))).json()
    assert [a["id"] for a in listing[0]["assets"]] == [harbor["id"]]


async def test_assign_rejects_duplicates_and_foreign_assets(client, project, make_asset, make_scene):
    mira = await make_asset()
    scene = await make_scene()

    resp = await _assign(client, project, scene, mira, mira)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Duplicate asset in assignment"

    resp = await client.put(
        _url(project, scene, "/assets"), json={"assets": [{"asset_id": "AST_NOPE"}]},
    )
    assert resp.status_code == 400
    assert "AST_NOPE" in resp.json()["error"]


async def test_assign_empty_clears(client, project, make_asset, make_scene):
    mira = await make_asset()
    scene = await make_scene()
    await _assign(client, project, scene, mira)

    resp = await client.put(_url(project, scene, "/assets"), json={"assets": []})
    assert resp.json() == {"assets": []}


async def test_render_requires_assets(client, project, make_scene):
    scene = await make_scene()
    resp = await client.post(_url(project, scene, "/render"))
    assert resp.status_code == 400
    assert resp.json()["error"] == "Scene has no assets assigned. Add assets before rendering."


async def test_render_requires_locked_assets(client, project, make_asset, make_scene):
    mira = await make_asset(name="Mira", locked=True)
    kite = await make_asset(name="Kite")
    scene = await make_scene()
    await _assign(client, project, scene, mira, kite)

    resp = await client.post(_url(project, scene, "/render"))
    assert resp.status_code == 400
    assert resp.json() == {
        "error": "All assets must be locked before rendering",
        "unlocked_assets": ["Kite"],
    }

    detail = (await client.get(_url(project, scene))).json()
    assert detail["render_status"] == "draft"


async def test_render_records_versions(client, project, make_asset, make_scene):
    mira = await make_asset(name="Mira", visual_prompt="courier in a yellow raincoat", locked=True)
    harbor = await make_asset(
        name="Harbor", type="environment", visual_prompt="rainy harbor at night", locked=True,
    )
    scene = await make_scene(description="Mira waits on the pier.", mood="tense")
    await _assign(client, project, scene, mira, harbor)

    resp = await client.post(_url(project, scene, "/render"))
    assert resp.status_code == 200
    assert resp.json()["render_status"] == "rendering"

    detail = (await client.get(_url(project, scene))).json()
    assert detail["render_status"] == "completed"
    assert detail["rendered_url"].startswith(f"/media/scenes/{scene['id']}_")
    meta = detail["render_metadata"]
    assert meta["render_engine"] == "Mock"
    assert meta["assets_used"] == 2
    assert sorted(meta["asset_ids"]) == sorted([mira["id"], harbor["id"]])
    assert "rendered_at" in meta
    assert detail["rendered_url"].endswith(f"_{meta['seed']}.png")
    assert [v["version"] for v in detail["versions"]] == [1]

    image = await client.get(detail["rendered_url"])
    assert image.status_code == 200

    await client.post(_url(project, scene, "/render"))
    detail = (await client.get(_url(project, scene))).json()
    assert [v["version"] for v in detail["versions"]] == [2, 1]
    assert detail["versions"][0]["rendered_url"] == detail["rendered_url"]

    stats = (await client.get(f"/api/projects/{project['id']}/stats")).json()
    assert stats["renderedScenes"] == 1


async def test_render_failure_marks_scene_failed(client, project, make_asset, make_scene, monkeypatch):
    from storyforge.services.providers import mock_image

    mira = await make_asset(visual_prompt="courier", locked=True)
    scene = await make_scene()
    await _assign(client, project, scene, mira)

    async def _broken(**kwargs):
        raise ImageGenerationError("provider down")

    monkeypatch.setattr(mock_image, "generate_image", _broken)

    await client.post(_url(project, scene, "/render"))
    detail = (await client.get(_url(project, scene))).json()
    assert detail["render_status"] == "failed"
    assert detail["rendered_url"] is None
    assert detail["versions"] == []


async def test_asset_detail_lists_scenes_using_it(client, project, make_asset, make_scene):
    mira = await make_asset()
    scene = await make_scene(title="Docks")
    await _assign(client, project, scene, mira)

    detail = (await client.get(f"/api/projects/{project['id']}/assets/{mira['id']}")).json()
    assert [s["title"] for s in detail["used_in_scenes"]] == ["Docks"]


async def test_delete_scene_frees_assets(client, project, make_asset, make_scene):
    mira = await make_asset()
    scene = await make_scene()
    await _assign(client, project, scene, mira)

    resp = await client.delete(_url(project, scene))
    assert resp.json() == {"success": True}
    assert (await client.get(_url(project, scene))).status_code == 404

    resp = await client.delete(f"/api/projects/{project['id']}/assets/{mira['id']}")
    assert resp.status_code == 200
