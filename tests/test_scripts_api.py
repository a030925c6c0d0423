"""API tests for scripts and compiling them into scenes."""

SCRIPT = """SCENE 1: The Docks
Mira waits under a flickering lamp.

SCENE 2: Rooftop Chase
Kite leaps across the gap.
"""


def _url(project, script=None, suffix=""):
    base = f"/api/projects/{project['id']}/scripts"
    if script is not None:
        base += f"/{script['id']}"
    return base + suffix


async def _create(client, project, **fields):
    resp = await client.post(_url(project), json={"title": "Episode 1", **fields})
    assert resp.status_code == 201, resp.text
    return resp.json()


async def test_create_and_list(client, project):
    script = await _create(client, project, content=SCRIPT)
    assert script["id"].startswith("SCR_")
    assert script["compiled"] is False

    listing = (await client.get(_url(project))).json()
    assert [s["id"] for s in listing] == [script["id"]]


async def test_create_defaults_to_empty_content(client, project):
    script = await _create(client, project)
    assert script["content"] == ""


async def test_title_required(client, project):
    resp = await client.post(_url(project), json={"content": "text"})
    assert resp.status_code == 400
    assert "title" in resp.json()["error"]


async def test_compile_creates_numbered_scenes(client, project):
    script = await _create(client, project, content=SCRIPT)

    resp = await client.post(_url(project, script, "/compile"))
    assert resp.status_code == 200
    body = resp.json()
    assert body["count"] == 2
    assert [s["scene_number"] for s in body["scenes"]] == [1, 2]
    assert [s["title"] for s in body["scenes"]] == ["Scene 1: The Docks", "Scene 2: Rooftop Chase"]
    assert body["scenes"][0]["description"] == "Mira waits under a flickering lamp."
    assert all(s["script_id"] == script["id"] for s in body["scenes"])
    assert all(s["render_status"] == "draft" for s in body["scenes"])

    detail = (await client.get(_url(project, script))).json()
    assert detail["compiled"] is True
    assert [s["title"] for s in detail["scenes"]] == ["Scene 1: The Docks", "Scene 2: Rooftop Chase"]


async def test_recompile_replaces_scenes(client, project, make_asset):
    script = await _create(client, project, content=SCRIPT)
    first = (await client.post(_url(project, script, "/compile"))).json()
    asset = await make_asset()
    await client.put(
        f"/api/projects/{project['id']}/scenes/{first['scenes'][0]['id']}/assets",
        json={"assets": [{"asset_id": asset["id"]}]},
    )

    resp = await client.patch(_url(project, script), json={"content": "One long take on the pier."})
    assert resp.json()["compiled"] is False

    second = (await client.post(_url(project, script, "/compile"))).json()
    assert second["count"] == 1
    assert second["scenes"][0]["scene_number"] == 1

    scenes = (await client.get(f"/api/projects/{project['id']}/scenes")).json()
    assert [s["id"] for s in scenes] == [second["scenes"][0]["id"]]

    # The old scene's asset link went with it
    assets = (await client.get(f"/api/projects/{project['id']}/assets")).json()
    assert assets[0]["usage_count"] == 0


async def test_compile_empty_script_rejected(client, project):
    script = await _create(client, project, content="   \n")
    resp = await client.post(_url(project, script, "/compile"))
    assert resp.status_code == 400
    assert resp.json() == {"error": "Script has no content"}


async def test_title_edit_keeps_compiled_flag(client, project):
    script = await _create(client, project, content=SCRIPT)
    await client.post(_url(project, script, "/compile"))

    resp = await client.patch(_url(project, script), json={"title": "Pilot"})
    assert resp.json()["title"] == "Pilot"
    assert resp.json()["compiled"] is True


async def test_delete_script_detaches_scenes(client, project):
    script = await _create(client, project, content=SCRIPT)
    await client.post(_url(project, script, "/compile"))

    resp = await client.delete(_url(project, script))
    assert resp.json() == {"success": True}
    assert (await client.get(_url(project, script))).status_code == 404

    scenes = (await client.get(f"/api/projects/{project['id']}/scenes")).json()
    assert len(scenes) == 2
    assert all(s["script_id"] is None for s in scenes)


async def test_script_from_other_project_is_404(client, project):
    script = await _create(client, project, content=SCRIPT)
    other = (await client.post("/api/projects", json={"name": "Other"})).json()
    resp = await client.post(f"/api/projects/{other['id']}/scripts/{script['id']}/compile")
    assert resp.status_code == 404
