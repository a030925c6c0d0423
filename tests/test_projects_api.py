"""API tests for projects, stats, error rendering and system endpoints."""


async def test_create_project_applies_defaults(client):
    resp = await client.post("/api/projects", json={"name": "Neon Harbor"})
    assert resp.status_code == 201
    project = resp.json()
    assert project["id"].startswith("PRJ_")
    assert project["visual_style"] == "anime cinematic realism"
    assert project["base_model"] == "SDXL"
    assert project["default_sampler"] == "DPM++"
    assert project["status"] == "active"


async def test_create_project_requires_name(client):
    resp = await client.post("/api/projects", json={})
    assert resp.status_code == 400
    assert "name" in resp.json()["error"]


async def test_list_get_update_delete(client, project):
    resp = await client.get("/api/projects")
    assert [p["id"] for p in resp.json()] == [project["id"]]

    resp = await client.patch(
        f"/api/projects/{project['id']}",
        json={"name": "Neon Harbor II", "status": "archived"},
    )
    assert resp.status_code == 200
    assert resp.json()["name"] == "Neon Harbor II"
    assert resp.json()["status"] == "archived"

    resp = await client.delete(f"/api/projects/{project['id']}")
    assert resp.json() == {"success": True}

    resp = await client.get(f"/api/projects/{project['id']}")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Project not found"}


async def test_invalid_status_rejected(client, project):
    resp = await client.patch(f"/api/projects/{project['id']}", json={"status": "deleted"})
    assert resp.status_code == 400


async def test_sub_resources_404_for_unknown_project(client, db_tables):
    for path in ("assets", "scripts", "scenes", "exports"):
        resp = await client.get(f"/api/projects/PRJ_MISSING/{path}")
        assert resp.status_code == 404


async def test_delete_project_removes_children(client, project, make_asset, make_scene):
    asset = await make_asset(visual_prompt="a courier in a yellow raincoat")
    scene = await make_scene(title="Docks")
    await client.put(
        f"/api/projects/{project['id']}/scenes/{scene['id']}/assets",
        json={"assets": [{"asset_id": asset["id"]}]},
    )

    resp = await client.delete(f"/api/projects/{project['id']}")
    assert resp.status_code == 200

    resp = await client.post("/api/projects", json={"name": "Other"})
    other = resp.json()
    stats = (await client.get(f"/api/projects/{other['id']}/stats")).json()
    assert stats["assetCount"] == 0


async def test_stats(client, project, make_asset, make_scene):
    pid = project["id"]
    await make_asset(name="Mira", type="character", locked=True)
    await make_asset(name="Harbor", type="environment")
    await make_asset(name="Kite", type="character")
    await make_scene(title="One")
    await client.post(f"/api/projects/{pid}/scripts", json={"title": "Draft"})

    resp = await client.get(f"/api/projects/{pid}/stats")
    assert resp.status_code == 200
    stats = resp.json()
    assert stats["assetCount"] == 3
    assert stats["sceneCount"] == 1
    assert stats["scriptCount"] == 1
    assert stats["lockedAssets"] == 1
    assert stats["renderedScenes"] == 0
    assert {(t["type"], t["count"]) for t in stats["assetsByType"]} == {
        ("character", 2),
        ("environment", 1),
    }
    assert len(stats["recentAssets"]) == 3
    assert stats["recentScenes"][0]["title"] == "One"


async def test_health_and_metrics(client):
    resp = await client.get("/health")
    assert resp.json()["status"] == "healthy"
    assert resp.json()["image_provider"] == "mock"

    resp = await client.get("/api/system/metrics")
    assert resp.status_code == 200
    body = resp.json()
    assert body["services"][0]["service"] == "image_gen"
    assert body["engine"] == "Mock"


async def test_list_newest_first_within_same_second(client, db_tables):
    ids = []
    for name in ("A", "B", "C"):
        ids.append((await client.post("/api/projects", json={"name": name})).json()["id"])

    listed = [p["id"] for p in (await client.get("/api/projects")).json()]
    assert listed == ids[::-1]
