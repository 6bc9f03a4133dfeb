"""Tests for sync routes — end-to-end batch, task detail and history queries."""

import pytest
import pytest_asyncio
from httpx import AsyncClient


@pytest_asyncio.fixture
async def workspace_id(client: AsyncClient, auth_headers) -> int:
    resp = await client.post("/api/workspaces", json={"name": "game"}, headers=auth_headers)
    ws_id = resp.json()["id"]
    for path in ("a/b.txt", "a/c.txt", "d.txt"):
        await client.post(
            f"/api/workspaces/{ws_id}/records",
            data={"file_path": path},
            files={"file": ("f", path.encode(), "text/plain")},
            headers=auth_headers,
        )
    return ws_id


def _files(*paths: str) -> list[dict]:
    return [
        {"path": f"/{p}", "name": p.rsplit("/", 1)[-1], "size": len(p), "etag": f"md5-{p}"}
        for p in paths
    ]


async def _sync(client, headers, workspace_id, paths, env="dev"):
    return await client.post(
        f"/api/workspaces/{workspace_id}/sync/{env}",
        json={"files": _files(*paths)},
        headers=headers,
    )


@pytest.mark.asyncio
async def test_sync_partial_failure(client, auth_headers, workspace_id, gateway):
    gateway.fail = {"a/c.txt": "Upload failed with status 403"}

    resp = await _sync(client, auth_headers, workspace_id, ["a/b.txt", "a/c.txt", "d.txt"])

    assert resp.status_code == 200
    task = resp.json()
    assert task["total_files"] == 3
    assert task["failed_files"] == 1
    assert task["status"] == "partial_success"
    assert task["target_env"] == "dev"
    assert task["workspace"]["name"] == "game"
    assert task["creator"]["username"] == "alice"

    uploaded = {path: content for path, content, _ in gateway.calls}
    assert uploaded["/a/b.txt"] == b"a/b.txt"

    resp = await client.get(f"/api/sync-tasks/{task['id']}", headers=auth_headers)
    assert resp.status_code == 200
    records = {r["file_path"]: r for r in resp.json()["records"]}
    assert records["/a/c.txt"]["status"] == "failed"
    assert records["/a/c.txt"]["error_message"] == "Upload failed with status 403"
    assert records["/a/b.txt"]["status"] == "success"
    assert records["/d.txt"]["status"] == "success"


@pytest.mark.asyncio
async def test_sync_all_failed_returns_task(client, auth_headers, workspace_id):
    resp = await _sync(client, auth_headers, workspace_id, ["missing1.txt", "missing2.txt"])
    assert resp.status_code == 200
    task = resp.json()
    assert task["status"] == "failed"
    assert task["failed_files"] == 2


@pytest.mark.asyncio
async def test_sync_empty_batch(client, auth_headers, workspace_id):
    resp = await _sync(client, auth_headers, workspace_id, [])
    assert resp.status_code == 200
    task = resp.json()
    assert (task["total_files"], task["failed_files"], task["status"]) == (0, 0, "success")


@pytest.mark.asyncio
async def test_sync_unknown_env(client, auth_headers, workspace_id):
    resp = await _sync(client, auth_headers, workspace_id, ["d.txt"], env="staging")
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_sync_unknown_workspace(client, auth_headers):
    resp = await _sync(client, auth_headers, 999, ["d.txt"])
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_unknown_task(client, auth_headers):
    resp = await client.get("/api/sync-tasks/999", headers=auth_headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_list_tasks_with_filters(client, auth_headers, workspace_id, gateway):
    gateway.fail = {"d.txt": "boom"}
    await _sync(client, auth_headers, workspace_id, ["a/b.txt"])
    await _sync(client, auth_headers, workspace_id, ["a/c.txt", "d.txt"], env="prod")

    resp = await client.get("/api/sync-tasks", headers=auth_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 2
    assert body["items"][0]["target_env"] == "prod"

    resp = await client.get(
        "/api/sync-tasks", params={"status": "partial_success"}, headers=auth_headers
    )
    assert resp.json()["total"] == 1

    resp = await client.get("/api/sync-tasks", params={"file_name": "b.txt"}, headers=auth_headers)
    items = resp.json()["items"]
    assert len(items) == 1
    assert items[0]["target_env"] == "dev"

    resp = await client.get(
        "/api/sync-tasks", params={"workspace_name": "nope"}, headers=auth_headers
    )
    assert resp.json() == {"total": 0, "items": []}

    resp = await client.get(
        "/api/sync-tasks", params={"modifier_name": "ali"}, headers=auth_headers
    )
    assert resp.json()["total"] == 2


@pytest.mark.asyncio
async def test_list_tasks_pagination(client, auth_headers, workspace_id):
    for _ in range(3):
        await _sync(client, auth_headers, workspace_id, ["d.txt"])

    resp = await client.get(
        "/api/sync-tasks", params={"page": 2, "page_size": 2}, headers=auth_headers
    )
    body = resp.json()
    assert body["total"] == 3
    assert len(body["items"]) == 1
