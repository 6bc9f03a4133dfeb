"""Tests for file record routes — upsert, listing, tree view, download."""

import pytest
import pytest_asyncio
from httpx import AsyncClient

from workspace_sync.utils.hashing import md5_bytes


@pytest_asyncio.fixture
async def workspace_id(client: AsyncClient, auth_headers) -> int:
    resp = await client.post("/api/workspaces", json={"name": "ws"}, headers=auth_headers)
    return resp.json()["id"]


async def _put(client, headers, workspace_id, path, content=b"data", etag=None):
    data = {"file_path": path}
    if etag:
        data["etag"] = etag
    return await client.post(
        f"/api/workspaces/{workspace_id}/records",
        data=data,
        files={"file": ("upload.bin", content, "application/octet-stream")},
        headers=headers,
    )


@pytest.mark.asyncio
async def test_save_creates_record(client, auth_headers, workspace_id, storage):
    resp = await _put(client, auth_headers, workspace_id, "/img/a.png", b"hello")
    assert resp.status_code == 200
    data = resp.json()
    assert data["file_path"] == "img/a.png"
    assert data["size"] == 5
    assert data["etag"] == md5_bytes(b"hello")
    assert data["modifier"]["username"] == "alice"
    assert storage.resolve(workspace_id, "img/a.png").read_bytes() == b"hello"


@pytest.mark.asyncio
async def test_rewrite_updates_same_record(client, auth_headers, workspace_id):
    first = (await _put(client, auth_headers, workspace_id, "a.txt", b"v1")).json()
    second = (await _put(client, auth_headers, workspace_id, "a.txt", b"version2", etag="e2")).json()

    assert second["id"] == first["id"]
    assert second["etag"] == "e2"
    assert second["size"] == 8

    resp = await client.get(f"/api/workspaces/{workspace_id}/records", headers=auth_headers)
    assert len(resp.json()["records"]) == 1


@pytest.mark.asyncio
async def test_file_cannot_become_directory(client, auth_headers, workspace_id):
    assert (await _put(client, auth_headers, workspace_id, "a")).status_code == 200

    resp = await _put(client, auth_headers, workspace_id, "a/b.txt")

    assert resp.status_code == 409
    resp = await client.get(f"/api/workspaces/{workspace_id}/tree", headers=auth_headers)
    assert [(n["path"], n["is_directory"]) for n in resp.json()["records"]] == [("/a", False)]


@pytest.mark.asyncio
async def test_directory_cannot_become_file(client, auth_headers, workspace_id):
    assert (await _put(client, auth_headers, workspace_id, "x/y/z.txt")).status_code == 200

    for path in ("x", "x/y"):
        resp = await _put(client, auth_headers, workspace_id, path)
        assert resp.status_code == 409

    resp = await _put(client, auth_headers, workspace_id, "x/y2.txt")
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_bad_path_rejected(client, auth_headers, workspace_id):
    resp = await _put(client, auth_headers, workspace_id, "../escape.txt")
    assert resp.status_code == 422
    resp = await _put(client, auth_headers, workspace_id, "///")
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_save_into_unknown_workspace(client, auth_headers):
    resp = await _put(client, auth_headers, 999, "a.txt")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_tree(client, auth_headers, workspace_id):
    for path in ("x/y.png", "x/z.png", "w.png"):
        await _put(client, auth_headers, workspace_id, path)

    resp = await client.get(f"/api/workspaces/{workspace_id}/tree", headers=auth_headers)
    assert resp.status_code == 200
    roots = resp.json()["records"]
    assert [n["path"] for n in roots] == ["/x", "/w.png"]
    x = roots[0]
    assert x["is_directory"] is True
    assert x["etag"] == "dir-x"
    assert [c["name"] for c in x["children"]] == ["y.png", "z.png"]
    assert roots[1]["children"] is None


@pytest.mark.asyncio
async def test_tree_empty_workspace(client, auth_headers, workspace_id):
    resp = await client.get(f"/api/workspaces/{workspace_id}/tree", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["records"] == []


@pytest.mark.asyncio
async def test_tree_unknown_workspace(client, auth_headers):
    resp = await client.get("/api/workspaces/999/tree", headers=auth_headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_tree_is_idempotent(client, auth_headers, workspace_id):
    for path in ("a/b/c.txt", "a/d.txt", "e.txt"):
        await _put(client, auth_headers, workspace_id, path)

    first = await client.get(f"/api/workspaces/{workspace_id}/tree", headers=auth_headers)
    second = await client.get(f"/api/workspaces/{workspace_id}/tree", headers=auth_headers)
    assert first.json() == second.json()


@pytest.mark.asyncio
async def test_download(client, auth_headers, workspace_id):
    record = (await _put(client, auth_headers, workspace_id, "docs/readme.md", b"# hi")).json()

    resp = await client.get(f"/api/records/{record['id']}/download", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.content == b"# hi"
    assert "readme.md" in resp.headers["content-disposition"]


@pytest.mark.asyncio
async def test_download_unknown_record(client, auth_headers):
    resp = await client.get("/api/records/999/download", headers=auth_headers)
    assert resp.status_code == 404
