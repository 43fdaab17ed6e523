import json

import pytest


def paragraph(text: str) -> str:
    return json.dumps({
        "type": "doc",
        "content": [{"type": "paragraph", "content": [{"type": "text", "text": text}]}]
    })


async def create(client, auth, owner="alice", **body):
    response = await client.post("/documents", json=body, headers=auth(owner))
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_health_and_root(client):
    assert (await client.get("/health")).json() == {"status": "ok"}
    assert (await client.get("/")).json()["message"] == "DocCollab API"


@pytest.mark.asyncio
async def test_mutation_without_identity_is_unauthorized(client, auth):
    response = await client.post("/documents", json={"title": "Plan"})

    assert response.status_code == 401
    assert response.json() == {"code": "UNAUTHORIZED", "message": "User not authenticated"}

    invalid = await client.post(
        "/documents", json={"title": "Plan"}, headers={"Authorization": "Bearer not-a-token"}
    )
    assert invalid.status_code == 401


@pytest.mark.asyncio
async def test_queries_without_identity_are_empty(client):
    assert (await client.get("/documents")).json() == []
    assert (await client.get("/documents/shared")).json() == []


@pytest.mark.asyncio
async def test_document_crud(client, auth):
    document = await create(client, auth, title="Plan", content=paragraph("hi"))
    assert document["owner_id"] == "alice"
    assert document["is_deleted"] is False

    fetched = await client.get(f"/documents/{document['uuid']}", headers=auth("alice"))
    assert fetched.json()["content"] == paragraph("hi")

    updated = await client.patch(
        f"/documents/{document['uuid']}", json={"title": "Plan v2"}, headers=auth("alice")
    )
    assert updated.status_code == 200
    assert updated.json()["title"] == "Plan v2"
    assert updated.json()["content"] == paragraph("hi")

    listed = await client.get("/documents", headers=auth("alice"))
    assert [d["uuid"] for d in listed.json()] == [document["uuid"]]

    deleted = await client.delete(f"/documents/{document['uuid']}", headers=auth("alice"))
    assert deleted.status_code == 204
    trash = await client.get("/documents/trash", headers=auth("alice"))
    assert [d["uuid"] for d in trash.json()] == [document["uuid"]]

    restored = await client.post(f"/documents/{document['uuid']}/restore", headers=auth("alice"))
    assert restored.json()["is_deleted"] is False


@pytest.mark.asyncio
async def test_default_title_is_dated(client, auth):
    first = await create(client, auth)
    second = await create(client, auth)

    assert second["title"] == f"{first['title']} (2)"


@pytest.mark.asyncio
async def test_error_responses(client, auth):
    document = await create(client, auth, title="Plan")
    url = f"/documents/{document['uuid']}"

    missing = await client.get(url, headers=auth("carol"))
    assert missing.status_code == 404
    assert missing.json()["code"] == "NOT_FOUND"

    await client.post(f"{url}/collaborators", json={"user_id": "bob", "role": "viewer"}, headers=auth("alice"))

    forbidden = await client.patch(url, json={"content": paragraph("x")}, headers=auth("bob"))
    assert forbidden.status_code == 403
    assert forbidden.json()["code"] == "FORBIDDEN"

    conflict = await client.post(
        f"{url}/collaborators", json={"user_id": "bob", "role": "editor"}, headers=auth("alice")
    )
    assert conflict.status_code == 409
    assert conflict.json()["code"] == "CONFLICT"


@pytest.mark.asyncio
async def test_sharing_flow(client, auth):
    document = await create(client, auth, title="Plan")
    url = f"/documents/{document['uuid']}"

    granted = await client.post(
        f"{url}/collaborators", json={"user_id": "bob", "role": "editor"}, headers=auth("alice")
    )
    assert granted.status_code == 201
    assert granted.json()["role"] == "editor"

    access = await client.get(f"{url}/access", headers=auth("bob"))
    assert access.json() == {"has_access": True, "role": "editor", "is_owner": False}

    shared = await client.get("/documents/shared", headers=auth("bob"))
    assert [(s["document"]["uuid"], s["role"]) for s in shared.json()] == [(document["uuid"], "editor")]

    downgraded = await client.patch(f"{url}/collaborators/bob", json={"role": "viewer"}, headers=auth("alice"))
    assert downgraded.json()["role"] == "viewer"

    transferred = await client.post(f"{url}/transfer", json={"new_owner_id": "bob"}, headers=auth("alice"))
    assert transferred.json()["owner_id"] == "bob"

    previous = await client.get(f"{url}/access", headers=auth("alice"))
    assert previous.json() == {"has_access": True, "role": "editor", "is_owner": False}

    left = await client.post(f"{url}/leave", headers=auth("alice"))
    assert left.status_code == 204
    assert (await client.get(f"{url}/access", headers=auth("alice"))).json()["has_access"] is False


@pytest.mark.asyncio
async def test_version_endpoints(client, auth):
    document = await create(client, auth, title="Plan", content=paragraph("one"))
    url = f"/documents/{document['uuid']}"

    version = await client.post(f"{url}/versions", headers=auth("alice"))
    assert version.status_code == 201
    version_id = version.json()["uuid"]

    auto = await client.post(f"{url}/versions/auto", headers=auth("alice"))
    assert auto.json() == {"created": False}

    await client.patch(url, json={"content": paragraph("two")}, headers=auth("alice"))
    second = (await client.post(f"{url}/versions", headers=auth("alice"))).json()

    count = await client.get(f"{url}/versions/count", headers=auth("alice"))
    assert count.json() == {"count": 2}

    comparison = await client.get(
        "/versions/compare", params={"first": version_id, "second": second["uuid"]}, headers=auth("alice")
    )
    assert comparison.status_code == 200
    assert "+two" in comparison.json()["diff"]

    restored = await client.post(f"/versions/{version_id}/restore", headers=auth("alice"))
    assert restored.json()["content"] == paragraph("one")

    history = await client.get(f"{url}/versions", headers=auth("alice"))
    assert len(history.json()) == 3

    hidden = await client.get(f"/versions/{version_id}", headers=auth("carol"))
    assert hidden.status_code == 404

    removed = await client.delete(f"/versions/{version_id}", headers=auth("alice"))
    assert removed.status_code == 204


@pytest.mark.asyncio
async def test_export_endpoints(client, auth):
    document = await create(client, auth, title="Q1: plan", content=paragraph("hi"))
    url = f"/documents/{document['uuid']}/export"

    markdown = await client.get(f"{url}/markdown", headers=auth("alice"))
    assert markdown.json()["content"] == "hi"
    assert markdown.json()["filename"] == "Q1_ plan.md"

    bare = await client.get(f"{url}/html", params={"include_styles": "false"}, headers=auth("alice"))
    assert bare.json()["content"] == "<p>hi</p>"

    download = await client.get(f"{url}/text", params={"download": "true"}, headers=auth("alice"))
    assert download.text == "hi"
    assert download.headers["content-type"].startswith("text/plain")
    assert download.headers["content-disposition"] == (
        "attachment; filename=\"Q1_ plan.txt\"; filename*=UTF-8''Q1_%20plan.txt"
    )

    denied = await client.get(f"{url}/json", headers=auth("carol"))
    assert denied.status_code == 404
    assert denied.json()["message"] == "Document not found or access denied"

    unknown = await client.get(f"{url}/pdf", headers=auth("alice"))
    assert unknown.status_code == 422


@pytest.mark.asyncio
async def test_download_of_non_latin_title(client, auth):
    document = await create(client, auth, title="Отчет", content=paragraph("итоги"))

    download = await client.get(
        f"/documents/{document['uuid']}/export/text", params={"download": "true"}, headers=auth("alice")
    )

    assert download.status_code == 200
    assert download.text == "итоги"
    disposition = download.headers["content-disposition"]
    assert disposition.startswith('attachment; filename="_____.txt"')
    assert "filename*=UTF-8''%D0%9E%D1%82%D1%87%D0%B5%D1%82.txt" in disposition


@pytest.mark.asyncio
async def test_export_of_deeply_nested_content(client, auth):
    document = await create(client, auth, title="Deep", content="[" * 200000)

    response = await client.get(f"/documents/{document['uuid']}/export/markdown", headers=auth("alice"))

    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_presence_endpoints(client, auth):
    document = await create(client, auth, title="Plan")
    url = f"/documents/{document['uuid']}"
    await client.post(f"{url}/collaborators", json={"user_id": "bob", "role": "viewer"}, headers=auth("alice"))

    mine = await client.put(
        f"{url}/presence",
        json={"cursor_position": 4, "selection": {"from": 1, "to": 3}},
        headers=auth("alice", "Alice")
    )
    assert mine.status_code == 200
    assert mine.json()["user_name"] == "Alice"
    assert mine.json()["selection"] == {"from": 1, "to": 3}

    await client.put(f"{url}/presence", json={}, headers=auth("bob", "Bob"))

    active = await client.get(f"{url}/presence/active", headers=auth("alice"))
    assert [p["user_id"] for p in active.json()] == ["bob"]

    count = await client.get(f"{url}/presence/count", headers=auth("alice"))
    assert count.json() == {"count": 2}

    assert (await client.put(f"{url}/presence/cursor", json={"cursor_position": 8}, headers=auth("alice"))).status_code == 204
    assert (await client.post(f"{url}/presence/heartbeat", headers=auth("alice"))).status_code == 204
    assert (await client.delete(f"{url}/presence", headers=auth("bob"))).status_code == 204

    assert (await client.get(f"{url}/presence/active", headers=auth("alice"))).json() == []

    outsider = await client.put(f"{url}/presence", json={}, headers=auth("carol"))
    assert outsider.status_code == 403


@pytest.mark.asyncio
async def test_folder_endpoints(client, auth):
    folder = await client.post("/folders", json={"name": "Work"}, headers=auth("alice"))
    assert folder.status_code == 201
    folder_id = folder.json()["uuid"]

    document = await create(client, auth, title="Plan", parent_folder_id=folder_id)
    assert document["parent_folder_id"] == folder_id

    listed = await client.get("/documents", params={"folder_id": folder_id}, headers=auth("alice"))
    assert [d["uuid"] for d in listed.json()] == [document["uuid"]]

    moved = await client.post(f"/documents/{document['uuid']}/move", json={"folder_id": None}, headers=auth("alice"))
    assert moved.json()["parent_folder_id"] is None

    cycle = await client.post(f"/folders/{folder_id}/move", json={"parent_id": folder_id}, headers=auth("alice"))
    assert cycle.status_code == 422
    assert cycle.json()["code"] == "VALIDATION_ERROR"
