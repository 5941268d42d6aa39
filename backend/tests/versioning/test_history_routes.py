from uuid import uuid4

import pytest

from collaboration.infrastructure.yjs_adapter import create_doc


@pytest.fixture
def session(registry, presence):
    doc = create_doc()
    session = registry.open(uuid4(), doc=doc, presence=presence)
    doc["content"] += "Hello"
    presence.state = {"user": {"name": "Bob", "color": "#0000ff"}}
    doc["content"] += " world"
    del doc["content"][0:6]
    return session


async def test_list_edits(client, session):
    resp = await client.get(f"/api/history/{session.document_id}/edits")
    assert resp.status_code == 200
    data = resp.json()
    assert [e["operation"] for e in data] == ["insert", "insert", "delete"]
    assert data[0]["content"] == "Hello"
    assert data[2]["content"] is None
    assert "update" not in data[0]


async def test_filter_edits(client, session):
    resp = await client.get(
        f"/api/history/{session.document_id}/edits", params={"user": "Bob"}
    )
    assert len(resp.json()) == 2

    resp = await client.get(
        f"/api/history/{session.document_id}/edits", params={"operation": "delete"}
    )
    assert len(resp.json()) == 1

    first = session.recorder.get_edits()[0].timestamp
    resp = await client.get(
        f"/api/history/{session.document_id}/edits", params={"start": first, "end": first}
    )
    assert len(resp.json()) >= 1


async def test_timeline(client, session):
    resp = await client.get(f"/api/history/{session.document_id}/timeline")
    assert resp.status_code == 200
    data = resp.json()
    assert list(data) == ["Alice", "Bob"]
    assert len(data["Bob"]) == 2


async def test_statistics(client, session):
    resp = await client.get(f"/api/history/{session.document_id}/statistics")
    assert resp.status_code == 200
    data = resp.json()
    assert data["total_edits"] == 3
    assert data["total_snapshots"] == 2
    assert data["edits_by_user"] == {"Alice": 1, "Bob": 2}
    assert data["edits_by_type"] == {"insert": 2, "delete": 1}


async def test_export(client, session):
    resp = await client.get(f"/api/history/{session.document_id}/export")
    assert resp.status_code == 200
    data = resp.json()
    assert len(data["edits"]) == 3
    assert isinstance(data["edits"][0]["update"], str)
    assert "export_time" in data


async def test_archive(client, session):
    resp = await client.post(f"/api/history/{session.document_id}/archive")
    assert resp.status_code == 200
    assert resp.json() == {"archived_edits": 3, "archived_snapshots": 2}
    assert session.recorder.edit_count == 0


async def test_archived_history(client, session):
    await client.post(f"/api/history/{session.document_id}/archive")

    resp = await client.get(f"/api/history/{session.document_id}/archived")
    assert resp.status_code == 200
    data = resp.json()
    assert [e["operation"] for e in data["edits"]] == ["insert", "insert", "delete"]
    assert [s["edit_index"] for s in data["snapshots"]] == [-1, 2]

    resp = await client.get(f"/api/history/{uuid4()}/archived")
    assert resp.json()["edits"] == []


async def test_unknown_document(client):
    resp = await client.get(f"/api/history/{uuid4()}/edits")
    assert resp.status_code == 404
