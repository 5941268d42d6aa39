from uuid import uuid4

import pytest

from collaboration.infrastructure.yjs_adapter import create_doc


@pytest.fixture
def session(registry, presence):
    doc = create_doc()
    session = registry.open(uuid4(), doc=doc, presence=presence)
    for word in ["The", " quick", " brown", " fox"]:
        doc["content"] += word
    return session


async def test_seek_by_edit_index(client, session):
    resp = await client.post(
        f"/api/playback/{session.document_id}/seek", json={"edit_index": 1}
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["text"] == "The quick"
    assert data["current_edit_index"] == 2
    assert data["total_edits"] == 4
    assert data["state"] == "seeked"


async def test_seek_by_timestamp(client, session):
    last = session.recorder.get_edits()[-1].timestamp
    resp = await client.post(
        f"/api/playback/{session.document_id}/seek", json={"timestamp": last}
    )
    assert resp.status_code == 200
    assert resp.json()["text"] == "The quick brown fox"


async def test_seek_requires_one_target(client, session):
    resp = await client.post(f"/api/playback/{session.document_id}/seek", json={})
    assert resp.status_code == 422

    resp = await client.post(
        f"/api/playback/{session.document_id}/seek", json={"timestamp": 1, "edit_index": 0}
    )
    assert resp.status_code == 422


async def test_seek_invalid_index(client, session):
    resp = await client.post(
        f"/api/playback/{session.document_id}/seek", json={"edit_index": 4}
    )
    assert resp.status_code == 400


async def test_start_end_and_steps(client, session):
    base = f"/api/playback/{session.document_id}"

    resp = await client.post(f"{base}/start")
    assert resp.json()["text"] == ""

    resp = await client.post(f"{base}/step-forward")
    assert resp.json()["text"] == "The"

    resp = await client.post(f"{base}/end")
    assert resp.json()["text"] == "The quick brown fox"

    resp = await client.post(f"{base}/step-backward")
    data = resp.json()
    assert data["text"] == "The quick brown"
    assert data["current_edit_index"] == 3


async def test_playback_after_archive(client, session):
    await client.post(f"/api/history/{session.document_id}/archive")
    session.doc["content"] += " jumps"

    resp = await client.post(f"/api/playback/{session.document_id}/end")
    data = resp.json()
    assert data["text"] == "The quick brown fox jumps"
    assert data["current_edit_index"] == 1
    assert data["total_edits"] == 1

    resp = await client.post(
        f"/api/playback/{session.document_id}/seek", json={"edit_index": 0}
    )
    assert resp.json()["text"] == "The quick brown fox jumps"


async def test_seek_archived_history(client, session):
    await client.post(f"/api/history/{session.document_id}/archive")

    resp = await client.post(
        f"/api/playback/{session.document_id}/archived/seek", json={"edit_index": 2}
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["text"] == "The quick brown"
    assert data["current_edit_index"] == 3
    assert data["total_edits"] == 4

    resp = await client.post(
        f"/api/playback/{uuid4()}/archived/seek", json={"edit_index": 0}
    )
    assert resp.status_code == 400

async def test_set_speed(client, session):
    resp = await client.put(
        f"/api/playback/{session.document_id}/speed", json={"speed": 2.5}
    )
    assert resp.status_code == 200
    assert resp.json()["speed"] == 2.5

    resp = await client.put(
        f"/api/playback/{session.document_id}/speed", json={"speed": 0}
    )
    assert resp.status_code == 400


async def test_unknown_document(client):
    resp = await client.post(f"/api/playback/{uuid4()}/start")
    assert resp.status_code == 404


async def test_health(client):
    resp = await client.get("/health")
    assert resp.json() == {"status": "ok"}
