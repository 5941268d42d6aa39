from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from collaboration.application.sessions import DocumentSession, SessionRegistry
from playback.application.engine import PlaybackEngine
from playback.interfaces.schemas import PlaybackResponse, SeekRequest, SpeedRequest
from shared.dependencies import get_db, get_session_registry
from versioning.application.services import load_history
from versioning.infrastructure.history_repository import DbHistoryRepository

router = APIRouter(prefix="/api/playback", tags=["playback"])


def _response(session: DocumentSession) -> PlaybackResponse:
    engine = session.engine
    return PlaybackResponse(
        text=engine.get_text(),
        current_edit_index=engine.current_edit_index,
        total_edits=session.recorder.edit_count,
        state=engine.state,
        speed=engine.playback_speed,
    )


@router.post("/{document_id}/seek", response_model=PlaybackResponse)
async def seek(
    document_id: UUID,
    body: SeekRequest,
    registry: SessionRegistry = Depends(get_session_registry),
):
    session = registry.get(document_id)
    edits = session.recorder.get_edits()
    snapshots = session.recorder.get_snapshots()
    if body.edit_index is not None:
        session.engine.seek_to_edit_index(body.edit_index, edits, snapshots)
    else:
        session.engine.seek_to_timestamp(body.timestamp, edits, snapshots)
    return _response(session)


@router.post("/{document_id}/start", response_model=PlaybackResponse)
async def seek_start(
    document_id: UUID,
    registry: SessionRegistry = Depends(get_session_registry),
):
    session = registry.get(document_id)
    session.engine.seek_to_start(session.recorder.get_edits(), session.recorder.get_snapshots())
    return _response(session)


@router.post("/{document_id}/end", response_model=PlaybackResponse)
async def seek_end(
    document_id: UUID,
    registry: SessionRegistry = Depends(get_session_registry),
):
    session = registry.get(document_id)
    session.engine.seek_to_end(session.recorder.get_edits(), session.recorder.get_snapshots())
    return _response(session)


@router.post("/{document_id}/step-forward", response_model=PlaybackResponse)
async def step_forward(
    document_id: UUID,
    registry: SessionRegistry = Depends(get_session_registry),
):
    session = registry.get(document_id)
    session.engine.step_forward(session.recorder.get_edits(), session.recorder.get_snapshots())
    return _response(session)


@router.post("/{document_id}/step-backward", response_model=PlaybackResponse)
async def step_backward(
    document_id: UUID,
    registry: SessionRegistry = Depends(get_session_registry),
):
    session = registry.get(document_id)
    session.engine.step_backward(session.recorder.get_edits(), session.recorder.get_snapshots())
    return _response(session)


@router.put("/{document_id}/speed", response_model=PlaybackResponse)
async def set_speed(
    document_id: UUID,
    body: SpeedRequest,
    registry: SessionRegistry = Depends(get_session_registry),
):
    session = registry.get(document_id)
    session.engine.set_playback_speed(body.speed)
    return _response(session)


@router.post("/{document_id}/archived/seek", response_model=PlaybackResponse)
async def seek_archived(
    document_id: UUID,
    body: SeekRequest,
    db: AsyncSession = Depends(get_db),
):
    """Materialize the archived history of a document, tracked or not."""
    edits, snapshots = await load_history(DbHistoryRepository(db), document_id)
    engine = PlaybackEngine()
    if body.edit_index is not None:
        engine.seek_to_edit_index(body.edit_index, edits, snapshots)
    else:
        engine.seek_to_timestamp(body.timestamp, edits, snapshots)
    return PlaybackResponse(
        text=engine.get_text(),
        current_edit_index=engine.current_edit_index,
        total_edits=len(edits),
        state=engine.state,
        speed=engine.playback_speed,
    )
