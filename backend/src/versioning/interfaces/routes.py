import sys
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from collaboration.application.sessions import SessionRegistry
from shared.dependencies import get_db, get_session_registry
from versioning.application import queries
from versioning.application.recorder import now_ms
from versioning.application.services import archive_history, load_history
from versioning.domain.entities import OperationKind
from versioning.infrastructure.history_repository import DbHistoryRepository
from versioning.interfaces.schemas import (
    ArchiveResponse,
    EditResponse,
    HistoryExportSchema,
    StatisticsResponse,
)

router = APIRouter(prefix="/api/history", tags=["history"])


@router.get("/{document_id}/edits", response_model=list[EditResponse])
async def list_edits(
    document_id: UUID,
    user: str | None = None,
    start: int | None = None,
    end: int | None = None,
    operation: OperationKind | None = None,
    registry: SessionRegistry = Depends(get_session_registry),
):
    edits = registry.get(document_id).recorder.get_edits()
    if user is not None:
        edits = queries.find_edits_by_user(edits, user)
    if start is not None or end is not None:
        edits = queries.find_edits_by_time_range(
            edits, start or 0, end if end is not None else sys.maxsize
        )
    if operation is not None:
        edits = queries.find_edits_by_operation(edits, operation)
    return edits


@router.get("/{document_id}/timeline", response_model=dict[str, list[EditResponse]])
async def timeline(
    document_id: UUID,
    registry: SessionRegistry = Depends(get_session_registry),
):
    return queries.get_edit_timeline(registry.get(document_id).recorder.get_edits())


@router.get("/{document_id}/statistics", response_model=StatisticsResponse)
async def statistics(
    document_id: UUID,
    registry: SessionRegistry = Depends(get_session_registry),
):
    return registry.get(document_id).recorder.get_statistics()


@router.get("/{document_id}/export", response_model=HistoryExportSchema)
async def export(
    document_id: UUID,
    registry: SessionRegistry = Depends(get_session_registry),
):
    return HistoryExportSchema.from_entity(registry.get(document_id).recorder.export_history())


@router.post("/{document_id}/archive", response_model=ArchiveResponse)
async def archive(
    document_id: UUID,
    registry: SessionRegistry = Depends(get_session_registry),
    db: AsyncSession = Depends(get_db),
):
    repo = DbHistoryRepository(db)
    exported = await archive_history(repo, document_id, registry.get(document_id).recorder)
    return ArchiveResponse(
        archived_edits=len(exported.edits),
        archived_snapshots=len(exported.snapshots),
    )


@router.get("/{document_id}/archived", response_model=HistoryExportSchema)
async def archived(document_id: UUID, db: AsyncSession = Depends(get_db)):
    edits, snapshots = await load_history(DbHistoryRepository(db), document_id)
    return HistoryExportSchema.from_entity(queries.export_history(edits, snapshots, now_ms()))
