from uuid import UUID

import structlog

from versioning.application.recorder import EditRecorder
from versioning.domain.entities import HistoryExport, Snapshot, VersionedEdit
from versioning.domain.repository import HistoryRepository

logger = structlog.get_logger(__name__)


async def archive_history(
    repo: HistoryRepository, document_id: UUID, recorder: EditRecorder
) -> HistoryExport:
    """Persist the recorder's in-memory history, then clear it."""
    export = recorder.export_history()
    await repo.save_history(document_id, export.edits, export.snapshots)
    recorder.clear_history()
    logger.info(
        "history_archived",
        document_id=str(document_id),
        edits=len(export.edits),
        snapshots=len(export.snapshots),
    )
    return export


async def load_history(
    repo: HistoryRepository, document_id: UUID
) -> tuple[list[VersionedEdit], list[Snapshot]]:
    edits = await repo.list_edits(document_id)
    snapshots = await repo.list_snapshots(document_id)
    return edits, snapshots
