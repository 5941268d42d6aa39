from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from versioning.domain.entities import EditPosition, OperationKind, Snapshot, VersionedEdit
from versioning.infrastructure.models import EditLogModel, EditSnapshotModel


class DbHistoryRepository:
    """Append-only edit log and snapshot blobs, one history per document.

    ``seq`` numbers edits across every archived batch of a document, and
    snapshot ``edit_index`` values are stored in that same numbering.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def count_edits(self, document_id: UUID) -> int:
        result = await self.session.execute(
            select(func.count(EditLogModel.id)).where(EditLogModel.document_id == document_id)
        )
        return result.scalar_one()

    async def save_history(
        self,
        document_id: UUID,
        edits: list[VersionedEdit],
        snapshots: list[Snapshot],
    ) -> None:
        base_seq = await self.count_edits(document_id)
        for offset, edit in enumerate(edits):
            self.session.add(
                EditLogModel(
                    document_id=document_id,
                    seq=base_seq + offset,
                    edit_id=edit.id,
                    timestamp=edit.timestamp,
                    client_id=edit.client_id,
                    user_name=edit.user_name,
                    operation=edit.operation.value,
                    position_key=edit.position.key,
                    position_offset=edit.position.offset,
                    content=edit.content,
                    content_length=edit.content_length,
                    update_data=edit.update,
                )
            )
        for snapshot in snapshots:
            self.session.add(
                EditSnapshotModel(
                    document_id=document_id,
                    snapshot_id=snapshot.id,
                    timestamp=snapshot.timestamp,
                    state=snapshot.state,
                    edit_index=base_seq + snapshot.edit_index,
                    doc_length=snapshot.doc_length,
                )
            )
        await self.session.commit()

    async def list_edits(self, document_id: UUID) -> list[VersionedEdit]:
        result = await self.session.execute(
            select(EditLogModel)
            .where(EditLogModel.document_id == document_id)
            .order_by(EditLogModel.seq.asc())
        )
        return [_edit_to_entity(m) for m in result.scalars().all()]

    async def list_snapshots(self, document_id: UUID) -> list[Snapshot]:
        result = await self.session.execute(
            select(EditSnapshotModel)
            .where(EditSnapshotModel.document_id == document_id)
            .order_by(EditSnapshotModel.edit_index.asc(), EditSnapshotModel.timestamp.asc())
        )
        return [_snapshot_to_entity(m) for m in result.scalars().all()]

    async def delete_history(self, document_id: UUID) -> None:
        await self.session.execute(
            delete(EditLogModel).where(EditLogModel.document_id == document_id)
        )
        await self.session.execute(
            delete(EditSnapshotModel).where(EditSnapshotModel.document_id == document_id)
        )
        await self.session.commit()


def _edit_to_entity(model: EditLogModel) -> VersionedEdit:
    return VersionedEdit(
        id=model.edit_id,
        timestamp=model.timestamp,
        client_id=model.client_id,
        user_name=model.user_name,
        operation=OperationKind(model.operation),
        position=EditPosition(key=model.position_key, offset=model.position_offset),
        update=model.update_data,
        content=model.content,
        content_length=model.content_length,
    )


def _snapshot_to_entity(model: EditSnapshotModel) -> Snapshot:
    return Snapshot(
        id=model.snapshot_id,
        timestamp=model.timestamp,
        state=model.state,
        edit_index=model.edit_index,
        doc_length=model.doc_length,
    )
