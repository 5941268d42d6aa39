from typing import Protocol
from uuid import UUID

from versioning.domain.entities import Snapshot, VersionedEdit


class EditLogWriter(Protocol):
    def append_edit(self, edit: VersionedEdit) -> None: ...


class SnapshotBlobStore(Protocol):
    def put_snapshot(self, snapshot: Snapshot) -> None: ...


class HistoryWriter(EditLogWriter, SnapshotBlobStore, Protocol):
    pass


class HistoryRepository(Protocol):
    async def count_edits(self, document_id: UUID) -> int: ...

    async def save_history(
        self,
        document_id: UUID,
        edits: list[VersionedEdit],
        snapshots: list[Snapshot],
    ) -> None: ...

    async def list_edits(self, document_id: UUID) -> list[VersionedEdit]: ...

    async def list_snapshots(self, document_id: UUID) -> list[Snapshot]: ...

    async def delete_history(self, document_id: UUID) -> None: ...
