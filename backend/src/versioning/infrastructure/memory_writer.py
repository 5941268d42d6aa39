from versioning.domain.entities import Snapshot, VersionedEdit


class InMemoryHistoryWriter:
    """Append-only edit log and snapshot store kept in process memory."""

    def __init__(self) -> None:
        self.edits: list[VersionedEdit] = []
        self.snapshots: list[Snapshot] = []

    def append_edit(self, edit: VersionedEdit) -> None:
        self.edits.append(edit)

    def put_snapshot(self, snapshot: Snapshot) -> None:
        self.snapshots.append(snapshot)
