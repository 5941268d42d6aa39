from collections.abc import Sequence

from pycrdt import Doc

from collaboration.infrastructure.yjs_adapter import encode_state_as_update, get_text
from shared.config import settings
from versioning.domain.entities import Snapshot


def find_nearest_at_or_before(
    snapshots: Sequence[Snapshot],
    target_timestamp: int,
    max_edit_index: int | None = None,
) -> Snapshot | None:
    """Latest snapshot taken no later than ``target_timestamp``.

    With ``max_edit_index`` set, snapshots covering edits past that index are
    skipped as well.
    """
    closest: Snapshot | None = None
    for snapshot in snapshots:
        if snapshot.timestamp > target_timestamp:
            continue
        if max_edit_index is not None and snapshot.edit_index > max_edit_index:
            continue
        if closest is None or snapshot.timestamp >= closest.timestamp:
            closest = snapshot
    return closest


def find_nearest_for_index(snapshots: Sequence[Snapshot], edit_index: int) -> Snapshot | None:
    closest: Snapshot | None = None
    for snapshot in snapshots:
        if snapshot.edit_index <= edit_index and (
            closest is None or snapshot.edit_index >= closest.edit_index
        ):
            closest = snapshot
    return closest


class SnapshotStore:
    """Ordered full-state captures of a document, keyed by edit index."""

    def __init__(self, text_key: str = settings.TEXT_KEY):
        self.text_key = text_key
        self._snapshots: list[Snapshot] = []

    def capture(self, doc: Doc, edit_index: int, timestamp: int) -> Snapshot:
        snapshot = Snapshot(
            id=f"snap-{timestamp}-{len(self._snapshots)}",
            timestamp=timestamp,
            state=encode_state_as_update(doc),
            edit_index=edit_index,
            doc_length=len(get_text(doc, self.text_key)),
        )
        self._snapshots.append(snapshot)
        return snapshot

    def find_nearest_at_or_before(
        self, target_timestamp: int, max_edit_index: int | None = None
    ) -> Snapshot | None:
        return find_nearest_at_or_before(self._snapshots, target_timestamp, max_edit_index)

    def find_nearest_for_index(self, edit_index: int) -> Snapshot | None:
        return find_nearest_for_index(self._snapshots, edit_index)

    @property
    def latest(self) -> Snapshot | None:
        return self._snapshots[-1] if self._snapshots else None

    def all(self) -> list[Snapshot]:
        return list(self._snapshots)

    def clear(self) -> None:
        self._snapshots.clear()

    def __len__(self) -> int:
        return len(self._snapshots)
