import time
from collections.abc import Callable

import structlog
from pycrdt import Doc

from collaboration.infrastructure.presence import PresenceSource, current_user_name
from collaboration.infrastructure.yjs_adapter import (
    apply_update,
    encode_state_as_update,
    get_text,
    observe_updates,
    restore_doc,
)
from shared.config import settings
from shared.exceptions import TrackingError
from shared.observers import ListenerRegistry
from versioning.application import queries
from versioning.application.classifier import classify_change
from versioning.application.snapshots import SnapshotStore
from versioning.domain.entities import (
    EditPosition,
    HistoryExport,
    HistoryStatistics,
    Snapshot,
    VersionedEdit,
)
from versioning.domain.repository import HistoryWriter

logger = structlog.get_logger(__name__)

HistoryListener = Callable[[list[VersionedEdit], list[Snapshot]], None]


def now_ms() -> int:
    return int(time.time() * 1000)


class EditRecorder:
    """Records every delta of a tracked document as a VersionedEdit.

    The recorder keeps a private replica of the tracked document so that the
    text immediately before each delta is always available; the replica also
    backs the periodic snapshots.
    """

    def __init__(
        self,
        snapshot_interval: int = settings.SNAPSHOT_INTERVAL,
        *,
        text_key: str = settings.TEXT_KEY,
        clock: Callable[[], int] = now_ms,
        writer: HistoryWriter | None = None,
    ):
        if isinstance(snapshot_interval, bool) or not isinstance(snapshot_interval, int):
            raise ValueError("snapshot_interval must be an integer")
        if snapshot_interval <= 0:
            raise ValueError("snapshot_interval must be a positive integer")

        self.snapshot_interval = snapshot_interval
        self.text_key = text_key
        self._clock = clock
        self._writer = writer
        self._edits: list[VersionedEdit] = []
        self._snapshots = SnapshotStore(text_key)
        self._listeners: ListenerRegistry[[list[VersionedEdit], list[Snapshot]]] = ListenerRegistry()
        self._edit_counter = 0
        self._last_timestamp = 0
        self._replica: Doc | None = None
        self._teardown: Callable[[], None] | None = None

    # Tracking

    def initialize(self, doc: Doc, presence: PresenceSource) -> Callable[[], None]:
        """Start recording ``doc``; returns a function that stops recording."""
        if self._teardown is not None:
            raise TrackingError()

        self._replica = restore_doc(encode_state_as_update(doc), self.text_key)
        self._capture_snapshot()

        unobserve = observe_updates(doc, lambda update: self.record_update(update, presence))
        stopped = False

        def teardown() -> None:
            nonlocal stopped
            if stopped:
                return
            stopped = True
            unobserve()
            self._teardown = None
            logger.info("tracking_stopped", edits=len(self._edits))

        self._teardown = teardown
        logger.info(
            "tracking_started",
            client_id=presence.client_id,
            snapshot_interval=self.snapshot_interval,
        )
        return teardown

    @property
    def is_tracking(self) -> bool:
        return self._teardown is not None

    def record_update(self, update: bytes, presence: PresenceSource) -> VersionedEdit:
        """Classify and append one delta, then notify subscribers."""
        if self._replica is None:
            self._replica = restore_doc(text_key=self.text_key)

        timestamp = max(self._clock(), self._last_timestamp)
        self._last_timestamp = timestamp

        before = get_text(self._replica, self.text_key)
        apply_update(self._replica, update)
        after = get_text(self._replica, self.text_key)
        change = classify_change(before, after)

        client_id = presence.client_id
        edit = VersionedEdit(
            id=f"{client_id}-{timestamp}-{self._edit_counter}",
            timestamp=timestamp,
            client_id=client_id,
            user_name=current_user_name(presence),
            operation=change.operation,
            position=EditPosition(key=self.text_key, offset=change.offset),
            update=update,
            content=change.content,
            content_length=len(change.content) if change.content is not None else None,
        )
        self._edit_counter += 1
        self._edits.append(edit)
        if self._writer is not None:
            self._writer.append_edit(edit)

        logger.debug(
            "edit_recorded",
            edit_id=edit.id,
            operation=edit.operation.value,
            user=edit.user_name,
        )

        if len(self._edits) % self.snapshot_interval == 0:
            self._capture_snapshot()

        self._notify()
        return edit

    def _capture_snapshot(self) -> Snapshot:
        timestamp = max(self._clock(), self._last_timestamp)
        self._last_timestamp = timestamp
        snapshot = self._snapshots.capture(self._replica, len(self._edits) - 1, timestamp)
        if self._writer is not None:
            self._writer.put_snapshot(snapshot)
        logger.info(
            "snapshot_captured",
            snapshot_id=snapshot.id,
            edit_index=snapshot.edit_index,
            doc_length=snapshot.doc_length,
        )
        return snapshot

    # Reading

    def get_edits(self) -> list[VersionedEdit]:
        return list(self._edits)

    def get_snapshots(self) -> list[Snapshot]:
        return self._snapshots.all()

    @property
    def edit_count(self) -> int:
        return len(self._edits)

    def get_statistics(self) -> HistoryStatistics:
        return queries.get_statistics(self._edits, self._snapshots.all())

    def export_history(self) -> HistoryExport:
        return queries.export_history(self._edits, self._snapshots.all(), self._clock())

    # Subscriptions

    def subscribe(self, listener: HistoryListener) -> Callable[[], None]:
        return self._listeners.subscribe(listener)

    def _notify(self) -> None:
        self._listeners.emit(self.get_edits(), self.get_snapshots())

    def clear_history(self) -> None:
        cleared = len(self._edits)
        self._edits = []
        self._snapshots.clear()
        self._edit_counter = 0
        logger.info("history_cleared", edits=cleared)
        if self._replica is not None:
            # new baseline: later deltas build on text no edit holds anymore
            self._capture_snapshot()
        self._notify()
