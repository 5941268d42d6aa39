import asyncio
from collections.abc import Awaitable, Callable, Sequence

import structlog
from pycrdt import Doc

from collaboration.infrastructure.yjs_adapter import apply_update, get_text, restore_doc
from playback.domain.events import (
    Direction,
    PlaybackEvent,
    PlaybackState,
    PlaybackStepEvent,
    SeekEvent,
    SpeedChangeEvent,
    StopEvent,
)
from shared.config import settings
from shared.exceptions import InvalidIndexError, InvalidSpeedError, PlaybackInProgressError
from shared.observers import ListenerRegistry
from versioning.application.snapshots import find_nearest_at_or_before, find_nearest_for_index
from versioning.domain.entities import Snapshot, VersionedEdit

logger = structlog.get_logger(__name__)

PlaybackListener = Callable[[PlaybackEvent, Doc], None]
Sleep = Callable[[float], Awaitable[None]]

Edits = Sequence[VersionedEdit]
Snapshots = Sequence[Snapshot]


class PlaybackEngine:
    """Materializes a document at any point of its edit log.

    The engine never holds on to the log: every call receives the current
    ``edits`` and ``snapshots``. Its own state is the current index (the
    number of edits applied to the materialized document), the playing flag,
    the speed and the document itself.

    Deltas cannot be undone, so every backward move rebuilds the document
    from the nearest snapshot at or before the new index. Stepping or playing
    from idle starts at the initial snapshot, which holds any text the document
    had before recording began; ``seek_to_start`` always yields an empty one.
    """

    def __init__(
        self,
        *,
        text_key: str = settings.TEXT_KEY,
        max_delay_ms: int = settings.MAX_PLAYBACK_DELAY_MS,
        sleep: Sleep = asyncio.sleep,
    ):
        self.text_key = text_key
        self.max_delay_ms = max_delay_ms
        self._sleep = sleep
        self._listeners: ListenerRegistry[[PlaybackEvent, Doc]] = ListenerRegistry()
        self._doc: Doc | None = None
        self._current_index = 0
        self._is_playing = False
        self._loop_active = False
        self._speed = 1.0
        self._state = PlaybackState.IDLE
        self._paused_direction: Direction | None = None

    # State

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def current_edit_index(self) -> int:
        return self._current_index

    @property
    def is_playing(self) -> bool:
        return self._is_playing

    @property
    def playback_speed(self) -> float:
        return self._speed

    def get_playback_speed(self) -> float:
        return self._speed

    def get_playback_document(self) -> Doc:
        return self._doc if self._doc is not None else restore_doc(text_key=self.text_key)

    def get_text(self) -> str:
        return get_text(self.get_playback_document(), self.text_key)

    # Seeking

    def seek_to_timestamp(self, target: int, edits: Edits, snapshots: Snapshots) -> Doc:
        self._ensure_no_loop()
        doc = self._materialize(edits, snapshots, target, len(edits))
        self._state = PlaybackState.SEEKED
        logger.debug("seek", target=target, current_edit_index=self._current_index)
        self._emit(SeekEvent(self._current_index, len(edits), target))
        return doc

    def seek_to_edit_index(self, index: int, edits: Edits, snapshots: Snapshots) -> Doc:
        """Materialize exactly edits ``[0..index]``."""
        self._ensure_no_loop()
        if index < 0 or index >= len(edits):
            raise InvalidIndexError(index, len(edits))

        target = edits[index].timestamp
        doc = self._materialize(edits, snapshots, target, index + 1)
        self._state = PlaybackState.SEEKED
        logger.debug("seek", edit_index=index, current_edit_index=self._current_index)
        self._emit(SeekEvent(self._current_index, len(edits), target))
        return doc

    def seek_to_start(self, edits: Edits, snapshots: Snapshots) -> Doc:
        self._ensure_no_loop()
        self._doc = restore_doc(text_key=self.text_key)
        self._current_index = 0
        self._state = PlaybackState.SEEKED
        self._emit(SeekEvent(0, len(edits), edits[0].timestamp if edits else 0))
        return self._doc

    def seek_to_end(self, edits: Edits, snapshots: Snapshots) -> Doc:
        if not edits:
            return self.seek_to_start(edits, snapshots)
        return self.seek_to_timestamp(edits[-1].timestamp, edits, snapshots)

    def _materialize(self, edits: Edits, snapshots: Snapshots, target: int, stop_index: int) -> Doc:
        snapshot = find_nearest_at_or_before(snapshots, target, max_edit_index=stop_index - 1)
        doc = restore_doc(snapshot.state if snapshot else None, self.text_key)
        index = snapshot.edit_index + 1 if snapshot else 0

        while index < stop_index:
            edit = edits[index]
            if edit.timestamp > target:
                break
            apply_update(doc, edit.update)
            index += 1

        self._doc = doc
        self._current_index = index
        return doc

    def _rebuild_to(self, count: int, edits: Edits, snapshots: Snapshots) -> Doc:
        """Materialize the first ``count`` edits."""
        snapshot = find_nearest_for_index(snapshots, count - 1)
        doc = restore_doc(snapshot.state if snapshot else None, self.text_key)
        start = snapshot.edit_index + 1 if snapshot else 0
        for edit in edits[start:count]:
            apply_update(doc, edit.update)

        self._doc = doc
        self._current_index = count
        return doc

    # Stepping

    def step_forward(self, edits: Edits, snapshots: Snapshots) -> Doc:
        self._ensure_no_loop()
        if self._doc is None:
            self._rebuild_to(0, edits, snapshots)
        self._state = PlaybackState.SEEKED

        if self._current_index < len(edits):
            self._apply_next(edits, None)
        return self._doc

    def step_backward(self, edits: Edits, snapshots: Snapshots) -> Doc:
        self._ensure_no_loop()
        if self._doc is None:
            self._rebuild_to(0, edits, snapshots)
        self._state = PlaybackState.SEEKED

        if self._current_index > 0:
            self._unapply_last(edits, snapshots, None)
        return self._doc

    def _apply_next(self, edits: Edits, on_update: PlaybackListener | None) -> VersionedEdit:
        index = self._current_index
        edit = edits[index]
        apply_update(self._doc, edit.update)
        self._current_index = index + 1
        self._dispatch(
            PlaybackStepEvent(edit, index, self._current_index, len(edits), Direction.FORWARD),
            on_update,
        )
        return edit

    def _unapply_last(
        self, edits: Edits, snapshots: Snapshots, on_update: PlaybackListener | None
    ) -> VersionedEdit:
        index = self._current_index - 1
        edit = edits[index]
        self._rebuild_to(index, edits, snapshots)
        self._dispatch(
            PlaybackStepEvent(edit, index, self._current_index, len(edits), Direction.BACKWARD),
            on_update,
        )
        return edit

    # Auto-play

    async def play_forward(
        self,
        edits: Edits,
        snapshots: Snapshots,
        on_update: PlaybackListener | None = None,
    ) -> bool:
        """Apply the remaining edits one by one, paced by their timestamps.

        Returns True when the end of the log was reached, False when paused.
        """
        self._start_loop(Direction.FORWARD)
        completed = False
        try:
            if self._doc is None:
                self._rebuild_to(0, edits, snapshots)

            while self._is_playing and self._current_index < len(edits):
                edit = self._apply_next(edits, on_update)
                if self._current_index < len(edits):
                    await self._sleep(self._delay_seconds(edit, edits[self._current_index]))

            completed = self._current_index >= len(edits)
        finally:
            self._finish_loop(Direction.FORWARD, completed)

        self._dispatch(StopEvent(self._current_index, len(edits), completed), on_update)
        return completed

    async def play_backward(
        self,
        edits: Edits,
        snapshots: Snapshots,
        on_update: PlaybackListener | None = None,
    ) -> bool:
        """Walk back to the start of the log, one edit per step.

        Returns True when index 0 was reached, False when paused.
        """
        self._start_loop(Direction.BACKWARD)
        completed = False
        try:
            if self._doc is None:
                self._rebuild_to(0, edits, snapshots)

            while self._is_playing and self._current_index > 0:
                edit = self._unapply_last(edits, snapshots, on_update)
                if self._current_index > 0:
                    await self._sleep(self._delay_seconds(edits[self._current_index - 1], edit))

            completed = self._current_index == 0
        finally:
            self._finish_loop(Direction.BACKWARD, completed)

        self._dispatch(StopEvent(self._current_index, len(edits), completed), on_update)
        return completed

    def pause(self) -> None:
        """Ask the running loop to stop before its next step."""
        self._is_playing = False
        logger.debug("pause_requested", current_edit_index=self._current_index)

    async def resume(
        self,
        edits: Edits,
        snapshots: Snapshots,
        on_update: PlaybackListener | None = None,
    ) -> bool:
        """Continue in the direction of the last paused loop (forward if none)."""
        if self._paused_direction is Direction.BACKWARD:
            return await self.play_backward(edits, snapshots, on_update)
        return await self.play_forward(edits, snapshots, on_update)

    def _delay_seconds(self, earlier: VersionedEdit, later: VersionedEdit) -> float:
        gap_ms = max(0, later.timestamp - earlier.timestamp)
        return min(self.max_delay_ms, gap_ms / self._speed) / 1000

    def _start_loop(self, direction: Direction) -> None:
        self._ensure_no_loop()
        self._loop_active = True
        self._is_playing = True
        self._paused_direction = None
        self._state = (
            PlaybackState.PLAYING_FORWARD
            if direction is Direction.FORWARD
            else PlaybackState.PLAYING_BACKWARD
        )
        logger.info("playback_started", direction=direction.value, speed=self._speed)

    def _finish_loop(self, direction: Direction, completed: bool) -> None:
        self._loop_active = False
        self._is_playing = False
        self._state = PlaybackState.SEEKED
        self._paused_direction = None if completed else direction
        logger.info(
            "playback_stopped",
            direction=direction.value,
            completed=completed,
            current_edit_index=self._current_index,
        )

    def _ensure_no_loop(self) -> None:
        if self._loop_active:
            raise PlaybackInProgressError()

    # Speed

    def set_playback_speed(self, speed: float) -> None:
        if not speed > 0:
            raise InvalidSpeedError(speed)
        self._speed = float(speed)
        logger.info("playback_speed_changed", speed=self._speed)
        self._emit(SpeedChangeEvent(self._speed, self._current_index))

    # Events

    def subscribe(self, listener: PlaybackListener) -> Callable[[], None]:
        return self._listeners.subscribe(listener)

    def _emit(self, event: PlaybackEvent) -> None:
        self._listeners.emit(event, self.get_playback_document())

    def _dispatch(self, event: PlaybackEvent, on_update: PlaybackListener | None) -> None:
        self._emit(event)
        if on_update is not None:
            on_update(event, self.get_playback_document())

    def reset(self) -> None:
        self._ensure_no_loop()
        self._doc = None
        self._current_index = 0
        self._is_playing = False
        self._speed = 1.0
        self._state = PlaybackState.IDLE
        self._paused_direction = None
