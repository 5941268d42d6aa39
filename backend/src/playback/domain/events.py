from dataclasses import dataclass
from enum import StrEnum
from typing import Literal

from versioning.domain.entities import VersionedEdit


class PlaybackState(StrEnum):
    IDLE = "idle"
    SEEKED = "seeked"
    PLAYING_FORWARD = "playing_forward"
    PLAYING_BACKWARD = "playing_backward"


class Direction(StrEnum):
    FORWARD = "forward"
    BACKWARD = "backward"


@dataclass(frozen=True)
class SeekEvent:
    current_edit_index: int
    total_edits: int
    timestamp: int
    kind: Literal["seek"] = "seek"


@dataclass(frozen=True)
class PlaybackStepEvent:
    edit: VersionedEdit
    edit_index: int
    current_edit_index: int
    total_edits: int
    direction: Direction
    kind: Literal["playback"] = "playback"

    @property
    def timestamp(self) -> int:
        return self.edit.timestamp


@dataclass(frozen=True)
class StopEvent:
    current_edit_index: int
    total_edits: int
    completed: bool
    kind: Literal["stop"] = "stop"


@dataclass(frozen=True)
class SpeedChangeEvent:
    speed: float
    current_edit_index: int
    kind: Literal["speed-change"] = "speed-change"


PlaybackEvent = SeekEvent | PlaybackStepEvent | StopEvent | SpeedChangeEvent
