from pydantic import BaseModel, model_validator

from playback.domain.events import PlaybackState


class SeekRequest(BaseModel):
    timestamp: int | None = None
    edit_index: int | None = None

    @model_validator(mode="after")
    def _exactly_one_target(self) -> "SeekRequest":
        if (self.timestamp is None) == (self.edit_index is None):
            raise ValueError("Provide exactly one of timestamp or edit_index")
        return self


class SpeedRequest(BaseModel):
    speed: float


class PlaybackResponse(BaseModel):
    text: str
    current_edit_index: int
    total_edits: int
    state: PlaybackState
    speed: float
