import base64

from pydantic import BaseModel, field_serializer, field_validator

from versioning.domain.entities import (
    EditPosition,
    HistoryExport,
    OperationKind,
    Snapshot,
    VersionedEdit,
)


def _decode_bytes(value):
    if isinstance(value, str):
        return base64.b64decode(value)
    return value


class EditPositionSchema(BaseModel):
    key: str
    offset: int = 0


class EditResponse(BaseModel):
    id: str
    timestamp: int
    client_id: int
    user_name: str
    operation: OperationKind
    position: EditPositionSchema
    content: str | None = None
    content_length: int | None = None


class VersionedEditSchema(EditResponse):
    update: bytes

    @field_validator("update", mode="before")
    @classmethod
    def decode_update(cls, value):
        return _decode_bytes(value)

    @field_serializer("update")
    def encode_update(self, value: bytes) -> str:
        return base64.b64encode(value).decode("ascii")

    @classmethod
    def from_entity(cls, edit: VersionedEdit) -> "VersionedEditSchema":
        return cls(
            id=edit.id,
            timestamp=edit.timestamp,
            client_id=edit.client_id,
            user_name=edit.user_name,
            operation=edit.operation,
            position=EditPositionSchema(key=edit.position.key, offset=edit.position.offset),
            content=edit.content,
            content_length=edit.content_length,
            update=edit.update,
        )

    def to_entity(self) -> VersionedEdit:
        return VersionedEdit(
            id=self.id,
            timestamp=self.timestamp,
            client_id=self.client_id,
            user_name=self.user_name,
            operation=self.operation,
            position=EditPosition(key=self.position.key, offset=self.position.offset),
            update=self.update,
            content=self.content,
            content_length=self.content_length,
        )


class SnapshotSchema(BaseModel):
    id: str
    timestamp: int
    state: bytes
    edit_index: int
    doc_length: int

    @field_validator("state", mode="before")
    @classmethod
    def decode_state(cls, value):
        return _decode_bytes(value)

    @field_serializer("state")
    def encode_state(self, value: bytes) -> str:
        return base64.b64encode(value).decode("ascii")

    @classmethod
    def from_entity(cls, snapshot: Snapshot) -> "SnapshotSchema":
        return cls(
            id=snapshot.id,
            timestamp=snapshot.timestamp,
            state=snapshot.state,
            edit_index=snapshot.edit_index,
            doc_length=snapshot.doc_length,
        )

    def to_entity(self) -> Snapshot:
        return Snapshot(
            id=self.id,
            timestamp=self.timestamp,
            state=self.state,
            edit_index=self.edit_index,
            doc_length=self.doc_length,
        )


class HistoryExportSchema(BaseModel):
    edits: list[VersionedEditSchema]
    snapshots: list[SnapshotSchema]
    export_time: int

    @classmethod
    def from_entity(cls, export: HistoryExport) -> "HistoryExportSchema":
        return cls(
            edits=[VersionedEditSchema.from_entity(e) for e in export.edits],
            snapshots=[SnapshotSchema.from_entity(s) for s in export.snapshots],
            export_time=export.export_time,
        )

    def to_entity(self) -> HistoryExport:
        return HistoryExport(
            edits=[e.to_entity() for e in self.edits],
            snapshots=[s.to_entity() for s in self.snapshots],
            export_time=self.export_time,
        )


class StatisticsResponse(BaseModel):
    total_edits: int
    total_snapshots: int
    edits_by_user: dict[str, int]
    edits_by_type: dict[str, int]
    time_span: int


class ArchiveResponse(BaseModel):
    archived_edits: int
    archived_snapshots: int


def dump_history_json(export: HistoryExport) -> str:
    """Serialize an export; byte payloads are base64 encoded."""
    return HistoryExportSchema.from_entity(export).model_dump_json()


def load_history_json(data: str | bytes) -> HistoryExport:
    return HistoryExportSchema.model_validate_json(data).to_entity()
