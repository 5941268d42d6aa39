from dataclasses import dataclass, field
from enum import StrEnum


class OperationKind(StrEnum):
    INSERT = "insert"
    DELETE = "delete"
    FORMAT = "format"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class EditPosition:
    key: str
    offset: int = 0


@dataclass(frozen=True)
class VersionedEdit:
    id: str
    timestamp: int
    client_id: int
    user_name: str
    operation: OperationKind
    position: EditPosition
    update: bytes = field(repr=False)
    content: str | None = None
    content_length: int | None = None


@dataclass(frozen=True)
class Snapshot:
    id: str
    timestamp: int
    state: bytes = field(repr=False)
    edit_index: int = -1
    doc_length: int = 0


@dataclass(frozen=True)
class HistoryStatistics:
    total_edits: int
    total_snapshots: int
    edits_by_user: dict[str, int]
    edits_by_type: dict[str, int]
    time_span: int


@dataclass(frozen=True)
class HistoryExport:
    edits: list[VersionedEdit]
    snapshots: list[Snapshot]
    export_time: int
