from collections.abc import Sequence

from versioning.domain.entities import (
    HistoryExport,
    HistoryStatistics,
    OperationKind,
    Snapshot,
    VersionedEdit,
)


def find_edits_by_user(edits: Sequence[VersionedEdit], user_name: str) -> list[VersionedEdit]:
    return [edit for edit in edits if edit.user_name == user_name]


def find_edits_by_time_range(
    edits: Sequence[VersionedEdit], start: int, end: int
) -> list[VersionedEdit]:
    """Edits with ``start <= timestamp <= end``."""
    return [edit for edit in edits if start <= edit.timestamp <= end]


def find_edits_by_operation(
    edits: Sequence[VersionedEdit], operation: OperationKind
) -> list[VersionedEdit]:
    return [edit for edit in edits if edit.operation == operation]


def get_edit_timeline(edits: Sequence[VersionedEdit]) -> dict[str, list[VersionedEdit]]:
    """Group edits by user, users in order of their first edit."""
    timeline: dict[str, list[VersionedEdit]] = {}
    for edit in edits:
        timeline.setdefault(edit.user_name, []).append(edit)
    return timeline


def get_statistics(
    edits: Sequence[VersionedEdit], snapshots: Sequence[Snapshot]
) -> HistoryStatistics:
    edits_by_user: dict[str, int] = {}
    edits_by_type: dict[str, int] = {}
    for edit in edits:
        edits_by_user[edit.user_name] = edits_by_user.get(edit.user_name, 0) + 1
        edits_by_type[edit.operation.value] = edits_by_type.get(edit.operation.value, 0) + 1

    time_span = edits[-1].timestamp - edits[0].timestamp if edits else 0

    return HistoryStatistics(
        total_edits=len(edits),
        total_snapshots=len(snapshots),
        edits_by_user=edits_by_user,
        edits_by_type=edits_by_type,
        time_span=time_span,
    )


def export_history(
    edits: Sequence[VersionedEdit], snapshots: Sequence[Snapshot], export_time: int
) -> HistoryExport:
    return HistoryExport(edits=list(edits), snapshots=list(snapshots), export_time=export_time)
