from versioning.application import queries
from versioning.domain.entities import EditPosition, OperationKind, VersionedEdit


def _edit(n: int, user: str, operation: OperationKind, timestamp: int) -> VersionedEdit:
    return VersionedEdit(
        id=f"1-{timestamp}-{n}",
        timestamp=timestamp,
        client_id=1,
        user_name=user,
        operation=operation,
        position=EditPosition("content"),
        update=b"",
    )


EDITS = [
    _edit(0, "Alice", OperationKind.INSERT, 1_000),
    _edit(1, "Bob", OperationKind.INSERT, 2_000),
    _edit(2, "Alice", OperationKind.DELETE, 3_000),
    _edit(3, "Carol", OperationKind.FORMAT, 4_000),
    _edit(4, "Bob", OperationKind.UNKNOWN, 6_500),
]


def test_find_edits_by_user():
    assert [e.id for e in queries.find_edits_by_user(EDITS, "Alice")] == ["1-1000-0", "1-3000-2"]
    assert queries.find_edits_by_user(EDITS, "Nobody") == []


def test_find_edits_by_time_range_is_inclusive():
    found = queries.find_edits_by_time_range(EDITS, 2_000, 4_000)
    assert [e.timestamp for e in found] == [2_000, 3_000, 4_000]


def test_find_edits_by_operation():
    assert len(queries.find_edits_by_operation(EDITS, OperationKind.INSERT)) == 2


def test_timeline_groups_by_first_appearance():
    timeline = queries.get_edit_timeline(EDITS)
    assert list(timeline) == ["Alice", "Bob", "Carol"]
    assert [e.timestamp for e in timeline["Bob"]] == [2_000, 6_500]


def test_statistics():
    stats = queries.get_statistics(EDITS, [])
    assert stats.total_edits == 5
    assert stats.total_snapshots == 0
    assert stats.edits_by_user == {"Alice": 2, "Bob": 2, "Carol": 1}
    assert stats.edits_by_type == {"insert": 2, "delete": 1, "format": 1, "unknown": 1}
    assert stats.time_span == 5_500


def test_statistics_of_empty_log():
    stats = queries.get_statistics([], [])
    assert stats.total_edits == 0
    assert stats.time_span == 0
    assert stats.edits_by_user == {}


def test_export_copies_logs():
    exported = queries.export_history(EDITS, [], 9_999)
    assert exported.edits == EDITS
    assert exported.edits is not EDITS
    assert exported.export_time == 9_999
