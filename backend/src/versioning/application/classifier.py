from dataclasses import dataclass

from shared.config import settings
from versioning.domain.entities import OperationKind


@dataclass(frozen=True)
class Classification:
    operation: OperationKind
    offset: int = 0
    content: str | None = None


def _common_prefix_length(a: str, b: str) -> int:
    limit = min(len(a), len(b))
    i = 0
    while i < limit and a[i] == b[i]:
        i += 1
    return i


def extract_inserted_text(
    before: str,
    after: str,
    fallback_chars: int = settings.INSERT_FALLBACK_CHARS,
) -> tuple[int, str]:
    """Return ``(offset, text)`` for the span ``after`` gained over ``before``.

    The span is found when ``before`` survives intact as a prefix, a suffix,
    or split around a single insertion point. Anything else (several insertion
    points, or deletions mixed in) falls back to the head of ``after``.
    """
    gained = len(after) - len(before)
    if after.startswith(before):
        return len(before), after[len(before):]
    if after.endswith(before):
        return 0, after[:gained]

    offset = _common_prefix_length(before, after)
    if after[offset + gained:] == before[offset:]:
        return offset, after[offset:offset + gained]

    return 0, after[: min(fallback_chars, len(after))]


def classify_change(before: str, after: str) -> Classification:
    """Classify a delta by comparing the rendered text around it.

    Deleted and reformatted text is never captured.
    """
    if len(after) > len(before):
        offset, content = extract_inserted_text(before, after)
        return Classification(OperationKind.INSERT, offset, content)
    if len(after) < len(before):
        return Classification(OperationKind.DELETE, _common_prefix_length(before, after))
    if after != before:
        return Classification(OperationKind.FORMAT, _common_prefix_length(before, after))
    return Classification(OperationKind.UNKNOWN)
