from collections.abc import Callable

from pycrdt import Doc, Text, TransactionEvent

from shared.config import settings

# Encoded update of a transaction that changed nothing
EMPTY_UPDATE = b"\x00\x00"


def create_doc(text_key: str = settings.TEXT_KEY) -> Doc:
    doc = Doc()
    doc[text_key] = Text()
    return doc


def apply_update(doc: Doc, update: bytes) -> None:
    doc.apply_update(update)


def encode_state_as_update(doc: Doc) -> bytes:
    return doc.get_update()


def get_text(doc: Doc, text_key: str = settings.TEXT_KEY) -> str:
    return str(doc[text_key])


def restore_doc(state: bytes | None = None, text_key: str = settings.TEXT_KEY) -> Doc:
    """Build a fresh doc, optionally seeded from an encoded full state."""
    doc = create_doc(text_key)
    if state:
        doc.apply_update(state)
    return doc


def observe_updates(doc: Doc, callback: Callable[[bytes], None]) -> Callable[[], None]:
    """Call ``callback`` with the encoded delta of every non-empty transaction.

    Returns a function that stops observing.
    """

    def _on_transaction(event: TransactionEvent) -> None:
        update = event.update
        if update and update != EMPTY_UPDATE:
            callback(update)

    subscription = doc.observe(_on_transaction)

    def unobserve() -> None:
        doc.unobserve(subscription)

    return unobserve
