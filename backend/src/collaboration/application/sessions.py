from collections.abc import Callable
from dataclasses import dataclass
from uuid import UUID

import structlog
from pycrdt import Awareness, Doc

from collaboration.infrastructure.presence import PresenceSource
from collaboration.infrastructure.yjs_adapter import create_doc
from playback.application.engine import PlaybackEngine
from shared.config import settings
from shared.exceptions import ConflictError, NotFoundError
from versioning.application.recorder import EditRecorder
from versioning.domain.repository import HistoryWriter

logger = structlog.get_logger(__name__)


@dataclass
class DocumentSession:
    document_id: UUID
    doc: Doc
    presence: PresenceSource
    recorder: EditRecorder
    engine: PlaybackEngine
    teardown: Callable[[], None]

    def close(self) -> None:
        self.teardown()


class SessionRegistry:
    """Tracked documents of this process, each with its recorder and player."""

    def __init__(self, snapshot_interval: int = settings.SNAPSHOT_INTERVAL):
        self.snapshot_interval = snapshot_interval
        self._sessions: dict[UUID, DocumentSession] = {}

    def open(
        self,
        document_id: UUID,
        doc: Doc | None = None,
        presence: PresenceSource | None = None,
        writer: HistoryWriter | None = None,
    ) -> DocumentSession:
        if document_id in self._sessions:
            raise ConflictError(f"Document is already tracked: {document_id}")

        doc = doc if doc is not None else create_doc()
        presence = presence if presence is not None else Awareness(doc)
        recorder = EditRecorder(self.snapshot_interval, writer=writer)
        teardown = recorder.initialize(doc, presence)

        session = DocumentSession(
            document_id=document_id,
            doc=doc,
            presence=presence,
            recorder=recorder,
            engine=PlaybackEngine(text_key=recorder.text_key),
            teardown=teardown,
        )
        self._sessions[document_id] = session
        logger.info("session_opened", document_id=str(document_id))
        return session

    def get(self, document_id: UUID) -> DocumentSession:
        session = self._sessions.get(document_id)
        if session is None:
            raise NotFoundError("Document session", str(document_id))
        return session

    def close(self, document_id: UUID) -> None:
        session = self._sessions.pop(document_id, None)
        if session is None:
            raise NotFoundError("Document session", str(document_id))
        session.close()
        logger.info("session_closed", document_id=str(document_id))

    def close_all(self) -> None:
        for document_id in list(self._sessions):
            self.close(document_id)

    def __contains__(self, document_id: UUID) -> bool:
        return document_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
