import uuid
from datetime import datetime

from sqlalchemy import BigInteger, Integer, LargeBinary, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from shared.infrastructure.database import Base


class EditLogModel(Base):
    __tablename__ = "edit_log"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    document_id: Mapped[uuid.UUID] = mapped_column(index=True, nullable=False)
    seq: Mapped[int] = mapped_column(Integer, nullable=False)
    edit_id: Mapped[str] = mapped_column(String(128), nullable=False)
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)
    client_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    user_name: Mapped[str] = mapped_column(String(255), nullable=False)
    operation: Mapped[str] = mapped_column(String(16), nullable=False)
    position_key: Mapped[str] = mapped_column(String(255), nullable=False)
    position_offset: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    content_length: Mapped[int | None] = mapped_column(Integer, nullable=True)
    update_data: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())


class EditSnapshotModel(Base):
    __tablename__ = "edit_snapshots"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    document_id: Mapped[uuid.UUID] = mapped_column(index=True, nullable=False)
    snapshot_id: Mapped[str] = mapped_column(String(128), nullable=False)
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)
    state: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    edit_index: Mapped[int] = mapped_column(Integer, nullable=False)
    doc_length: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
