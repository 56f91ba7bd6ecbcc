from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import BigInteger, DateTime, Enum as SAEnum, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.session import Base
from app.models.common import AuditMixin, UUIDMixin


class DocumentType(str, Enum):
    KYC = "KYC"
    CONTRACT = "CONTRACT"
    FORM = "FORM"
    SUPPORTING_DOCUMENT = "SUPPORTING_DOCUMENT"
    OTHER = "OTHER"


class Channel(str, Enum):
    BRANCH = "BRANCH"
    DIGITAL = "DIGITAL"
    BACKOFFICE = "BACKOFFICE"
    OTHER = "OTHER"


class DocumentStatus(str, Enum):
    RECEIVED = "RECEIVED"
    SENT = "SENT"
    FAILED = "FAILED"


class Document(Base, UUIDMixin, AuditMixin):
    __tablename__ = "documents"

    filename: Mapped[str] = mapped_column(String(500), nullable=False)
    content_type: Mapped[str] = mapped_column(String(150), nullable=False)
    document_type: Mapped[DocumentType] = mapped_column(SAEnum(DocumentType, native_enum=False, length=40), nullable=False)
    channel: Mapped[Channel] = mapped_column(SAEnum(Channel, native_enum=False, length=40), nullable=False)
    customer_id: Mapped[str | None] = mapped_column(String(100), index=True, nullable=True)
    status: Mapped[DocumentStatus] = mapped_column(
        SAEnum(DocumentStatus, native_enum=False, length=20),
        nullable=False,
        default=DocumentStatus.RECEIVED,
        index=True,
    )
    url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    size: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    upload_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    correlation_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
