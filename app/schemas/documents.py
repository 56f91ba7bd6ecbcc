from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from app.core.config import settings
from app.models.document import Channel, DocumentStatus, DocumentType


class DocumentAsset(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    filename: str
    content_type: str
    document_type: DocumentType
    channel: Channel
    customer_id: Optional[str] = None
    status: DocumentStatus
    url: Optional[str] = None
    size: int
    upload_date: datetime
    correlation_id: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, value):
        if isinstance(value, uuid.UUID):
            return str(value)
        return value


class SearchDocumentsQuery(BaseModel):
    upload_date_start: Optional[datetime] = None
    upload_date_end: Optional[datetime] = None
    filename: Optional[str] = None
    content_type: Optional[str] = None
    document_type: Optional[DocumentType] = None
    status: Optional[DocumentStatus] = None
    customer_id: Optional[str] = None
    channel: Optional[Channel] = None
    sort_by: str = ""
    sort_direction: str = ""

    def effective_sort_by(self) -> str:
        return self.sort_by.strip() or settings.SEARCH_DEFAULT_SORT_BY

    def effective_sort_direction(self) -> str:
        return self.sort_direction.strip() or settings.SEARCH_DEFAULT_SORT_DIRECTION
