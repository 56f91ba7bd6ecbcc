from __future__ import annotations

import logging
from datetime import datetime

from app.models.document import Document
from app.schemas.documents import DocumentAsset, SearchDocumentsQuery
from app.schemas.pagination import PageRequest, PageResult, SortSpec
from app.services.data_source import DataSource, apply_filters, apply_sorting
from app.services.filter_coercion import as_utc
from app.services.pagination import to_page
from app.services.record_schema import RecordSchema

_LOG = logging.getLogger("app.search")

DOCUMENT_SCHEMA = RecordSchema.from_model(Document)


def _filter_datetime(value: datetime) -> str:
    return as_utc(value).strftime("%Y-%m-%dT%H:%M:%S")


def _filter_text(value: str) -> str:
    # The filter string is URL-decoded on parse; keep "%" and "+" literal.
    return value.replace("%", "%25").replace("+", "%2B")


def build_filter_string(query: SearchDocumentsQuery) -> str | None:
    filters: list[str] = []
    if query.upload_date_start is not None:
        filters.append(f"uploadDate ge '{_filter_datetime(query.upload_date_start)}'")
    if query.upload_date_end is not None:
        filters.append(f"uploadDate le '{_filter_datetime(query.upload_date_end)}'")
    if query.filename and query.filename.strip():
        filters.append(f"filename contains '{_filter_text(query.filename)}'")
    if query.content_type and query.content_type.strip():
        filters.append(f"contentType eq '{_filter_text(query.content_type)}'")
    if query.document_type is not None:
        filters.append(f"documentType eq '{query.document_type.value}'")
    if query.status is not None:
        filters.append(f"status eq '{query.status.value}'")
    if query.customer_id and query.customer_id.strip():
        filters.append(f"customerId eq '{_filter_text(query.customer_id)}'")
    if query.channel is not None:
        filters.append(f"channel eq '{query.channel.value}'")
    return " and ".join(filters) if filters else None


def search_documents(source: DataSource[Document], query: SearchDocumentsQuery) -> list[DocumentAsset]:
    filtered = apply_filters(source, build_filter_string(query))
    ordered = apply_sorting(filtered, SortSpec(field=query.effective_sort_by(), direction=query.effective_sort_direction()))
    documents = ordered.all()
    _LOG.info("search_documents: documents found=%s", len(documents))
    return [DocumentAsset.model_validate(document) for document in documents]


def search_documents_paged(source: DataSource[Document], request: PageRequest) -> PageResult[DocumentAsset]:
    query = apply_sorting(apply_filters(source, request.filter), request.sort)
    page = to_page(query, request.page, request.page_size)
    result = PageResult[DocumentAsset](
        items=[DocumentAsset.model_validate(document) for document in page.items],
        total=page.total,
        has_next_page=page.has_next_page,
    )
    _LOG.info(
        "search_documents_paged: documents found=%s total=%s page=%s",
        len(result.items),
        result.total,
        request.page,
    )
    return result
