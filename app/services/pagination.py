from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Any

from app.schemas.pagination import PageResult

if TYPE_CHECKING:
    from app.services.data_source import DataSource

_LOG = logging.getLogger("app.search")


def page_offset(page: int, page_size: int) -> int:
    return (page - 1) * page_size


def has_next_page(page: int, page_size: int, total: int) -> bool:
    if page_size <= 0:
        return False
    return page < math.ceil(total / page_size)


def to_page(source: "DataSource[Any]", page: int, page_size: int) -> PageResult[Any]:
    """Count everything the source matches, then fetch the 1-based ``page``.

    ``page`` and ``page_size`` are taken as given; request models are where
    non-positive values get rejected. A non-positive ``page_size`` yields an
    empty page with ``has_next_page`` false.
    """
    total = source.count()
    items = source.fetch(page_offset(page, page_size), page_size) if page_size > 0 else []
    _LOG.debug("page=%s page_size=%s total=%s fetched=%s", page, page_size, total, len(items))
    return PageResult[Any](items=items, total=total, has_next_page=has_next_page(page, page_size, total))
