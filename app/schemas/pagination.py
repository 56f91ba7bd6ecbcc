from typing import Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from app.core.config import settings

T = TypeVar("T")


class SortSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: str = ""
    direction: str = "ASC"

    @property
    def descending(self) -> bool:
        return str(self.direction or "").upper() == "DESC"


class PageRequest(BaseModel):
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default_factory=lambda: settings.SEARCH_DEFAULT_PAGE_SIZE, ge=1, le=settings.SEARCH_MAX_PAGE_SIZE)
    filter: str | None = None
    sort_by: str = ""
    sort_direction: str = "ASC"

    @property
    def sort(self) -> SortSpec:
        return SortSpec(field=self.sort_by, direction=self.sort_direction)


class PageResult(BaseModel, Generic[T]):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    items: List[T] = []
    total: int = 0
    has_next_page: bool = False
