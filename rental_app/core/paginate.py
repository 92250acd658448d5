import math
from typing import Generic, List, Type, TypeVar

from pydantic import BaseModel

from .exceptions import ValidationError
from .settings import settings

T = TypeVar("T", bound=BaseModel)


class Page(BaseModel, Generic[T]):
    items: List[T]
    total: int
    page: int
    limit: int
    total_pages: int


class PaginatePage:
    def normalize(self, page: int | None, limit: int | None) -> tuple[int, int]:
        page = page if page is not None else 1
        limit = limit if limit is not None else settings.DEFAULT_PAGE_LIMIT
        if page < 1:
            raise ValidationError("page must be a positive integer")
        if limit < 1 or limit > settings.MAX_PAGE_LIMIT:
            raise ValidationError(
                f"limit must be between 1 and {settings.MAX_PAGE_LIMIT}"
            )
        return page, limit

    def offset(self, page: int, limit: int) -> int:
        return (page - 1) * limit

    def build(
        self, items, total: int, page: int, limit: int, schema: Type[T]
    ) -> Page[T]:
        return Page[schema](
            items=[schema.model_validate(item) for item in items],
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit) if total else 0,
        )

    def get_single_json_dumps(self, schema: BaseModel) -> dict:
        return schema.model_dump(mode="json")
