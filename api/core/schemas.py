"""
Request/response models shared by every entity's query endpoints.

Field constraints are deliberately loose: paging, filter and sort values are
checked by the table engine so callers get its Bad Request messages.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from .query import OrderBy


class OrderByRequest(BaseModel):
    column: str
    direction: str = "desc"


class CountRequest(BaseModel):
    where: dict[str, Any] = Field(default_factory=dict)


class ListRequest(CountRequest):
    items_per_page: int | None = None
    page_no: int = 1
    order_by: OrderByRequest | None = None

    def query_kwargs(self) -> dict[str, Any]:
        order_by = None
        if self.order_by is not None:
            order_by = OrderBy(column=self.order_by.column, direction=self.order_by.direction)
        return {
            "where": self.where,
            "items_per_page": self.items_per_page,
            "page_no": self.page_no,
            "order_by": order_by,
        }


class ColumnsResponse(BaseModel):
    sortable: list[str]
    filters: dict[str, list[str]]
