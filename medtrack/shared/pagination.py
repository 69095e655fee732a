"""Bounded page/pageSize handling shared by every list endpoint."""

import math
from typing import Any, Generic, List, Mapping, TypeVar

from fastapi import Query
from pydantic import BaseModel

from medtrack.shared.constants import SortOrder
from medtrack.shared.schemas import CamelModel

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
# Keeps the computed skip within a signed 64-bit BSON integer.
MAX_PAGE = (2**63 - 1) // MAX_PAGE_SIZE

ItemT = TypeVar("ItemT")


class PageParams(BaseModel):
    page: int
    page_size: int
    skip: int
    take: int


class PageMeta(CamelModel):
    total: int
    page: int
    page_size: int
    total_pages: int


class Page(CamelModel, Generic[ItemT]):
    items: List[ItemT]
    meta: PageMeta


def _coerce_int(value: Any, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default


def parse_pagination(raw: Mapping[str, Any]) -> PageParams:
    """Normalize raw ``page``/``pageSize`` inputs into in-range offsets.

    Never raises: missing or unparseable values take the defaults and
    out-of-range values are clamped to the nearest bound.
    """
    page = min(MAX_PAGE, max(1, _coerce_int(raw.get("page"), DEFAULT_PAGE)))
    raw_size = raw.get("pageSize", raw.get("page_size"))
    page_size = min(MAX_PAGE_SIZE, max(1, _coerce_int(raw_size, DEFAULT_PAGE_SIZE)))
    return PageParams(
        page=page,
        page_size=page_size,
        skip=(page - 1) * page_size,
        take=page_size,
    )


def build_meta(total: int, page: int, page_size: int) -> PageMeta:
    # An empty result still reports one (empty) page.
    total_pages = max(1, math.ceil(total / page_size))
    return PageMeta(total=total, page=page, page_size=page_size, total_pages=total_pages)


def pagination_params(
    page: str | None = Query(None, description="1-based page number"),
    page_size: str | None = Query(
        None, alias="pageSize", description="Items per page (1-100)"
    ),
) -> PageParams:
    """Expose page/pageSize as permissive strings so bad values clamp instead of 400."""
    return parse_pagination({"page": page, "pageSize": page_size})


def sort_spec(field: str, order: SortOrder) -> str:
    """Build a Beanie sort string such as ``-created_at``."""
    return f"{'-' if order == SortOrder.DESC else '+'}{field}"
