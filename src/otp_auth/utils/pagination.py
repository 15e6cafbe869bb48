"""Pagination helpers for list endpoints."""

from __future__ import annotations

from urllib.parse import urlencode, urlsplit, urlunsplit, parse_qsl

from pydantic import BaseModel

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
# Keeps the row offset within SQLite's 64-bit integers
MAX_PAGE = (2**63 - 1) // MAX_PAGE_SIZE


class Pagination(BaseModel):
    """Metadata describing one page of a listing."""

    page: int
    page_size: int
    total: int
    total_pages: int
    next_page: str | None = None
    prev_page: str | None = None
    has_next: bool
    has_prev: bool


def parse_params(page: str | None, page_size: str | None) -> tuple[int, int]:
    """Read raw query values, falling back to defaults.

    A *page* that is not a positive integer becomes 1.  A *page_size* that
    is not an integer in ``1..MAX_PAGE_SIZE`` becomes ``DEFAULT_PAGE_SIZE``.
    """
    parsed_page = _positive_int(page)
    parsed_size = _positive_int(page_size)
    if parsed_size is None or parsed_size > MAX_PAGE_SIZE:
        parsed_size = DEFAULT_PAGE_SIZE
    return parsed_page or 1, parsed_size


def _positive_int(value: str | None) -> int | None:
    if value is None or not value.isascii():
        return None
    try:
        number = int(value)
    except ValueError:
        return None
    return number if 0 < number <= MAX_PAGE else None


def offset_for(page: int, page_size: int) -> int:
    return (max(page, 1) - 1) * page_size


def build_pagination(page: int, page_size: int, total: int, base_url: str) -> Pagination:
    """Compute page counts and previous/next links for a listing."""
    total_pages = (total + page_size - 1) // page_size
    has_next = page < total_pages
    has_prev = page > 1
    return Pagination(
        page=page,
        page_size=page_size,
        total=total,
        total_pages=total_pages,
        next_page=_page_url(base_url, page + 1, page_size) if has_next else None,
        prev_page=_page_url(base_url, page - 1, page_size) if has_prev else None,
        has_next=has_next,
        has_prev=has_prev,
    )


def _page_url(base_url: str, page: int, page_size: int) -> str:
    parts = urlsplit(base_url)
    query = dict(parse_qsl(parts.query))
    query.update(page=str(page), page_size=str(page_size))
    return urlunsplit(parts._replace(query=urlencode(query)))
