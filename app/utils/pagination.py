"""
Generic paginated list/search helper shared by every listing endpoint.

Counterpart of the list endpoints' query builder: takes a filtered query,
applies a free-text search over a set of columns, orders and slices it.
"""
import math
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from sqlalchemy import String, cast, func, or_


@dataclass
class PaginationResult:
    """One page of a listing plus the counters the API envelope exposes."""
    data: List[Any] = field(default_factory=list)
    total: int = 0
    page: int = 0
    per_page: int = 0
    page_counts: int = 0


def apply_search(query, search: Optional[str], search_columns: Sequence):
    """Case-insensitive substring match OR-ed over search_columns."""
    if not search or not search_columns:
        return query
    pattern = f"%{search.strip().lower()}%"
    return query.filter(or_(*[
        func.lower(cast(column, String)).like(pattern) for column in search_columns
    ]))


def paginate(query, search: Optional[str] = None, search_columns: Sequence = (),
             order_by: Sequence = (), page: Optional[int] = None,
             per_page: Optional[int] = None, max_per_page: Optional[int] = None) -> PaginationResult:
    """
    Run a paginated listing query.

    Args:
        query: Filtered SQLAlchemy query (rows or entities)
        search: Free-text term, ignored when empty
        search_columns: Columns the term is matched against
        order_by: ORDER BY clauses, applied as given
        page: 1-based page number
        per_page: Page size
        max_per_page: Upper bound for per_page

    Returns:
        PaginationResult. Without page and per_page the whole result set is
        returned and page, per_page and page_counts are 0.
    """
    query = apply_search(query, search, search_columns)
    total = query.order_by(None).count()

    if order_by:
        query = query.order_by(*order_by)

    if page is None or per_page is None:
        return PaginationResult(data=query.all(), total=total)

    if page < 1:
        raise ValueError('page must be >= 1')
    if per_page < 1:
        raise ValueError('per_page must be >= 1')
    if max_per_page:
        per_page = min(per_page, max_per_page)

    rows = query.limit(per_page).offset((page - 1) * per_page).all()
    return PaginationResult(
        data=rows,
        total=total,
        page=page,
        per_page=per_page,
        page_counts=math.ceil(total / per_page) if total else 0
    )
