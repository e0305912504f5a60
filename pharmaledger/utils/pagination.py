from sqlalchemy.orm import Query
from typing import TypeVar, List, Tuple

T = TypeVar("T")

MAX_PAGE_SIZE = 200

def paginate(query: Query, page: int, page_size: int) -> Tuple[List[T], int, int]:
    """
    Slice an ordered query into one page.
    Returns: (items, total_count, total_pages)
    """
    page = max(page, 1)
    page_size = min(max(page_size, 1), MAX_PAGE_SIZE)

    total = query.order_by(None).count()
    total_pages = (total + page_size - 1) // page_size
    items = query.offset((page - 1) * page_size).limit(page_size).all()

    return items, total, total_pages
