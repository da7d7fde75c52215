"""
Pagination helpers
"""
from typing import Tuple
import math

from ..config import settings
from ..schemas import Pagination


def paginate(page: int, limit: int) -> Tuple[int, int]:
    """Clamp page/limit and return (skip, limit)"""
    page = max(1, page)
    limit = max(1, min(limit, settings.MAX_PAGE_SIZE))
    return (page - 1) * limit, limit


def build_pagination(page: int, limit: int, total: int) -> Pagination:
    """Build pagination metadata for a list response"""
    page = max(1, page)
    limit = max(1, min(limit, settings.MAX_PAGE_SIZE))
    return Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit))
