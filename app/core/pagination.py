# ============================================================================
# FILE: app/core/pagination.py
# ============================================================================
from dataclasses import dataclass
from typing import Any, List, Optional
import math
from app.config import settings

@dataclass(frozen=True)
class Pagination:
    page: int
    page_size: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def take(self) -> int:
        return self.page_size

    def page_of(self, items: List[Any], total: int) -> dict:
        """Build the ``{items, pagination}`` payload for a page of results"""
        return {
            "items": items,
            "pagination": {
                "page": self.page,
                "pageSize": self.page_size,
                "total": total,
                "totalPages": math.ceil(total / self.page_size) if total else 0,
            },
        }

def parse_pagination(page: Optional[int] = None, page_size: Optional[int] = None) -> Pagination:
    """Clamp raw query values into a valid page window"""
    parsed_page = max(page or 1, 1)
    parsed_size = min(max(page_size or settings.DEFAULT_PAGE_SIZE, 1), settings.MAX_PAGE_SIZE)
    return Pagination(page=parsed_page, page_size=parsed_size)
