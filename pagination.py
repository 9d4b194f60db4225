"""Incremental "load more" window over a list of results."""
from typing import List, TypeVar

T = TypeVar('T')

DEFAULT_PAGE_SIZE = 50


class Paginator:
    """Tracks how many rows of the filtered list are visible."""

    def __init__(self, page_size: int = DEFAULT_PAGE_SIZE):
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self.page_size = page_size
        self.visible_count = page_size

    def load_more(self) -> int:
        """Grow the window by one page. There is no upper bound."""
        self.visible_count += self.page_size
        return self.visible_count

    def reset(self) -> None:
        self.visible_count = self.page_size

    def window(self, items: List[T]) -> List[T]:
        return items[:self.visible_count]

    def has_more(self, items: List[T]) -> bool:
        """Whether the "Load More" control should be offered."""
        return len(items) > self.visible_count

    def remaining(self, items: List[T]) -> int:
        return max(len(items) - self.visible_count, 0)
