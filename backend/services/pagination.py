import math
from dataclasses import dataclass
from typing import Callable, Generic, Iterator, Tuple, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    """One offset-paginated slice of a listing. Iterating it can be repeated."""

    items: Tuple[T, ...]
    page: int
    page_size: int
    total: int

    @property
    def last_page(self) -> int:
        return max(1, math.ceil(self.total / self.page_size))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def to_dict(self, serialize: Callable[[T], dict]) -> dict:
        return {
            "data": [serialize(it) for it in self.items],
            "page": self.page,
            "page_size": self.page_size,
            "total": self.total,
            "last_page": self.last_page,
        }
