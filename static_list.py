from typing import Generic, Iterator, List, Optional, TypeVar

T = TypeVar("T")

STATIC_SIZE = 25


class StaticList(Generic[T]):
    """
    A list with a hard capacity that never grows.

    The backing storage is allocated once, so clearing and refilling the
    list (which happens for every node touched by the search) does not
    allocate. Pushing past capacity or reading past the current length
    raises IndexError; both mean the caller sized the list wrong.
    """

    __slots__ = ("_mem", "_len", "capacity")

    def __init__(self, capacity: int = STATIC_SIZE):
        self.capacity = capacity
        self._mem: List[Optional[T]] = [None] * capacity
        self._len = 0

    def push(self, item: T):
        if self._len >= self.capacity:
            raise IndexError(f"Too many items {self._len + 1} (capacity {self.capacity})")
        self._mem[self._len] = item
        self._len += 1

    def get(self, index: int) -> T:
        if not 0 <= index < self._len:
            raise IndexError(f"index {index} out of range for length {self._len}")
        item = self._mem[index]
        if item is None:
            raise IndexError(f"slot {index} is unset")
        return item

    def clear(self):
        self._len = 0

    def __len__(self) -> int:
        return self._len

    def __getitem__(self, index: int) -> T:
        return self.get(index)

    def __iter__(self) -> Iterator[T]:
        for i in range(self._len):
            yield self._mem[i]

    def __repr__(self):
        return f"StaticList({list(self)!r}, capacity={self.capacity})"
