import heapq
from itertools import count
from typing import Any, Iterable, List, Tuple


class MinHeap: # Priority queue ordered by ascending weight
    """
    Min-heap over (weight, item) pairs.

    Equal weights come out in insertion order: every entry carries a sequence
    number as its secondary key, so items themselves are never compared.
    """

    def __init__(self):
        self._entries: List[Tuple[float, int, Any]] = []
        self._seq = count()

    @classmethod
    def from_items(cls, pairs: Iterable[Tuple[float, Any]]) -> "MinHeap":
        heap = cls()
        heap._entries = [(weight, next(heap._seq), item) for weight, item in pairs]
        heapq.heapify(heap._entries) # O(k) instead of k inserts
        return heap

    def insert(self, weight, item) -> None:
        heapq.heappush(self._entries, (weight, next(self._seq), item))

    def extract_min(self) -> Tuple[float, Any]:
        if not self._entries:
            raise IndexError("extract_min from an empty heap")
        weight, _, item = heapq.heappop(self._entries)
        return weight, item

    def peek_min(self) -> Tuple[float, Any]:
        if not self._entries:
            raise IndexError("peek_min on an empty heap")
        weight, _, item = self._entries[0]
        return weight, item

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)
