import random

import pytest

from minheap import MinHeap


def _drain(heap):
    out = []
    while heap:
        out.append(heap.extract_min())
    return out


def test_extracts_in_ascending_weight_order():
    rng = random.Random(7)
    weights = [rng.randrange(100) for _ in range(200)]
    heap = MinHeap()
    for i, w in enumerate(weights):
        heap.insert(w, i)
    assert len(heap) == 200
    assert [w for w, _ in _drain(heap)] == sorted(weights)
    assert len(heap) == 0


def test_equal_weights_come_out_in_insertion_order():
    heap = MinHeap()
    heap.insert(1, "a")
    heap.insert(1, "b")
    heap.insert(0, "z")
    heap.insert(1, "c")
    assert [item for _, item in _drain(heap)] == ["z", "a", "b", "c"]


def test_from_items_keeps_insertion_order_for_ties():
    heap = MinHeap.from_items([(2, "x"), (1, "y"), (2, "w"), (1, "v")])
    assert [item for _, item in _drain(heap)] == ["y", "v", "x", "w"]


def test_items_are_never_compared():
    heap = MinHeap()
    heap.insert(5, {"unorderable": 1})
    heap.insert(5, {"unorderable": 2})
    assert heap.extract_min() == (5, {"unorderable": 1})
    assert heap.extract_min() == (5, {"unorderable": 2})


def test_peek_does_not_remove():
    heap = MinHeap()
    heap.insert(3, "c")
    heap.insert(1, "a")
    assert heap.peek_min() == (1, "a")
    assert len(heap) == 2
    assert heap.extract_min() == (1, "a")


def test_empty_heap():
    heap = MinHeap()
    assert not heap
    with pytest.raises(IndexError):
        heap.extract_min()
    with pytest.raises(IndexError):
        heap.peek_min()
