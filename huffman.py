"""
Greedy optimal prefix-free coding over in-memory symbol sequences.

    result = compress("AABBBCCCC")
    result.code_table              # {'C': '0', 'A': '10', 'B': '11'}
    result.encoded_bits            # '10101111110000'
    decode(result.encoded_bits, result.tree, "".join)  # 'AABBBCCCC'

The caller keeps ``result.tree`` (or ``result.code_table``) to decode later;
nothing here serializes the tree.
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from minheap import MinHeap


# Errors

class HuffmanError(ValueError):
    """Base class for structural (never transient) codec failures."""


class EmptyInput(HuffmanError):
    def __init__(self, message: str = "cannot compress an empty sequence"):
        super().__init__(message)


class UnknownSymbol(HuffmanError):
    def __init__(self, symbol):
        super().__init__(f"symbol {symbol!r} has no entry in the code table")
        self.symbol = symbol


class MalformedBitStream(HuffmanError):
    def __init__(self, message: str, position: int):
        super().__init__(f"{message} (bit {position})")
        self.position = position # index of the offending bit, or stream length if it ended early


# Tree nodes

@dataclass(frozen=True, eq=False)
class Leaf:
    symbol: Any
    weight: int


@dataclass(frozen=True, eq=False)
class Internal:
    weight: int # always left.weight + right.weight
    left: Node
    right: Node


Node = Union[Leaf, Internal]


def frequency_table(data: Sequence) -> Mapping[Any, int]: # symbol -> count, first-occurrence order
    counts = Counter(data)
    if not counts:
        raise EmptyInput()
    return MappingProxyType(dict(counts))


def build_huffman_tree(frequency_table: Mapping[Any, int]) -> Node:
    """
    Merge the two lightest nodes until one is left.

    Leaves enter the queue in table order and equal weights leave it in
    insertion order, so the same table always yields the same tree.
    """
    if not frequency_table:
        raise EmptyInput("cannot build a tree from an empty frequency table")

    pairs = []
    for symbol, frequency in frequency_table.items():
        if frequency <= 0:
            raise ValueError(f"frequency of {symbol!r} must be positive, got {frequency}")
        pairs.append((frequency, Leaf(symbol, frequency)))
    priority_queue = MinHeap.from_items(pairs)

    while len(priority_queue) > 1:
        weight_a, a = priority_queue.extract_min()
        weight_b, b = priority_queue.extract_min()
        merged = weight_a + weight_b
        priority_queue.insert(merged, Internal(merged, a, b)) # first extracted goes left

    return priority_queue.extract_min()[1] # root of the tree


def generate_huffman_codes(root: Node) -> Mapping[Any, str]:
    """Walk the tree with an explicit stack; '0' for left, '1' for right."""
    if isinstance(root, Leaf):
        return MappingProxyType({root.symbol: "0"}) # one symbol still costs one bit

    codes: Dict[Any, str] = {}
    stack: List[Tuple[Node, str]] = [(root, "")]
    while stack:
        node, code = stack.pop()
        if isinstance(node, Leaf):
            codes[node.symbol] = code
        elif isinstance(node, Internal):
            stack.append((node.right, code + "1"))
            stack.append((node.left, code + "0")) # left subtree comes off the stack first
        else:
            raise TypeError(f"not a tree node: {node!r}")
    return MappingProxyType(codes)


def huffman_encode(data: Sequence, code_map: Mapping[Any, str]) -> str:
    try:
        return "".join([code_map[symbol] for symbol in data])
    except KeyError as exc:
        raise UnknownSymbol(exc.args[0]) from None


class DecoderState(Enum):
    AT_ROOT = "at_root"
    TRAVERSING = "traversing"


def huffman_decode(bitstring: str, root: Node) -> List[Any]:
    """
    Follow bits from the root, emitting a symbol at each leaf.

    Raises MalformedBitStream when a bit is not '0'/'1', when it points at a
    child the tree does not have, or when the stream stops mid-codeword.
    """
    decoded = []
    node = root
    state = DecoderState.AT_ROOT

    for position, bit in enumerate(bitstring):
        if bit != "0" and bit != "1":
            raise MalformedBitStream(f"unexpected character {bit!r} in bit string", position)

        if isinstance(node, Leaf): # single-leaf tree: its only code is "0"
            child = node if bit == "0" else None
        else:
            child = node.left if bit == "0" else node.right
        if child is None:
            raise MalformedBitStream("bit leads to a missing child", position)

        if isinstance(child, Leaf):
            decoded.append(child.symbol)
            node = root
            state = DecoderState.AT_ROOT
        else:
            node = child
            state = DecoderState.TRAVERSING

    if state is DecoderState.TRAVERSING:
        raise MalformedBitStream("bit string ends in the middle of a code", len(bitstring))
    return decoded


# Statistics

def entropy(frequencies: Mapping[Any, int]) -> float: # Shannon entropy, bits per symbol
    total = sum(frequencies.values())
    if total == 0:
        raise EmptyInput("entropy of an empty frequency table")
    return sum((c / total) * math.log2(total / c) for c in frequencies.values())


def average_code_length(frequencies: Mapping[Any, int], code_map: Mapping[Any, str]) -> float:
    total = sum(frequencies.values())
    if total == 0:
        raise EmptyInput("average code length of an empty frequency table")
    weighted = 0
    for symbol, frequency in frequencies.items():
        if symbol not in code_map:
            raise UnknownSymbol(symbol)
        weighted += len(code_map[symbol]) * frequency
    return weighted / total


@dataclass(frozen=True)
class TreeShape:
    leaves: int
    internal_nodes: int
    depth: int # edges on the longest root-to-leaf path
    total_weight: int # sum of leaf weights


def tree_shape(root: Node) -> TreeShape:
    leaves = internal_nodes = depth = total_weight = 0
    stack = [(root, 0)]
    while stack:
        node, level = stack.pop()
        if isinstance(node, Leaf):
            leaves += 1
            total_weight += node.weight
            depth = max(depth, level)
        else:
            internal_nodes += 1
            stack.append((node.left, level + 1))
            stack.append((node.right, level + 1))
    return TreeShape(leaves, internal_nodes, depth, total_weight)


# Public API

def _container_for(data: Sequence) -> Callable[[List[Any]], Any]:
    if isinstance(data, str):
        return "".join
    if isinstance(data, (bytes, bytearray, tuple)):
        return type(data)
    return list


@dataclass(frozen=True)
class CompressionResult:
    frequencies: Mapping[Any, int]
    tree: Node = field(repr=False)
    code_table: Mapping[Any, str]
    encoded_bits: str = field(repr=False)
    original_bit_length: int
    encoded_bit_length: int
    container: Callable[[List[Any]], Any] = field(default=list, repr=False, compare=False)

    @property
    def compression_ratio(self) -> float: # encoded bits / fixed-width bits
        return self.encoded_bit_length / self.original_bit_length

    @property
    def space_saved(self) -> float: # percent of the fixed-width baseline saved
        return (self.original_bit_length - self.encoded_bit_length) / self.original_bit_length * 100

    @property
    def average_code_length(self) -> float:
        return average_code_length(self.frequencies, self.code_table)

    @property
    def entropy(self) -> float:
        return entropy(self.frequencies)

    def decode(self):
        return decode(self.encoded_bits, self.tree, self.container)


def compress(data: Sequence, symbol_bits: int = 8) -> CompressionResult:
    """
    Build frequencies, tree and code table for ``data`` and encode it.

    ``data`` must be a sized sequence of hashable symbols (str, bytes, list,
    tuple...). ``symbol_bits`` is the width of the fixed-width baseline used
    for ``original_bit_length``.
    """
    if symbol_bits <= 0:
        raise ValueError(f"symbol_bits must be positive, got {symbol_bits}")

    frequencies = frequency_table(data)
    tree = build_huffman_tree(frequencies)
    code_table = generate_huffman_codes(tree)
    encoded_bits = huffman_encode(data, code_table)

    return CompressionResult(
        frequencies=frequencies,
        tree=tree,
        code_table=code_table,
        encoded_bits=encoded_bits,
        original_bit_length=len(data) * symbol_bits,
        encoded_bit_length=len(encoded_bits),
        container=_container_for(data),
    )


def decode(encoded_bits: str, tree: Node, container: Optional[Callable[[List[Any]], Any]] = None):
    symbols = huffman_decode(encoded_bits, tree)
    return container(symbols) if container is not None else symbols
