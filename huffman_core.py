# filename: huffman_core.py

import heapq
import itertools
from collections import Counter

from huffman_errors import EmptyInputError, MalformedBitstringError, UnknownSymbolError


class HuffmanNode:
    def __init__(self, symbol, freq, left=None, right=None):
        self.symbol = symbol
        self.freq = freq
        self.left = left
        self.right = right

    @property
    def is_leaf(self):
        return self.left is None and self.right is None

    def __lt__(self, other):
        return self.freq < other.freq

    def __str__(self):
        left = self.left.symbol if self.left is not None else None
        right = self.right.symbol if self.right is not None else None
        return f"(val: {self.symbol!r}, f: {self.freq}, l: {left!r}, r: {right!r})"


class HeapSelector:
    """Min-heap ordered on weight alone.

    Candidates of equal weight come out in whatever order the heap happens
    to hold them, so two builds over equal tables may differ.
    """

    def __init__(self):
        self._heap = []

    def push(self, node):
        heapq.heappush(self._heap, node)

    def pop(self):
        return heapq.heappop(self._heap)

    def __len__(self):
        return len(self._heap)


class StableSelector:
    """Min-heap on (weight, tiebreak, insertion index)."""

    def __init__(self):
        self._heap = []
        self._order = itertools.count()

    def tiebreak(self, node):
        return 0

    def push(self, node):
        heapq.heappush(self._heap, (node.freq, self.tiebreak(node), next(self._order), node))

    def pop(self):
        return heapq.heappop(self._heap)[-1]

    def __len__(self):
        return len(self._heap)


class SymbolOrderSelector(StableSelector):
    """Equal weights go to the candidate holding the smallest symbol.

    Symbols are compared by repr() so mixed symbol types still order.
    The resulting tree does not depend on the table's iteration order.
    """

    def __init__(self):
        super().__init__()
        self._smallest = {}

    def tiebreak(self, node):
        if node.is_leaf:
            key = repr(node.symbol)
        else:
            left = self._smallest.get(id(node.left))
            right = self._smallest.get(id(node.right))
            if left is None or right is None:
                key = min(repr(leaf.symbol) for leaf in iter_leaves(node))
            else:
                key = min(left, right)
        self._smallest[id(node)] = key
        return key


def iter_leaves(root):
    stack = [root]
    while stack:
        node = stack.pop()
        if node.is_leaf:
            yield node
            continue
        # Caller-built trees may leave one side empty
        if node.right is not None:
            stack.append(node.right)
        if node.left is not None:
            stack.append(node.left)


def build_frequency_table(text):
    # Frequency analysis of the input symbols
    return Counter(text)


def build_huffman_tree(frequency_table, selector=None):
    """Build a Huffman tree by greedily merging the two lightest candidates.

    ``selector`` is a selector class (or any factory returning an object
    with ``push``, ``pop`` and ``len``) deciding which of several equally
    light candidates is taken first. Defaults to :class:`HeapSelector`.
    Returns the root node; a table with a single symbol yields a bare leaf.
    """
    priority_queue = (selector or HeapSelector)()
    for symbol, freq in frequency_table.items():
        if freq < 0:
            raise ValueError(f"negative count {freq} for symbol {symbol!r}")
        if freq == 0:
            continue
        priority_queue.push(HuffmanNode(symbol, freq))

    if not len(priority_queue):
        raise EmptyInputError()

    # Iteratively merge nodes to form the binary tree
    while len(priority_queue) > 1:
        left = priority_queue.pop()
        right = priority_queue.pop()
        priority_queue.push(HuffmanNode(None, left.freq + right.freq, left, right))

    return priority_queue.pop()


def build_code_table(root):
    # A lone leaf has no edge to label, it still needs a one-bit code
    if root.is_leaf:
        return {root.symbol: "0"}

    codes = {}
    stack = [(root, "")]
    while stack:
        node, code = stack.pop()
        if node.is_leaf:
            codes[node.symbol] = code
            continue
        if node.right is not None:
            stack.append((node.right, code + "1"))
        if node.left is not None:
            stack.append((node.left, code + "0"))
    return codes


def encode(tree, text, code_table=None):
    if code_table is None:
        code_table = build_code_table(tree)

    encoded = []
    for position, symbol in enumerate(text):
        try:
            encoded.append(code_table[symbol])
        except (KeyError, TypeError):
            raise UnknownSymbolError(symbol, position) from None
    return "".join(encoded)


def decode(tree, bits):
    """Walk ``tree`` bit by bit and return the list of decoded symbols.

    Raises :class:`MalformedBitstringError` on a character other than
    ``'0'``/``'1'`` or when the bits stop part-way down a code.
    """
    decoded = []
    if tree.is_leaf:
        for position, bit in enumerate(bits):
            if bit != "0":
                _raise_bad_bit(bit, position, "single-symbol tree only has the code '0'")
            decoded.append(tree.symbol)
        return decoded

    node = tree
    code_start = 0
    for position, bit in enumerate(bits):
        if bit == "0":
            node = node.left
        elif bit == "1":
            node = node.right
        else:
            _raise_bad_bit(bit, position)
        if node is None:
            raise MalformedBitstringError(
                f"bit {bit!r} at position {position} leads to a missing child", position
            )
        if node.is_leaf:
            decoded.append(node.symbol)
            node = tree
            code_start = position + 1

    if node is not tree:
        raise MalformedBitstringError(
            f"bitstring ends inside the code starting at position {code_start}", code_start
        )
    return decoded


def _raise_bad_bit(bit, position, reason=None):
    message = f"invalid bit {bit!r} at position {position}"
    if reason:
        message = f"{message}: {reason}"
    raise MalformedBitstringError(message, position)


def pack_bits(bits):
    """Pack a '0'/'1' string into bytes, MSB first, zero-padded at the end.

    Returns ``(data, padding)`` where ``padding`` is the number of filler bits.
    """
    for position, bit in enumerate(bits):
        if bit not in "01":
            _raise_bad_bit(bit, position)

    # Calculate padding needed for byte alignment
    padding = (8 - len(bits) % 8) % 8
    bits += "0" * padding

    b = bytearray()
    for i in range(0, len(bits), 8):
        b.append(int(bits[i:i + 8], 2))
    return bytes(b), padding


def unpack_bits(data, padding=0):
    if not 0 <= padding <= 7:
        raise MalformedBitstringError(f"padding must be between 0 and 7, got {padding}")
    if padding and not data:
        raise MalformedBitstringError(f"padding of {padding} bits on empty data")

    bits = "".join(f"{byte:08b}" for byte in data)
    if not padding:
        return bits
    if bits[-padding:] != "0" * padding:
        raise MalformedBitstringError("padding bits must be zero", len(bits) - padding)
    return bits[:-padding]
