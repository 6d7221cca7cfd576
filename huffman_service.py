# filename: huffman_service.py

from collections import Counter

from huffman_core import (
    build_code_table,
    build_frequency_table,
    build_huffman_tree,
    decode,
    encode,
    pack_bits,
    unpack_bits,
)
from huffman_errors import NotBuiltError


class HuffmanService:
    """Keeps the frequency table, tree and code table of the last build.

    ``build`` swaps all three at once; ``encode`` and ``decode`` read them.
    Nothing here is locked, so callers sharing an instance across threads
    must serialize ``build`` against the other calls themselves.
    """

    def __init__(self):
        self._frequency_table = None
        self._tree = None
        self._code_table = None
        self._text_type = None

    @property
    def is_built(self):
        return self._tree is not None

    @property
    def tree(self):
        return self._tree

    @property
    def frequency_table(self):
        if self._frequency_table is None:
            return None
        return Counter(self._frequency_table)

    @property
    def code_table(self):
        if self._code_table is None:
            return None
        return dict(self._code_table)

    def build(self, text, selector=None):
        frequency_table = build_frequency_table(text)
        tree = build_huffman_tree(frequency_table, selector)
        code_table = build_code_table(tree)

        # Only replace state once every step above has succeeded
        self._frequency_table = frequency_table
        self._tree = tree
        self._code_table = code_table
        self._text_type = _text_type(text)

    def load_tree(self, tree, text_type=None):
        code_table = build_code_table(tree)
        symbols = list(code_table)
        if text_type is None:
            text_type = str if all(isinstance(s, str) for s in symbols) else list
        elif not _symbols_fit(symbols, text_type):
            raise TypeError(f"tree symbols cannot be decoded into {text_type.__name__}")

        self._frequency_table = None
        self._tree = tree
        self._code_table = code_table
        self._text_type = text_type

    def encode(self, text):
        self._require_tree()
        return encode(self._tree, text, self._code_table)

    def decode(self, bits):
        self._require_tree()
        symbols = decode(self._tree, bits)
        if self._text_type is str:
            return "".join(symbols)
        if self._text_type is bytes:
            return bytes(symbols)
        return symbols

    def compress(self, data):
        if not data:
            return b"", 0
        self.build(data)
        return pack_bits(self.encode(data))

    def decompress(self, data, padding=0):
        self._require_tree()
        return self.decode(unpack_bits(data, padding))

    def copy(self):
        other = HuffmanService()
        # The tree is never mutated after a build, so sharing it is safe
        other._tree = self._tree
        other._frequency_table = self.frequency_table
        other._code_table = self.code_table
        other._text_type = self._text_type
        return other

    __copy__ = copy

    def _require_tree(self):
        if self._tree is None:
            raise NotBuiltError()


def _text_type(text):
    if isinstance(text, str):
        return str
    if isinstance(text, (bytes, bytearray)):
        return bytes
    return list


def _symbols_fit(symbols, text_type):
    if text_type is str:
        return all(isinstance(s, str) for s in symbols)
    if text_type is bytes:
        return all(isinstance(s, int) and 0 <= s <= 255 for s in symbols)
    return text_type is list
