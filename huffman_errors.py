# filename: huffman_errors.py


class HuffmanError(Exception):
    pass


class EmptyInputError(HuffmanError, ValueError):
    def __init__(self, message="cannot build a Huffman tree from an empty frequency table"):
        super().__init__(message)


class UnknownSymbolError(HuffmanError, KeyError):
    def __init__(self, symbol, position=None):
        self.symbol = symbol
        self.position = position
        if position is None:
            message = f"symbol {symbol!r} is not in the code table"
        else:
            message = f"symbol {symbol!r} at position {position} is not in the code table"
        super().__init__(message)

    # KeyError.__str__ would repr() the message
    def __str__(self):
        return self.args[0]


class MalformedBitstringError(HuffmanError, ValueError):
    def __init__(self, message, position=None):
        self.position = position
        super().__init__(message)


class NotBuiltError(HuffmanError, RuntimeError):
    def __init__(self, message="no Huffman tree has been built yet, call build() first"):
        super().__init__(message)
