# filename: huffman_errors.py


class HuffmanError(Exception):
    """Base class for every failure raised by the encoder pipeline."""


class InvalidInput(HuffmanError, ValueError):
    pass


class InvalidTree(HuffmanError, ValueError):
    pass


class UnknownSymbol(HuffmanError, LookupError):
    def __init__(self, symbol, position):
        super().__init__(f"symbol {symbol!r} at position {position} has no code")
        self.symbol = symbol
        self.position = position


class PackingOverflow(HuffmanError, ArithmeticError):
    pass


class DecodeError(HuffmanError, ValueError):
    pass


class IOFailure(HuffmanError, OSError):
    pass
