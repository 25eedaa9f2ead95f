"""
Chunk Readers

Streaming decoders for whitespace separated values. Text may arrive split at
arbitrary positions (even inside a token), so the reader carries the trailing
partial token of each fragment over to the next one. Every complete token is
decoded and handed to the value callback in encounter order.

The readers never check how many values they produced; callers own the
storage and its bounds.
"""

import re
from typing import Callable, Generic, TypeVar

from .errors import MalformedValueError


V = TypeVar('V')

# xs:float / xs:double lexical space, without locale specific separators
FLOAT_PATTERN = re.compile(
    r'[+-]?(?:(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|INF|inf|Infinity)|NaN|nan'
)
INT_PATTERN = re.compile(r'[+-]?[0-9]+')


class ChunkReader(Generic[V]):
    """
    Base class of the chunk readers.

    Subclasses implement `decode` to turn one token into a value.
    """

    def __init__(self, value_found: Callable[[V], None]):
        self._value_found = value_found
        self._pending = ''

    def feed(self, fragment: str):
        """
        Consume the next text fragment.

        Args:
            fragment: Raw character data; may start or end inside a token
        """
        if not fragment:
            return
        text = self._pending + fragment
        tokens = text.split()
        # A fragment not ending in whitespace may stop in the middle of a token
        if tokens and not text[-1].isspace():
            self._pending = tokens.pop()
        else:
            self._pending = ''
        for token in tokens:
            self._value_found(self.decode(token))

    def finish(self):
        """Flush the trailing token. Must be called once after the last fragment."""
        if self._pending:
            token = self._pending
            self._pending = ''
            self._value_found(self.decode(token))

    def decode(self, token: str) -> V:
        raise NotImplementedError


class ChunkFloatReader(ChunkReader[float]):
    """Decodes whitespace separated floats"""

    def decode(self, token: str) -> float:
        if not FLOAT_PATTERN.fullmatch(token):
            raise MalformedValueError(f"{token!r} is not a valid float", token)
        return float(token)


class ChunkIntReader(ChunkReader[int]):
    """Decodes whitespace separated base-10 integers"""

    def decode(self, token: str) -> int:
        if not INT_PATTERN.fullmatch(token):
            raise MalformedValueError(f"{token!r} is not a valid integer", token)
        return int(token)


class ChunkStringReader(ChunkReader[str]):
    """Splits text into whitespace separated tokens without decoding them"""

    def decode(self, token: str) -> str:
        return token
