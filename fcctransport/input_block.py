"""A named block of keyword/value pairs from an input deck."""

from __future__ import annotations

import re
from typing import Iterator, TypeVar

T = TypeVar("T")

_INT_PREFIX = re.compile(r"[+-]?\d+")
_FLOAT_PREFIX = re.compile(
    r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|[+-]?(?:inf(?:inity)?|nan)",
    re.IGNORECASE,
)


class InputBlockError(ValueError):
    """A value in an input block could not be read as the requested type."""


class InputBlock:
    """Keyword/value pairs under a block name, kept in keyword order."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._pairs: dict[str, str] = {}

    def add_pair(self, keyword: str, value: str) -> None:
        """Set a keyword's value, replacing any earlier one."""
        if "\0" in keyword or "\0" in value:
            raise ValueError("keywords and values may not contain NUL characters")
        self._pairs[keyword] = value

    def __len__(self) -> int:
        return len(self._pairs)

    def __contains__(self, keyword: object) -> bool:
        return keyword in self._pairs

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._pairs))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, InputBlock):
            return NotImplemented
        return self.name == other.name and self._pairs == other._pairs

    def get_value(self, keyword: str, default: T) -> T:
        """The keyword's value read as the type of ``default``.

        If the keyword is absent ``default`` is returned.  Reading stops at
        the first character that does not belong to the value, as a stream
        extraction would; a value with no readable prefix raises
        InputBlockError.  Strings read the first whitespace-separated word,
        booleans read 0 or 1.  A default of None reads a string.
        """
        if keyword not in self._pairs:
            return default
        text = self._pairs[keyword].lstrip()
        try:
            return self._parse(text, default)
        except (ValueError, OverflowError) as exc:
            raise InputBlockError(
                f"block {self.name!r}: cannot read {keyword!r} from {self._pairs[keyword]!r}"
            ) from exc

    @staticmethod
    def _parse(text: str, default):
        if isinstance(default, bool):
            match = _INT_PREFIX.match(text)
            if match is None or int(match.group()) not in (0, 1):
                raise ValueError("not a boolean")
            return bool(int(match.group()))
        if isinstance(default, int):
            match = _INT_PREFIX.match(text)
            if match is None:
                raise ValueError("not an integer")
            return type(default)(int(match.group()))
        if isinstance(default, float):
            match = _FLOAT_PREFIX.match(text)
            if match is None:
                raise ValueError("not a number")
            return type(default)(float(match.group()))
        if default is None or isinstance(default, str):
            words = text.split()
            if not words:
                raise ValueError("empty value")
            return words[0]
        raise TypeError(f"unsupported value type {type(default).__name__}")

    def serialize(self) -> bytes:
        """Encode as NUL-terminated name, then keyword and value pairs."""
        parts = [self.name]
        for keyword in sorted(self._pairs):
            parts.extend((keyword, self._pairs[keyword]))
        return b"".join(part.encode("utf-8") + b"\0" for part in parts)

    @classmethod
    def deserialize(cls, data: bytes) -> InputBlock:
        """Rebuild a block from the bytes made by ``serialize``."""
        data = bytes(data)
        if not data.endswith(b"\0"):
            raise InputBlockError("serialized block must end with a NUL byte")
        fields = [part.decode("utf-8") for part in data[:-1].split(b"\0")]
        name, rest = fields[0], fields[1:]
        if len(rest) % 2:
            raise InputBlockError("serialized block has a keyword without a value")
        block = cls(name)
        for keyword, value in zip(rest[::2], rest[1::2]):
            block.add_pair(keyword, value)
        return block