from __future__ import annotations

from decimal import Decimal
from typing import Any, Iterator
from urllib.parse import parse_qsl, urlencode


def format_value(value: Any) -> str:
    # bools go out lowercase and floats never use exponent notation
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        value = Decimal(repr(value))
    if isinstance(value, Decimal):
        text = format(value, "f")
        if "." in text:
            text = text.rstrip("0").rstrip(".")
        return text
    return str(value)


class Params:
    """
    Ordered multi-value parameter set.

    `set` replaces every value stored under a key, `add` appends one more.
    `encode` sorts by key and keeps insertion order among repeated keys, so
    the same logical content always produces the same string.
    """

    def __init__(self, items: dict[str, Any] | None = None):
        self._items: list[tuple[str, str]] = []
        for key, value in (items or {}).items():
            self.set(key, value)

    def set(self, key: str, value: Any) -> "Params":
        self._items = [(k, v) for k, v in self._items if k != key]
        self._items.append((key, format_value(value)))
        return self

    def add(self, key: str, value: Any) -> "Params":
        self._items.append((key, format_value(value)))
        return self

    def get(self, key: str, default: str | None = None) -> str | None:
        for k, v in self._items:
            if k == key:
                return v
        return default

    def get_all(self, key: str) -> list[str]:
        return [v for k, v in self._items if k == key]

    def items(self) -> list[tuple[str, str]]:
        return list(self._items)

    def copy(self) -> "Params":
        clone = Params()
        clone._items = list(self._items)
        return clone

    def to_dict(self) -> dict[str, list[str]]:
        out: dict[str, list[str]] = {}
        for k, v in self._items:
            out.setdefault(k, []).append(v)
        return out

    def encode(self) -> str:
        if not self._items:
            return ""
        # sorted() is stable, repeated keys stay in insertion order
        ordered = sorted(self._items, key=lambda kv: kv[0])
        return urlencode(ordered)

    @classmethod
    def decode(cls, text: str) -> "Params":
        params = cls()
        for key, value in parse_qsl(text, keep_blank_values=True):
            params.add(key, value)
        return params

    def __contains__(self, key: object) -> bool:
        return any(k == key for k, _ in self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(list(self._items))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Params):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"Params({self._items!r})"
