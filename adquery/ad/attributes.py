from __future__ import annotations

from typing import Any, Iterator, NamedTuple

from ldap3.utils.ciDict import CaseInsensitiveDict

from ..exceptions import AttributeAbsent, IndexOutOfRange


class LargeInteger(NamedTuple):
    """AD Integer8 value split into two signed 32-bit halves (IADsLargeInteger)."""

    high_part: int
    low_part: int

    @property
    def value(self) -> int:
        # low_part is signed on the wire; mask it or the sign bit leaks into the high word
        return (self.high_part << 32) | (self.low_part & 0xFFFFFFFF)

    @classmethod
    def from_int(cls, n: int) -> "LargeInteger":
        low = n & 0xFFFFFFFF
        if low >= 0x80000000:
            low -= 0x100000000
        return cls(high_part=n >> 32, low_part=low)


class AttributeBag:
    """Read-only attribute set of one directory record.

    Names are case-insensitive, every stored attribute has at least one value,
    and iteration follows the order the directory returned.
    """

    def __init__(self, dn: str = "", attributes: dict[str, Any] | None = None) -> None:
        self.dn = dn or ""
        self._attrs: CaseInsensitiveDict = CaseInsensitiveDict()
        for name, value in (attributes or {}).items():
            if value is None:
                continue
            # only a list is multi-valued; LargeInteger is itself a tuple
            vals = list(value) if isinstance(value, list) else [value]
            if vals:
                self._attrs[name] = vals

    def __iter__(self) -> Iterator[str]:
        return iter(self._attrs.keys())

    def __len__(self) -> int:
        return len(self._attrs)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name in self._attrs

    def values(self, name: str) -> list[Any]:
        if name not in self._attrs:
            return []
        return list(self._attrs[name])

    def __repr__(self) -> str:
        return f"AttributeBag(dn={self.dn!r}, attributes={list(self)!r})"


def has_attribute(bag: AttributeBag, name: str) -> bool:
    return name in bag


def raw_value(bag: AttributeBag, name: str) -> Any:
    """Single value for single-valued attributes, the list of values otherwise."""
    if name not in bag:
        raise AttributeAbsent(name)
    vals = bag.values(name)
    if len(vals) == 1:
        return vals[0]
    return vals


def value_count(bag: AttributeBag, name: str) -> int:
    return len(bag.values(name))


def value_at(bag: AttributeBag, name: str, index: int) -> Any:
    vals = bag.values(name)
    if index < 0 or index >= len(vals):
        raise IndexOutOfRange(name, index, len(vals))
    return vals[index]
