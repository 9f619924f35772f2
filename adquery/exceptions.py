"""Exceptions raised while querying and decoding directory accounts."""

from __future__ import annotations

__all__ = [
    "ADQueryError",
    "AttributeAbsent",
    "ConfigurationError",
    "DecodeFault",
    "IndexOutOfRange",
    "MalformedDistinguishedName",
    "ServerUnreachable",
]


class ADQueryError(Exception):
    """Base class for all adquery errors."""


class ServerUnreachable(ADQueryError):
    """The directory server could not be reached or the bind failed."""

    def __init__(self, domain: str, message: str) -> None:
        super().__init__(f"{domain}: {message}")
        self.domain = domain
        self.message = message


class ConfigurationError(ADQueryError):
    """The environment does not describe a usable directory."""


class AttributeAbsent(ADQueryError, KeyError):
    """An attribute was dereferenced that is not present on the record."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Attribute {self.name} not present"


class IndexOutOfRange(ADQueryError, IndexError):
    """A value index past the end of a multi-valued attribute."""

    def __init__(self, name: str, index: int, count: int) -> None:
        super().__init__(f"{name}[{index}] out of range ({count} values)")
        self.name = name
        self.index = index
        self.count = count


class DecodeFault(ADQueryError, ValueError):
    """An attribute is present but its value has an unexpected shape."""

    def __init__(self, name: str, message: str) -> None:
        super().__init__(f"Cannot decode {name}: {message}")
        self.name = name


class MalformedDistinguishedName(ADQueryError, ValueError):
    """A memberOf entry has no RDN value delimiter after its ``=``."""

    def __init__(self, dn: str) -> None:
        super().__init__(f"Malformed distinguished name: {dn!r}")
        self.dn = dn
