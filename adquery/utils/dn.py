from __future__ import annotations

from typing import Iterable

from ..exceptions import MalformedDistinguishedName


def first_rdn_value(dn: str) -> str:
    """Return the value of the first RDN (e.g. CN=Everyone,OU=Groups,... -> Everyone).

    Raises MalformedDistinguishedName when no ',' follows the '='.
    """
    equals = dn.find("=", 1)
    comma = dn.find(",", 1)
    length = comma - equals - 1
    if equals == -1 or length < 0:
        raise MalformedDistinguishedName(dn)
    return dn[equals + 1 : equals + 1 + length]


def extract_group_names(member_of: Iterable[str]) -> list[str]:
    """Short group names from memberOf DNs, in source order, duplicates kept.

    Stops at the first entry without an '=' and returns what was collected so far.
    """
    names: list[str] = []
    for dn in member_of:
        s = dn if isinstance(dn, str) else str(dn)
        if s.find("=", 1) == -1:
            return names
        names.append(first_rdn_value(s))
    return names
