from __future__ import annotations

from ..exceptions import DecodeFault
from .attributes import AttributeBag, has_attribute, raw_value

UF_ACCOUNTDISABLE = 0x0002

IDENTITY_ATTRIBUTE = "objectGUID"
FLAGS_ATTRIBUTE = "userAccountControl"

# Accounts moved under these OUs are leavers even if never disabled.
# Matched as plain substrings of the DN, each one on its own.
INACTIVE_CONTAINERS = ("OU=Archived,OU=Terms", "OU=Archived", "OU=Terms")


def account_flags(bag: AttributeBag) -> int:
    value = raw_value(bag, FLAGS_ATTRIBUTE)
    if isinstance(value, (bytes, bytearray)):
        value = bytes(value).decode("ascii", errors="replace")
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise DecodeFault(FLAGS_ATTRIBUTE, f"expected an integer, got {type(value).__name__}")
    try:
        return int(value)
    except ValueError as e:
        raise DecodeFault(FLAGS_ATTRIBUTE, str(e)) from e


def is_account_active(bag: AttributeBag) -> bool:
    """Is this account active in AD?

    An entry without objectGUID or userAccountControl is never active; an
    enabled account still counts as inactive when it sits in an archive/terms OU.
    """
    if not has_attribute(bag, IDENTITY_ATTRIBUTE):
        return False

    if not has_attribute(bag, FLAGS_ATTRIBUTE):
        return False

    active = not (account_flags(bag) & UF_ACCOUNTDISABLE)

    if active:
        path = bag.dn
        if (
            INACTIVE_CONTAINERS[0] in path
            or INACTIVE_CONTAINERS[1] in path
            or INACTIVE_CONTAINERS[2] in path
        ):
            active = False

    return active
