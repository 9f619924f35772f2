"""In-memory stand-in for ADClient."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterator, Optional

from adquery.ad.attributes import AttributeBag, LargeInteger
from adquery.exceptions import ServerUnreachable

BASE_DN = "DC=example,DC=com"


def make_user(
    sam: str,
    *,
    uac: Any = 512,
    ou: str = "OU=Staff",
    guid: bool = True,
    **extra: Any,
) -> AttributeBag:
    """Build the bag of a user entry the way ADClient returns it."""
    attrs: dict[str, Any] = {"cn": sam.title(), "sAMAccountName": sam}
    if uac is not None:
        attrs["userAccountControl"] = uac
    if guid:
        attrs["objectGUID"] = "{6f1c1d5e-8a43-4c1e-9b7a-2f0c6d1e4a11}"
    attrs.update(extra)
    return AttributeBag(dn=f"CN={sam},{ou},{BASE_DN}", attributes=attrs)


def filetime(dt: datetime) -> LargeInteger:
    epoch = datetime(1601, 1, 1, tzinfo=timezone.utc)
    delta = dt - epoch
    ticks = (delta.days * 86400 + delta.seconds) * 10_000_000 + delta.microseconds * 10
    return LargeInteger.from_int(ticks)


class FakeDirectory:
    """Serves a fixed list of bags; ``unreachable`` makes every call fail."""

    def __init__(self, users: list[AttributeBag] | None = None, *, domain: str = "example.com") -> None:
        self.domain = domain
        self.users = list(users or [])
        self.unreachable = False
        self.sessions = 0

    def _check(self) -> None:
        self.sessions += 1
        if self.unreachable:
            raise ServerUnreachable(self.domain, "socket connection error")

    def search_accounts(self) -> Iterator[AttributeBag]:
        self._check()
        yield from self.users

    def find_account(self, sam: str) -> Optional[AttributeBag]:
        self._check()
        for bag in self.users:
            if sam in bag.values("sAMAccountName"):
                return bag
        return None
