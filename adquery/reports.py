"""Console reports: the account list and the single account dump."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Any, Callable, Iterator, Optional, Protocol

import click

from .ad.attributes import AttributeBag, LargeInteger
from .ad.models import MEMBER_OF_ATTRIBUTE, AccountRecord
from .ad.timestamps import is_timestamp_attribute, timestamp_lines
from .exceptions import ADQueryError, ServerUnreachable
from .utils.datetime_fmt import fmt_dt

logger = logging.getLogger(__name__)

Echo = Callable[[str], Any]


class DirectoryClient(Protocol):
    domain: str

    def search_accounts(self) -> Iterator[AttributeBag]: ...

    def find_account(self, sam: str) -> Optional[AttributeBag]: ...


@dataclass
class AccountSummary:
    sequence: int
    sam: str
    active: bool

    def render(self) -> str:
        return f"{self.sequence}: {self.sam} - {'Yes' if self.active else 'No'}"


def enumerate_accounts(client: DirectoryClient) -> Iterator[AccountSummary]:
    """Summarize every account the directory returns, numbered from 1.

    A result that fails to decode is logged and reported as inactive.
    """
    counter = 0
    for bag in client.search_accounts():
        counter += 1
        record = AccountRecord(bag)
        try:
            active = record.active
        except ADQueryError as e:
            logger.warning("Cannot evaluate status of %s (%s): %s", record.display_id, bag.dn, e)
            active = False
        yield AccountSummary(sequence=counter, sam=record.display_id, active=active)


def list_all_accounts(client: DirectoryClient, echo: Echo = click.echo) -> int:
    """List all accounts in the directory; returns the number of lines printed."""
    count = 0
    try:
        for summary in enumerate_accounts(client):
            echo(summary.render())
            count += 1
    except ServerUnreachable as e:
        echo(f"Unable to lookup domain: {client.domain}\n{e.message}")
    return count


def format_value(value: Any, tz: tzinfo | None = None) -> str:
    if isinstance(value, list):
        return "; ".join(format_value(v, tz) for v in value)
    if isinstance(value, LargeInteger):
        return str(value.value)
    if isinstance(value, datetime):
        return fmt_dt(value, tz=tz)
    if isinstance(value, (bytes, bytearray)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError:
            return bytes(value).hex()
    return str(value)


def detail_lines(bag: AttributeBag, tz: tzinfo | None = None) -> Iterator[str]:
    record = AccountRecord(bag)

    for name in bag:
        if is_timestamp_attribute(name) or name.lower() == MEMBER_OF_ATTRIBUTE.lower():
            continue
        vals = bag.values(name)
        yield f"{name} = {format_value(vals[0] if len(vals) == 1 else vals, tz)}"

    yield f"Active: {record.active}"
    yield ""

    yield from timestamp_lines(bag, tz=tz)

    yield "Groups:"
    for group in record.groups:
        yield f"\t{group}"


def query_user(client: DirectoryClient, sam: str, echo: Echo = click.echo, tz: tzinfo | None = None) -> bool:
    """Print every attribute of one account. Returns False when no such account exists."""
    bag = client.find_account(sam)
    if bag is None:
        echo(f"No data found for samAccountName: {sam}")
        return False

    try:
        for line in detail_lines(bag, tz=tz):
            echo(line)
    except ADQueryError as e:
        logger.error("Failed to describe %s: %s", sam, e)
        raise
    return True
