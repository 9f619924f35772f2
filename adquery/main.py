"""Command-line entry point.

Lists every account in the configured domain and, when a logon name is given,
prints all attributes of that account afterwards.
"""

from __future__ import annotations

import click
from pydantic import ValidationError

from .ad import ADClient
from .exceptions import ADQueryError
from .log_config import setup_logging
from .reports import list_all_accounts, query_user
from .settings import get_settings
from .timezone_utils import get_local_tzinfo

__all__ = ["main"]


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("sam_account_name", required=False)
@click.version_option(package_name="adquery", message="%(version)s")
def main(sam_account_name: str | None) -> None:
    """Query Active Directory users.

    With no argument, list every user with its active status. With
    SAM_ACCOUNT_NAME, also dump all attributes of that user.
    """
    try:
        settings = get_settings()
    except ValidationError as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e

    setup_logging(settings.log_level, settings.log_dir, settings.log_retention_days)
    tz = get_local_tzinfo(settings.tz)

    client = ADClient(settings.ad_config())
    try:
        list_all_accounts(client)
        if sam_account_name:
            query_user(client, sam_account_name, tz=tz)
    except ADQueryError as e:
        raise click.ClickException(str(e)) from e
