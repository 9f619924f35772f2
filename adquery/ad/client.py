from __future__ import annotations

import logging
import ssl
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, Optional

from ldap3 import ALL, ALL_ATTRIBUTES, SUBTREE, Connection, Server, Tls
from ldap3.core.exceptions import LDAPException

from ..exceptions import ConfigurationError, ServerUnreachable
from .attributes import AttributeBag, LargeInteger
from .models import ADConfig, SAM_ATTRIBUTE
from .status import FLAGS_ATTRIBUTE, IDENTITY_ATTRIBUTE
from .timestamps import Encoding, is_timestamp_attribute, time_source
from .utils import escape_ldap_filter_value, parse_generalized_time

logger = logging.getLogger(__name__)

USER_FILTER = "(&(objectCategory=person)(objectClass=user))"
ENUMERATION_ATTRIBUTES = [SAM_ATTRIBUTE, FLAGS_ATTRIBUTE, IDENTITY_ATTRIBUTE]


def _large_integer(raw: Any) -> Any:
    """Integer8 wire value (decimal ASCII) -> LargeInteger; unparsable values are kept as-is."""
    s = raw
    if isinstance(s, (bytes, bytearray)):
        s = bytes(s).decode("ascii", errors="replace")
    if isinstance(s, int) and not isinstance(s, bool):
        return LargeInteger.from_int(s)
    try:
        return LargeInteger.from_int(int(str(s).strip()))
    except ValueError:
        return raw


def _calendar_value(v: Any) -> Any:
    if isinstance(v, datetime):
        return v
    if isinstance(v, (str, bytes, bytearray)):
        dt = parse_generalized_time(v)
        if dt is not None:
            return dt
    return v


def bag_from_entry(entry: dict) -> AttributeBag:
    """Build an AttributeBag from an ldap3 response entry.

    Integer8 timestamps are taken from ``raw_attributes`` so the result does not
    depend on whether ldap3 loaded the schema and already formatted them.
    """
    attrs = entry.get("attributes") or {}
    raw_attrs = entry.get("raw_attributes") or {}

    out: dict[str, list] = {}
    for name, value in attrs.items():
        vals = value if isinstance(value, list) else [value]
        if is_timestamp_attribute(name):
            if time_source(name).encoding is Encoding.SPLIT_INTEGER_64:
                raw = raw_attrs.get(name)
                if raw is None:
                    raw = vals
                vals = [_large_integer(r) for r in (raw if isinstance(raw, list) else [raw])]
            else:
                vals = [_calendar_value(v) for v in vals]
        out[name] = vals

    return AttributeBag(dn=str(entry.get("dn") or ""), attributes=out)


class ADClient:
    def __init__(self, cfg: ADConfig) -> None:
        self.cfg = cfg

        tls_kwargs: dict[str, Any] = {
            "validate": ssl.CERT_REQUIRED if cfg.tls_validate else ssl.CERT_NONE,
        }
        if cfg.tls_validate and cfg.ca_cert_file:
            tls_kwargs["ca_certs_file"] = cfg.ca_cert_file

        self.server = Server(
            host=cfg.host,
            port=cfg.port,
            use_ssl=cfg.use_ssl,
            get_info=ALL,
            tls=Tls(**tls_kwargs),
            connect_timeout=cfg.connect_timeout,
        )

    @property
    def domain(self) -> str:
        return self.cfg.domain

    def _conn(self) -> Connection:
        conn = Connection(
            self.server,
            user=self.cfg.bind_principal or None,
            password=self.cfg.bind_password or None,
            auto_bind=False,
        )
        conn.open()
        if self.cfg.starttls:
            conn.start_tls()
        return conn

    @staticmethod
    def _unbind(conn: Connection | None) -> None:
        if conn is None:
            return
        try:
            conn.unbind()
        except LDAPException as e:
            logger.debug("Unbind failed: %s", e)

    @contextmanager
    def session(self) -> Iterator[Connection]:
        """Bound connection for the duration of the block; always unbound on exit."""
        conn: Connection | None = None
        try:
            try:
                conn = self._conn()
                ok = bool(conn.bind())
            except LDAPException as e:
                logger.debug("Cannot connect to %s:%s: %s", self.cfg.host, self.cfg.port, e)
                raise ServerUnreachable(self.domain, str(e)) from e

            if not ok:
                res = dict(conn.result or {})
                msg = f"bind failed: {res.get('description', 'unknown error')}"
                logger.debug("Cannot bind to %s as %s: %s", self.cfg.host, self.cfg.bind_principal, msg)
                raise ServerUnreachable(self.domain, msg)

            logger.debug("Bound to %s as %s", self.cfg.host, self.cfg.bind_principal)
            yield conn
        finally:
            self._unbind(conn)

    def _base(self) -> str:
        base = self.cfg.base_dn
        if not base:
            raise ConfigurationError(f"AD_DOMAIN {self.domain!r} has no DNS suffix, cannot build a base DN")
        return base

    def search_accounts(self) -> Iterator[AttributeBag]:
        """Yield every user principal in the domain (paged, single pass)."""
        base = self._base()
        with self.session() as conn:
            try:
                for entry in conn.extend.standard.paged_search(
                    search_base=base,
                    search_filter=USER_FILTER,
                    search_scope=SUBTREE,
                    attributes=ENUMERATION_ATTRIBUTES,
                    paged_size=self.cfg.page_size,
                    generator=True,
                ):
                    if entry.get("type") != "searchResEntry":
                        continue
                    yield bag_from_entry(entry)
            except LDAPException as e:
                logger.debug("User search in %s failed: %s", base, e)
                raise ServerUnreachable(self.domain, str(e)) from e

    def find_account(self, sam: str) -> Optional[AttributeBag]:
        """Exact sAMAccountName lookup with all attributes; None if there is no such user."""
        base = self._base()
        flt = f"(&{USER_FILTER}({SAM_ATTRIBUTE}={escape_ldap_filter_value(sam)}))"
        with self.session() as conn:
            try:
                conn.search(
                    search_base=base,
                    search_filter=flt,
                    search_scope=SUBTREE,
                    attributes=[ALL_ATTRIBUTES],
                    size_limit=1,
                )
            except LDAPException as e:
                logger.debug("Lookup of %s failed: %s", sam, e)
                raise ServerUnreachable(self.domain, str(e)) from e

            for entry in conn.response or []:
                if entry.get("type") == "searchResEntry":
                    return bag_from_entry(entry)
        return None
