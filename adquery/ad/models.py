from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from functools import cached_property
from typing import List, Optional

from ..utils.dn import extract_group_names
from .attributes import AttributeBag, has_attribute, raw_value
from .status import is_account_active
from .timestamps import normalize_timestamp

SAM_ATTRIBUTE = "sAMAccountName"
MEMBER_OF_ATTRIBUTE = "memberOf"


@dataclass
class ADConfig:
    dc_short: str
    domain: str
    port: int
    use_ssl: bool
    starttls: bool
    bind_username: str
    bind_password: str
    tls_validate: bool = False
    ca_cert_file: str = ""
    page_size: int = 1000
    connect_timeout: float = 10.0

    @property
    def _suffix(self) -> str:
        return (self.domain or "").strip().strip(".")

    @property
    def host(self) -> str:
        """Controller to connect to: AD_DC qualified with the domain unless it is
        already a dotted name or an address; the domain itself when unset."""
        dc = (self.dc_short or "").strip()
        if not dc:
            return self._suffix
        if "." in dc or ":" in dc or not self._suffix:
            return dc
        return f"{dc}.{self._suffix}"

    @property
    def base_dn(self) -> str:
        # a single-label domain has no DC= path
        labels = [p for p in self._suffix.split(".") if p]
        if len(labels) < 2:
            return ""
        return ",".join(f"DC={p}" for p in labels)

    @property
    def bind_principal(self) -> str:
        u = (self.bind_username or "").strip()
        d = self._suffix
        if not u:
            return ""
        if "@" in u or "\\" in u or "=" in u:
            return u
        return f"{u}@{d}" if d else u


class AccountRecord:
    """View over the attribute bag of a single user principal.

    Derived fields are computed on first access; timestamp fields raise
    DecodeFault when the stored value has an unexpected shape.
    """

    def __init__(self, bag: AttributeBag) -> None:
        self.bag = bag

    @property
    def dn(self) -> str:
        return self.bag.dn

    @cached_property
    def display_id(self) -> str:
        if not has_attribute(self.bag, SAM_ATTRIBUTE):
            return ""
        value = raw_value(self.bag, SAM_ATTRIBUTE)
        if isinstance(value, list):
            value = value[0]
        return str(value)

    @cached_property
    def active(self) -> bool:
        return is_account_active(self.bag)

    @cached_property
    def created_at(self) -> Optional[datetime]:
        return normalize_timestamp(self.bag, "whenCreated")

    @cached_property
    def changed_at(self) -> Optional[datetime]:
        return normalize_timestamp(self.bag, "whenChanged")

    @cached_property
    def last_logon_at(self) -> Optional[datetime]:
        return normalize_timestamp(self.bag, "lastLogon")

    @cached_property
    def last_logoff_at(self) -> Optional[datetime]:
        return normalize_timestamp(self.bag, "lastLogoff")

    @cached_property
    def expires_at(self) -> Optional[datetime]:
        return normalize_timestamp(self.bag, "accountExpires")

    @cached_property
    def groups(self) -> List[str]:
        return extract_group_names(self.bag.values(MEMBER_OF_ATTRIBUTE))

    def __repr__(self) -> str:
        return f"AccountRecord(dn={self.dn!r})"
