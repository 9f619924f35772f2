"""Tests for the ldap3-backed directory client, with the connection faked."""

from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any

import pytest
from ldap3.core.exceptions import LDAPSocketOpenError

from adquery.ad import ADClient, ADConfig, LargeInteger
from adquery.ad.client import bag_from_entry
from adquery.ad.attributes import raw_value
from adquery.exceptions import ConfigurationError, ServerUnreachable


def _config(**kwargs: Any) -> ADConfig:
    cfg = {
        "dc_short": "dc01",
        "domain": "example.com",
        "port": 636,
        "use_ssl": True,
        "starttls": False,
        "bind_username": "svc-query",
        "bind_password": "secret",
    }
    cfg.update(kwargs)
    return ADConfig(**cfg)


def _entry(dn: str, attributes: dict, raw: dict | None = None) -> dict:
    return {
        "type": "searchResEntry",
        "dn": dn,
        "attributes": attributes,
        "raw_attributes": raw or {},
    }


class FakeConnection:
    def __init__(self, entries: list[dict], *, bind_ok: bool = True) -> None:
        self.entries = entries
        self.bind_ok = bind_ok
        self.result: dict = {"description": "invalidCredentials"}
        self.response: list[dict] = []
        self.searches: list[dict] = []
        self.unbound = False
        self.extend = SimpleNamespace(standard=SimpleNamespace(paged_search=self._paged_search))

    def bind(self) -> bool:
        return self.bind_ok

    def unbind(self) -> None:
        self.unbound = True

    def _paged_search(self, **kwargs: Any):
        self.searches.append(kwargs)
        yield {"type": "searchResRef", "uri": ["ldap://other.example.com/"]}
        yield from self.entries

    def search(self, **kwargs: Any) -> bool:
        self.searches.append(kwargs)
        self.response = list(self.entries)
        return bool(self.entries)


def test_config() -> None:
    cfg = _config()

    assert cfg.host == "dc01.example.com"
    assert cfg.base_dn == "DC=example,DC=com"
    assert cfg.bind_principal == "svc-query@example.com"
    assert _config(bind_username="EXAMPLE\\svc").bind_principal == "EXAMPLE\\svc"
    assert _config(dc_short="10.0.0.5").host == "10.0.0.5"
    assert _config(dc_short="").host == "example.com"
    assert _config(dc_short="dc01.other.org").host == "dc01.other.org"
    assert _config(dc_short="fd00::5").host == "fd00::5"
    assert _config(domain="corp.example.com.").base_dn == "DC=corp,DC=example,DC=com"
    assert _config(domain="localdomain").base_dn == ""
    assert _config(domain="localdomain").host == "dc01.localdomain"


def test_bag_from_entry() -> None:
    created = datetime(2016, 2, 8, 10, 0, tzinfo=timezone.utc)
    entry = _entry(
        "CN=jsmith,OU=Staff,DC=example,DC=com",
        {
            "sAMAccountName": "jsmith",
            "whenCreated": created,
            "whenChanged": ["20160209080000.0Z"],
            "lastLogon": datetime(2012, 12, 14, 23, 6, 40, tzinfo=timezone.utc),
            "accountExpires": [],
            "lastLogoff": ["not-a-number"],
            "memberOf": ["CN=A,DC=c", "CN=B,DC=c"],
        },
        {
            "lastLogon": [b"130000000000000000"],
            "lastLogoff": [b"not-a-number"],
        },
    )

    bag = bag_from_entry(entry)

    assert bag.dn == "CN=jsmith,OU=Staff,DC=example,DC=com"
    assert raw_value(bag, "whenCreated") == created
    assert raw_value(bag, "whenChanged") == datetime(2016, 2, 9, 8, 0, tzinfo=timezone.utc)
    assert raw_value(bag, "lastLogon") == LargeInteger(30267983, -1395851264)
    assert raw_value(bag, "lastLogoff") == b"not-a-number"
    assert "accountExpires" not in bag
    assert bag.values("memberOf") == ["CN=A,DC=c", "CN=B,DC=c"]


def test_search_accounts(monkeypatch: pytest.MonkeyPatch) -> None:
    conn = FakeConnection(
        [
            _entry("CN=a,DC=example,DC=com", {"sAMAccountName": "a", "userAccountControl": 512}),
            _entry("CN=b,DC=example,DC=com", {"sAMAccountName": "b", "userAccountControl": 514}),
        ]
    )
    client = ADClient(_config(page_size=50))
    monkeypatch.setattr(client, "_conn", lambda: conn)

    bags = list(client.search_accounts())

    assert [b.values("sAMAccountName") for b in bags] == [["a"], ["b"]]
    assert conn.searches[0]["search_base"] == "DC=example,DC=com"
    assert conn.searches[0]["paged_size"] == 50
    assert conn.unbound


def test_search_released_when_abandoned(monkeypatch: pytest.MonkeyPatch) -> None:
    conn = FakeConnection([_entry("CN=a,DC=example,DC=com", {"sAMAccountName": "a"})] * 3)
    client = ADClient(_config())
    monkeypatch.setattr(client, "_conn", lambda: conn)

    results = client.search_accounts()
    next(results)
    assert not conn.unbound
    results.close()

    assert conn.unbound


def test_find_account(monkeypatch: pytest.MonkeyPatch) -> None:
    conn = FakeConnection([_entry("CN=a(1),DC=example,DC=com", {"sAMAccountName": "a(1)"})])
    client = ADClient(_config())
    monkeypatch.setattr(client, "_conn", lambda: conn)

    bag = client.find_account("a(1)")

    assert bag is not None
    assert bag.dn == "CN=a(1),DC=example,DC=com"
    assert "(sAMAccountName=a\\281\\29)" in conn.searches[0]["search_filter"]
    assert conn.searches[0]["size_limit"] == 1
    assert conn.unbound


def test_find_account_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    conn = FakeConnection([])
    client = ADClient(_config())
    monkeypatch.setattr(client, "_conn", lambda: conn)

    assert client.find_account("nobody") is None
    assert conn.unbound


def test_bind_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    conn = FakeConnection([], bind_ok=False)
    client = ADClient(_config())
    monkeypatch.setattr(client, "_conn", lambda: conn)

    with pytest.raises(ServerUnreachable) as excinfo:
        list(client.search_accounts())

    assert "invalidCredentials" in str(excinfo.value)
    assert conn.unbound


def test_server_down(monkeypatch: pytest.MonkeyPatch) -> None:
    def fail() -> None:
        raise LDAPSocketOpenError("socket connection error while opening")

    client = ADClient(_config())
    monkeypatch.setattr(client, "_conn", fail)

    with pytest.raises(ServerUnreachable) as excinfo:
        client.find_account("jsmith")

    assert excinfo.value.domain == "example.com"


def test_empty_base_dn() -> None:
    client = ADClient(_config(domain="localdomain", dc_short="dc01.lan"))

    with pytest.raises(ConfigurationError) as excinfo:
        list(client.search_accounts())

    assert "localdomain" in str(excinfo.value)
    assert not isinstance(excinfo.value, ServerUnreachable)
