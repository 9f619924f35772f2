"""Active Directory (LDAP) access and attribute decoding.

Public API:
    - ADConfig
    - ADClient
    - AccountRecord
    - AttributeBag
"""

from .attributes import AttributeBag, LargeInteger
from .models import ADConfig, AccountRecord
from .client import ADClient

__all__ = ["ADConfig", "ADClient", "AccountRecord", "AttributeBag", "LargeInteger"]
