"""Store interfaces and their SQLAlchemy implementations."""

from marketplace.stores.base import CredentialStore, ItemStore
from marketplace.stores.sql import SqlCredentialStore, SqlItemStore

__all__ = ["CredentialStore", "ItemStore", "SqlCredentialStore", "SqlItemStore"]
