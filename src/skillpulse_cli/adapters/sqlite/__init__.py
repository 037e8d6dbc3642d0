"""SQLite adapter module - Local vault storage implementation."""

from skillpulse_cli.adapters.sqlite.connection import DatabaseConnection, get_connection
from skillpulse_cli.adapters.sqlite.document_store import SqliteDocumentStore
from skillpulse_cli.adapters.sqlite.identity import LocalIdentityProvider

__all__ = [
    "DatabaseConnection",
    "get_connection",
    "SqliteDocumentStore",
    "LocalIdentityProvider",
]
