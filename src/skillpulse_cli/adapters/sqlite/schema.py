"""Database schema definitions for the local SQLite vault.

Documents are stored as JSON text and queried with ``json_extract``, so the
vault mirrors the layout of the remote document database.
"""

from __future__ import annotations

# Stored in PRAGMA user_version
SCHEMA_VERSION = 1

CREATE_DOCUMENTS_TABLE = """
CREATE TABLE IF NOT EXISTS documents (
    collection TEXT NOT NULL,
    key TEXT NOT NULL,
    data TEXT NOT NULL,
    updated_at DATETIME NOT NULL,
    PRIMARY KEY (collection, key)
)
"""

CREATE_ACCOUNTS_TABLE = """
CREATE TABLE IF NOT EXISTS accounts (
    uid TEXT PRIMARY KEY,
    email TEXT NOT NULL UNIQUE COLLATE NOCASE,
    password_hash TEXT NOT NULL,
    salt TEXT NOT NULL,
    disabled BOOLEAN DEFAULT 0,
    created_at DATETIME NOT NULL
)
"""

# Task pages filter on owner and order by id
CREATE_TASK_OWNER_INDEX = """
CREATE INDEX IF NOT EXISTS idx_documents_owner_id
ON documents (collection, json_extract(data, '$.userId'), json_extract(data, '$.id'))
"""

ALL_TABLES = [
    CREATE_DOCUMENTS_TABLE,
    CREATE_ACCOUNTS_TABLE,
]

ALL_INDEXES = [
    CREATE_TASK_OWNER_INDEX,
]
