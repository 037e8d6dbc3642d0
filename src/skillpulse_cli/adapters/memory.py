"""In-process adapters.

Used by the test-suite and anywhere a throwaway store is enough. Query
semantics follow Firestore's: documents lacking a filtered or ordered field
never match.
"""

from __future__ import annotations

import asyncio
import copy
import operator
import uuid
from typing import Any

from skillpulse_cli.models import (
    AuthError,
    AuthErrorKind,
    Document,
    DocumentExistsError,
    DocumentNotFoundError,
    DocumentQuery,
    Identity,
)
from skillpulse_cli.repositories import DocumentStore, IdentityProvider

_OPERATORS = {
    "==": operator.eq,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


def _compare(left: Any, op: str, right: Any) -> bool:
    try:
        return bool(_OPERATORS[op](left, right))
    except TypeError:
        return False


def apply_query(documents: list[Document], query: DocumentQuery) -> list[Document]:
    """Evaluate a query over already-loaded documents."""
    result = documents
    for field_filter in query.filters:
        result = [
            doc
            for doc in result
            if field_filter.field in doc.data
            and _compare(doc.data[field_filter.field], field_filter.op, field_filter.value)
        ]

    if query.order_by:
        field = query.order_by
        result = [doc for doc in result if field in doc.data]
        result.sort(key=lambda doc: doc.data[field], reverse=query.descending)
        if query.start_after is not None:
            op = "<" if query.descending else ">"
            result = [
                doc for doc in result if _compare(doc.data[field], op, query.start_after)
            ]

    if query.limit is not None:
        result = result[: query.limit]
    return result


class MemoryDocumentStore(DocumentStore):
    """Document store kept in a dict of collections."""

    def __init__(self):
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._lock = asyncio.Lock()

    def _collection(self, name: str) -> dict[str, dict[str, Any]]:
        return self._collections.setdefault(name, {})

    async def get(self, collection: str, key: str) -> Document | None:
        data = self._collection(collection).get(key)
        if data is None:
            return None
        return Document(key=key, data=copy.deepcopy(data))

    async def set(self, collection: str, key: str, data: dict[str, Any]) -> None:
        self._collection(collection)[key] = copy.deepcopy(data)

    async def create(self, collection: str, key: str, data: dict[str, Any]) -> None:
        docs = self._collection(collection)
        if key in docs:
            raise DocumentExistsError(collection, key)
        docs[key] = copy.deepcopy(data)

    async def update(
        self, collection: str, key: str, data: dict[str, Any]
    ) -> dict[str, Any]:
        docs = self._collection(collection)
        if key not in docs:
            raise DocumentNotFoundError(collection, key)
        docs[key].update(copy.deepcopy(data))
        return copy.deepcopy(docs[key])

    async def delete(self, collection: str, key: str) -> None:
        docs = self._collection(collection)
        if key not in docs:
            raise DocumentNotFoundError(collection, key)
        del docs[key]

    async def query(self, collection: str, query: DocumentQuery) -> list[Document]:
        documents = [
            Document(key=key, data=copy.deepcopy(data))
            for key, data in self._collection(collection).items()
        ]
        return apply_query(documents, query)

    async def increment(
        self, collection: str, key: str, field: str, amount: int = 1
    ) -> int:
        async with self._lock:
            doc = self._collection(collection).setdefault(key, {})
            doc[field] = int(doc.get(field, 0)) + amount
            return doc[field]


class MemoryIdentityProvider(IdentityProvider):
    """Identity provider with accounts held in a dict."""

    def __init__(self):
        super().__init__()
        self.accounts: dict[str, dict[str, Any]] = {}
        self.password_resets: list[str] = []

    def add_account(self, email: str, password: str, *, disabled: bool = False) -> str:
        uid = uuid.uuid4().hex
        self.accounts[email.lower()] = {
            "uid": uid,
            "password": password,
            "disabled": disabled,
        }
        return uid

    async def sign_up(self, email: str, password: str) -> Identity:
        if email.lower() in self.accounts:
            raise AuthError(AuthErrorKind.EMAIL_ALREADY_IN_USE)
        uid = self.add_account(email, password)
        identity = Identity(uid=uid, email=email)
        self._set_identity(identity)
        return identity

    async def sign_in(self, email: str, password: str) -> Identity:
        account = self.accounts.get(email.lower())
        if account is None:
            raise AuthError(AuthErrorKind.USER_NOT_FOUND)
        if account["disabled"]:
            raise AuthError(AuthErrorKind.ACCOUNT_DISABLED)
        if account["password"] != password:
            raise AuthError(AuthErrorKind.WRONG_PASSWORD)
        identity = Identity(uid=account["uid"], email=email)
        self._set_identity(identity)
        return identity

    async def sign_out(self) -> None:
        self._set_identity(None)

    async def send_password_reset(self, email: str) -> None:
        if email.lower() not in self.accounts:
            raise AuthError(AuthErrorKind.USER_NOT_FOUND)
        self.password_resets.append(email)
