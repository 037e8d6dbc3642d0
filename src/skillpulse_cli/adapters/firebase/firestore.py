"""Firestore implementation of DocumentStore over the REST API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from skillpulse_cli.adapters.firebase.values import (
    decode_fields,
    document_key,
    encode_fields,
    encode_value,
)
from skillpulse_cli.models import (
    Document,
    DocumentExistsError,
    DocumentNotFoundError,
    DocumentQuery,
    DocumentStoreError,
)
from skillpulse_cli.repositories import DocumentStore
from skillpulse_cli.services.api.client import APIClient

logger = logging.getLogger(__name__)

_FIRESTORE_OPERATORS = {
    "==": "EQUAL",
    "<": "LESS_THAN",
    "<=": "LESS_THAN_OR_EQUAL",
    ">": "GREATER_THAN",
    ">=": "GREATER_THAN_OR_EQUAL",
}


def _error_detail(error: httpx.HTTPStatusError) -> str:
    try:
        message = error.response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        message = error.response.text
    return f"{error.response.status_code}: {message}"


def build_structured_query(collection: str, query: DocumentQuery) -> dict[str, Any]:
    """Translate a DocumentQuery into a Firestore ``StructuredQuery``."""
    structured: dict[str, Any] = {"from": [{"collectionId": collection}]}

    filters = [
        {
            "fieldFilter": {
                "field": {"fieldPath": f.field},
                "op": _FIRESTORE_OPERATORS[f.op],
                "value": encode_value(f.value),
            }
        }
        for f in query.filters
    ]
    if len(filters) == 1:
        structured["where"] = filters[0]
    elif filters:
        structured["where"] = {"compositeFilter": {"op": "AND", "filters": filters}}

    if query.order_by:
        structured["orderBy"] = [
            {
                "field": {"fieldPath": query.order_by},
                "direction": "DESCENDING" if query.descending else "ASCENDING",
            }
        ]
        if query.start_after is not None:
            structured["startAt"] = {
                "values": [encode_value(query.start_after)],
                "before": False,
            }

    if query.limit is not None:
        structured["limit"] = query.limit
    return structured


class FirestoreDocumentStore(DocumentStore):
    """Document store backed by a Firebase project's Firestore database."""

    def __init__(
        self, project_id: str, client: APIClient, *, database: str = "(default)"
    ):
        self.project_id = project_id
        self.client = client
        self.database_name = f"projects/{project_id}/databases/{database}"
        self.documents_root = f"/{self.database_name}/documents"

    def _document_path(self, collection: str, key: str) -> str:
        return f"{self.documents_root}/{collection}/{key}"

    def _document_name(self, collection: str, key: str) -> str:
        return f"{self.database_name}/documents/{collection}/{key}"

    async def get(self, collection: str, key: str) -> Document | None:
        try:
            response = await self.client.get(self._document_path(collection, key))
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            raise DocumentStoreError(_error_detail(e)) from e
        except httpx.RequestError as e:
            raise DocumentStoreError(str(e)) from e
        return Document(key=key, data=decode_fields(response.json().get("fields", {})))

    async def set(self, collection: str, key: str, data: dict[str, Any]) -> None:
        try:
            await self.client.patch(
                self._document_path(collection, key),
                json={"fields": encode_fields(data)},
            )
        except httpx.HTTPStatusError as e:
            raise DocumentStoreError(_error_detail(e)) from e
        except httpx.RequestError as e:
            raise DocumentStoreError(str(e)) from e

    async def create(self, collection: str, key: str, data: dict[str, Any]) -> None:
        try:
            await self.client.post(
                f"{self.documents_root}/{collection}",
                json={"fields": encode_fields(data)},
                params={"documentId": key},
            )
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 409:
                raise DocumentExistsError(collection, key) from e
            raise DocumentStoreError(_error_detail(e)) from e
        except httpx.RequestError as e:
            raise DocumentStoreError(str(e)) from e

    async def update(
        self, collection: str, key: str, data: dict[str, Any]
    ) -> dict[str, Any]:
        try:
            response = await self.client.patch(
                self._document_path(collection, key),
                json={"fields": encode_fields(data)},
                params={
                    "updateMask.fieldPaths": list(data),
                    "currentDocument.exists": "true",
                },
            )
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                raise DocumentNotFoundError(collection, key) from e
            raise DocumentStoreError(_error_detail(e)) from e
        except httpx.RequestError as e:
            raise DocumentStoreError(str(e)) from e
        return decode_fields(response.json().get("fields", {}))

    async def delete(self, collection: str, key: str) -> None:
        try:
            await self.client.delete(
                self._document_path(collection, key),
                params={"currentDocument.exists": "true"},
            )
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                raise DocumentNotFoundError(collection, key) from e
            raise DocumentStoreError(_error_detail(e)) from e
        except httpx.RequestError as e:
            raise DocumentStoreError(str(e)) from e

    async def query(self, collection: str, query: DocumentQuery) -> list[Document]:
        body = {"structuredQuery": build_structured_query(collection, query)}
        try:
            response = await self.client.post(
                f"{self.documents_root}:runQuery", json=body
            )
        except httpx.HTTPStatusError as e:
            raise DocumentStoreError(_error_detail(e)) from e
        except httpx.RequestError as e:
            raise DocumentStoreError(str(e)) from e

        documents = []
        # runQuery streams progress entries without a document; skip them
        for entry in response.json():
            raw = entry.get("document")
            if not raw:
                continue
            documents.append(
                Document(
                    key=document_key(raw["name"]),
                    data=decode_fields(raw.get("fields", {})),
                )
            )
        logger.debug("query on %s returned %d documents", collection, len(documents))
        return documents

    async def increment(
        self, collection: str, key: str, field: str, amount: int = 1
    ) -> int:
        write = {
            "update": {"name": self._document_name(collection, key), "fields": {}},
            "updateMask": {"fieldPaths": []},
            "updateTransforms": [
                {"fieldPath": field, "increment": {"integerValue": str(amount)}}
            ],
        }
        try:
            response = await self.client.post(
                f"{self.documents_root}:commit", json={"writes": [write]}
            )
        except httpx.HTTPStatusError as e:
            raise DocumentStoreError(_error_detail(e)) from e
        except httpx.RequestError as e:
            raise DocumentStoreError(str(e)) from e

        try:
            result = response.json()["writeResults"][0]["transformResults"][0]
            return int(result["integerValue"])
        except (KeyError, IndexError, ValueError, TypeError) as e:
            raise DocumentStoreError(f"unexpected commit response: {e}") from e

    async def close(self) -> None:
        await self.client.close()
