"""DocumentStore implementation over the Cloud Firestore REST API."""

from __future__ import annotations

import base64
import datetime
import itertools
import logging
from typing import Any

from .const import FIRESTORE_API, FIRESTORE_DEFAULT_DATABASE, FIRESTORE_MAX_BATCH
from .http import HttpClient, StoreNotFoundError

_LOGGER = logging.getLogger(__name__)


def decode_value(value: dict[str, Any]) -> Any:
    """Convert a Firestore typed value (``{"stringValue": "x"}``) to a Python value."""
    if "nullValue" in value:
        return None
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "stringValue" in value:
        return value["stringValue"]
    if "timestampValue" in value:
        raw = value["timestampValue"]
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        # Firestore emits up to nanosecond precision; fromisoformat takes microseconds
        if "." in raw:
            head, _, rest = raw.partition(".")
            digits = "".join(itertools.takewhile(str.isdigit, rest))
            offset = rest[len(digits):]
            raw = f"{head}.{digits[:6].ljust(6, '0')}{offset}"
        return datetime.datetime.fromisoformat(raw)
    if "arrayValue" in value:
        return [decode_value(v) for v in value["arrayValue"].get("values", [])]
    if "mapValue" in value:
        return decode_fields(value["mapValue"].get("fields", {}))
    if "referenceValue" in value:
        return value["referenceValue"]
    if "bytesValue" in value:
        return base64.b64decode(value["bytesValue"])
    if "geoPointValue" in value:
        return dict(value["geoPointValue"])
    raise ValueError(f"Unsupported Firestore value: {value!r}")


def encode_value(value: Any) -> dict[str, Any]:
    """Convert a Python value to a Firestore typed value.

    Plain dates are stored as ``YYYY-MM-DD`` strings, the shape every
    date-only field in the collections uses.
    """
    if value is None:
        return {"nullValue": None}
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, datetime.datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=datetime.timezone.utc)
        utc = value.astimezone(datetime.timezone.utc)
        return {"timestampValue": utc.strftime("%Y-%m-%dT%H:%M:%S.%fZ")}
    if isinstance(value, datetime.date):
        return {"stringValue": value.isoformat()}
    if isinstance(value, bytes):
        return {"bytesValue": base64.b64encode(value).decode("ascii")}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(v) for v in value]}}
    if isinstance(value, dict):
        return {"mapValue": {"fields": encode_fields(value)}}
    raise TypeError(f"Cannot encode {type(value).__name__} as a Firestore value")


def decode_fields(fields: dict[str, Any]) -> dict[str, Any]:
    return {key: decode_value(v) for key, v in fields.items()}


def encode_fields(record: dict[str, Any]) -> dict[str, Any]:
    return {key: encode_value(v) for key, v in record.items()}


def decode_document(document: dict[str, Any]) -> dict[str, Any]:
    """Decode a Firestore document; its id (last path segment) is stored under ``id``."""
    record = decode_fields(document.get("fields", {}))
    record["id"] = document["name"].rsplit("/", 1)[-1]
    return record


class FirestoreDocumentStore:
    """DocumentStore backed by Cloud Firestore's REST endpoints.

    Args:
        http_client: Transport used for requests; it must already carry the
            caller's ID token.
        project_id: Google Cloud project id.
        database: Firestore database id.
        page_size: Documents requested per list page.
    """

    def __init__(
        self,
        http_client: HttpClient,
        project_id: str,
        database: str = FIRESTORE_DEFAULT_DATABASE,
        page_size: int = 300,
    ) -> None:
        self._client = http_client
        self.documents_path = f"projects/{project_id}/databases/{database}/documents"
        self.base_url = f"{FIRESTORE_API}/{self.documents_path}"
        self.page_size = page_size

    def _document_name(self, kind: str, record_id: str) -> str:
        return f"{self.documents_path}/{kind}/{record_id}"

    async def fetch_all(self, kind: str) -> list[dict[str, Any]]:
        records: list[dict[str, Any]] = []
        page_token: str | None = None
        while True:
            params: dict[str, Any] = {"pageSize": self.page_size}
            if page_token:
                params["pageToken"] = page_token
            resp = await self._client.request("get", f"{self.base_url}/{kind}", params=params)
            resp.raise_for_status()
            data = resp.json() or {}
            records.extend(decode_document(doc) for doc in data.get("documents", []))
            page_token = data.get("nextPageToken")
            if not page_token:
                break
        _LOGGER.debug("Fetched %d records from %s", len(records), kind)
        return records

    async def fetch_by_id(self, kind: str, record_id: str) -> dict[str, Any] | None:
        resp = await self._client.request("get", f"{self.base_url}/{kind}/{record_id}")
        try:
            resp.raise_for_status()
        except StoreNotFoundError:
            return None
        return decode_document(resp.json())

    async def _commit(self, writes: list[dict[str, Any]]) -> None:
        for offset in range(0, len(writes), FIRESTORE_MAX_BATCH):
            chunk = writes[offset:offset + FIRESTORE_MAX_BATCH]
            resp = await self._client.request(
                "post",
                f"{self.base_url}:commit",
                json={"writes": chunk},
            )
            resp.raise_for_status()

    async def bulk_upsert(self, kind: str, records: dict[str, dict[str, Any]]) -> None:
        # An update write without an updateMask replaces the whole document
        writes = [
            {"update": {"name": self._document_name(kind, record_id), "fields": encode_fields(record)}}
            for record_id, record in records.items()
        ]
        await self._commit(writes)
        _LOGGER.debug("Upserted %d records into %s", len(writes), kind)

    async def bulk_delete(self, kind: str, record_ids: list[str]) -> None:
        await self._commit([{"delete": self._document_name(kind, record_id)} for record_id in record_ids])
        _LOGGER.debug("Deleted %d records from %s", len(record_ids), kind)

    async def fetch_where(self, kind: str, field: str, value: Any) -> list[dict[str, Any]]:
        """Return every record of kind whose field equals value."""
        query = {
            "structuredQuery": {
                "from": [{"collectionId": kind}],
                "where": {
                    "fieldFilter": {
                        "field": {"fieldPath": field},
                        "op": "EQUAL",
                        "value": encode_value(value),
                    }
                },
            }
        }
        resp = await self._client.request("post", f"{self.base_url}:runQuery", json=query)
        resp.raise_for_status()
        # Entries without a "document" only report read progress
        return [decode_document(item["document"]) for item in resp.json() or [] if "document" in item]

    async def bulk_delete_where(self, kind: str, field: str, value: Any) -> int:
        matches = await self.fetch_where(kind, field, value)
        if matches:
            await self.bulk_delete(kind, [r["id"] for r in matches])
        return len(matches)

    async def close(self) -> None:
        await self._client.close()
