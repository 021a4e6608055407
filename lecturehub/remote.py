"""
Remote collection clients.

A client knows how to:
    list_all(collection)                    -> list of record dicts
    update_document(collection, id, fields) -> None

Both raise BackendError on any failure (network, HTTP status, bad JSON,
unreadable local file). Callers never see requests/OSError exceptions.

Two implementations:
- FirestoreClient: Cloud Firestore REST API (v1) over `requests`
- JsonCollectionClient: <data_dir>/<collection>.json, for offline use and demos
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

import requests

from lecturehub.config import Settings
from lecturehub.model import Record

log = logging.getLogger(__name__)

FIRESTORE_URL = "https://firestore.googleapis.com/v1"

# Firestore caps a single list response at 300 documents
PAGE_SIZE = 300


class BackendError(Exception):
    """The backend could not be reached or returned something unusable."""


class CollectionClient(Protocol):
    def list_all(self, collection: str) -> List[Record]: ...

    def update_document(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None: ...


# ---------------------------------------------------------------------------
# Firestore value codec
# ---------------------------------------------------------------------------


def decode_value(value: Dict[str, Any]) -> Any:
    """
    Convert one Firestore typed value ({"stringValue": "x"}) into Python.
    """
    if "stringValue" in value:
        return value["stringValue"]
    if "integerValue" in value:
        # integers travel as strings in the REST API
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "nullValue" in value:
        return None
    if "timestampValue" in value:
        return value["timestampValue"]
    if "referenceValue" in value:
        return value["referenceValue"]
    if "arrayValue" in value:
        return [decode_value(v) for v in value["arrayValue"].get("values", [])]
    if "mapValue" in value:
        return decode_fields(value["mapValue"].get("fields", {}))
    if "geoPointValue" in value:
        return dict(value["geoPointValue"])
    raise ValueError(f"Unsupported Firestore value: {value!r}")


def decode_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {k: decode_value(v) for k, v in fields.items()}


def encode_value(value: Any) -> Dict[str, Any]:
    """Inverse of decode_value for the types we write (profile fields)."""
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
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(v) for v in value]}}
    if isinstance(value, dict):
        return {"mapValue": {"fields": {k: encode_value(v) for k, v in value.items()}}}
    raise ValueError(f"Cannot encode {type(value).__name__} for Firestore")


def document_to_record(doc: Dict[str, Any]) -> Record:
    """
    Flatten a Firestore document into {"id": ..., **fields}.

    The id is the last path segment of the document name. Like the app
    does, fields are spread after the id.
    """
    name = str(doc.get("name", ""))
    doc_id = name.rsplit("/", 1)[-1]
    record: Record = {"id": doc_id}
    record.update(decode_fields(doc.get("fields", {})))
    return record


# ---------------------------------------------------------------------------
# Firestore REST client
# ---------------------------------------------------------------------------


class FirestoreClient:
    def __init__(
        self,
        project_id: str,
        api_key: str = "",
        database: str = "(default)",
        timeout: float = 30.0,
        max_records: int = 1000,
        id_token: str = "",
    ) -> None:
        if not project_id:
            raise ValueError("Firestore project id is required")
        self.project_id = project_id
        self.api_key = api_key
        self.database = database
        self.timeout = timeout
        self.max_records = max_records
        self.id_token = id_token

    def _documents_url(self, collection: str) -> str:
        return f"{FIRESTORE_URL}/projects/{self.project_id}/databases/{self.database}/documents/{collection}"

    def _headers(self) -> Dict[str, str]:
        if self.id_token:
            return {"Authorization": f"Bearer {self.id_token}"}
        return {}

    def _params(self) -> Dict[str, Any]:
        return {"key": self.api_key} if self.api_key else {}

    def list_all(self, collection: str) -> List[Record]:
        """
        Fetch every document in `collection`, following nextPageToken,
        up to max_records documents.
        """
        url = self._documents_url(collection)
        records: List[Record] = []
        page_token: Optional[str] = None

        while True:
            params = self._params()
            params["pageSize"] = min(PAGE_SIZE, self.max_records - len(records))
            if page_token:
                params["pageToken"] = page_token

            try:
                resp = requests.get(url, params=params, headers=self._headers(), timeout=self.timeout)
                resp.raise_for_status()
                payload = resp.json()
                docs = payload.get("documents", [])
                records.extend(document_to_record(d) for d in docs)
            except (requests.RequestException, ValueError, AttributeError, TypeError) as e:
                raise BackendError(f"Could not list collection {collection!r}: {e}") from e

            page_token = payload.get("nextPageToken")
            if not page_token:
                break
            if len(records) >= self.max_records:
                log.warning(
                    "Collection %r has more than %d documents, truncating", collection, self.max_records
                )
                break

        log.debug("Fetched %d documents from %r", len(records), collection)
        return records[: self.max_records]

    def update_document(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        """
        Update only the given top-level fields of one document.
        """
        url = f"{self._documents_url(collection)}/{doc_id}"
        params: Dict[str, Any] = self._params()
        params["updateMask.fieldPaths"] = sorted(fields)
        # the document must already exist, same as an SDK updateDoc()
        params["currentDocument.exists"] = "true"
        body = {"fields": {k: encode_value(v) for k, v in fields.items()}}

        try:
            resp = requests.patch(url, params=params, json=body, headers=self._headers(), timeout=self.timeout)
            resp.raise_for_status()
        except (requests.RequestException, ValueError) as e:
            raise BackendError(f"Could not update {collection}/{doc_id}: {e}") from e

        log.debug("Updated %s/%s fields=%s", collection, doc_id, sorted(fields))


# ---------------------------------------------------------------------------
# Local JSON client
# ---------------------------------------------------------------------------


class JsonCollectionClient:
    """
    Collections stored as JSON files in one directory.

    A collection file holds either a list of records (each with an "id")
    or a mapping of id -> fields. Missing ids get the list position.
    """

    def __init__(self, data_dir: str | Path) -> None:
        self.data_dir = Path(data_dir)

    def _path(self, collection: str) -> Path:
        return self.data_dir / f"{collection}.json"

    def _read(self, collection: str) -> List[Record]:
        path = self._path(collection)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            raise BackendError(f"Could not read collection {collection!r} from {path}: {e}") from e

        if isinstance(data, dict):
            items = [{**v, "id": str(k)} for k, v in data.items() if isinstance(v, dict)]
        elif isinstance(data, list):
            items = []
            for i, v in enumerate(data):
                if not isinstance(v, dict):
                    continue
                record = {"id": str(v.get("id", i))}
                record.update({k: x for k, x in v.items() if k != "id"})
                items.append(record)
        else:
            raise BackendError(f"Collection file {path} must contain a list or an object")
        return items

    def list_all(self, collection: str) -> List[Record]:
        records = self._read(collection)
        log.debug("Read %d records from %s", len(records), self._path(collection))
        return records

    def update_document(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        path = self._path(collection)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            raise BackendError(f"Could not read collection {collection!r} from {path}: {e}") from e

        # keep the file's own shape: mapping stays a mapping, list stays a list
        target = None
        if isinstance(data, dict):
            target = data.get(doc_id)
        elif isinstance(data, list):
            for i, v in enumerate(data):
                if isinstance(v, dict) and str(v.get("id", i)) == doc_id:
                    target = v
                    break
        if not isinstance(target, dict):
            raise BackendError(f"Document {collection}/{doc_id} does not exist")
        target.update(fields)

        tmp = path.with_name(path.name + ".tmp")
        try:
            tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
            tmp.replace(path)
        except OSError as e:
            tmp.unlink(missing_ok=True)
            raise BackendError(f"Could not write {path}: {e}") from e


def make_client(settings: Settings, id_token: str = "") -> CollectionClient:
    if settings.backend == "firestore":
        return FirestoreClient(
            project_id=settings.project_id,
            api_key=settings.api_key,
            database=settings.database,
            timeout=settings.timeout,
            max_records=settings.max_records,
            id_token=id_token,
        )
    return JsonCollectionClient(settings.data_dir)
