"""
In-Memory User Repository

Stand-in for MongoDB when no connection string is configured. Documents
live in an ordered list for the lifetime of the process.

Supported subset:
- Filters: equality on top-level or dotted paths; a dotted path through an
  array matches when any element matches
- Updates: $set (including the positional "jobs.$.field" form), $push, $pull

Every operation holds one lock because FastAPI runs sync endpoints in a
thread pool.
"""

import copy
import logging
import random
import string
import threading
import time
from typing import Any, Dict, List, Optional

from pymongo.errors import DuplicateKeyError

from ..job_query import JobPage, JobQuery, apply_job_query
from .base import UserRepositoryInterface, WriteResult

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase
_MISSING = object()


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def generate_id() -> str:
    """Millisecond timestamp in base36 plus a 6-character random suffix."""
    suffix = "".join(random.choices(_BASE36, k=6))
    return _to_base36(int(time.time() * 1000)) + suffix


def _values_at(value: Any, parts: List[str]) -> List[Any]:
    """Resolve a dotted path, fanning out across arrays."""
    if not parts:
        return [value]
    if isinstance(value, list):
        found = []
        for item in value:
            found.extend(_values_at(item, parts))
        return found
    if isinstance(value, dict) and parts[0] in value:
        return _values_at(value[parts[0]], parts[1:])
    return []


def _matches(document: Dict[str, Any], filter: Dict[str, Any]) -> bool:
    for key, expected in filter.items():
        if key.startswith("$"):
            raise ValueError(f"Unsupported filter operator for in-memory store: {key}")
        if not any(value == expected for value in _values_at(document, key.split("."))):
            return False
    return True


def _positional_index(document: Dict[str, Any], array_field: str, filter: Dict[str, Any]) -> Optional[int]:
    """Index of the first array element matched by the filter's "<array_field>.*" keys."""
    prefix = array_field + "."
    element_filter = {
        key[len(prefix):]: expected
        for key, expected in filter.items()
        if key.startswith(prefix)
    }
    for index, element in enumerate(document.get(array_field) or []):
        if isinstance(element, dict) and _matches(element, element_filter):
            return index
    return None


class MemoryUserRepository(UserRepositoryInterface):
    """
    Process-lifetime stand-in for the users collection.

    Documents are deep-copied on the way in and out so callers never share
    state with the store.
    """

    def __init__(self, collection: str = "users"):
        self._collection_name = collection
        self._documents: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def _find(self, filter: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        for document in self._documents:
            if _matches(document, filter):
                return document
        return None

    def find_one(self, filter: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        with self._lock:
            document = self._find(filter)
            return copy.deepcopy(document) if document is not None else None

    def insert_one(self, document: Dict[str, Any]) -> WriteResult:
        """Insert a document, enforcing unique _id and username."""
        record = copy.deepcopy(document)
        record.setdefault("_id", self.new_id())

        with self._lock:
            if self._find({"_id": record["_id"]}) is not None:
                raise DuplicateKeyError(f"duplicate key: _id {record['_id']!r}")
            username = record.get("username")
            if username is not None and self._find({"username": username}) is not None:
                raise DuplicateKeyError(f"duplicate key: username {username!r}")
            self._documents.append(record)

        return WriteResult(matched_count=0, modified_count=0, upserted_id=record["_id"])

    def update_one(self, filter: Dict[str, Any], update: Dict[str, Any]) -> WriteResult:
        with self._lock:
            document = self._find(filter)
            if document is None:
                return WriteResult(matched_count=0, modified_count=0)

            modified = self._apply_update(document, update, filter)
            return WriteResult(matched_count=1, modified_count=1 if modified else 0)

    def find_one_and_update(self, filter: Dict[str, Any], update: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Apply the update and return the document as it was before, in one locked step."""
        with self._lock:
            document = self._find(filter)
            if document is None:
                return None

            before = copy.deepcopy(document)
            self._apply_update(document, update, filter)
            return before

    def _apply_update(self, document: Dict[str, Any], update: Dict[str, Any], filter: Dict[str, Any]) -> bool:
        modified = False
        for operator, fields in update.items():
            if operator == "$set":
                for path, value in fields.items():
                    modified |= self._apply_set(document, path, value, filter)
            elif operator == "$push":
                for path, value in fields.items():
                    document.setdefault(path, []).append(copy.deepcopy(value))
                    modified = True
            elif operator == "$pull":
                for path, condition in fields.items():
                    modified |= self._apply_pull(document, path, condition)
            else:
                raise ValueError(f"Unsupported update operator for in-memory store: {operator}")
        return modified

    def _apply_set(self, document: Dict[str, Any], path: str, value: Any, filter: Dict[str, Any]) -> bool:
        parts = path.split(".")
        if "$" in parts:
            position = parts.index("$")
            index = _positional_index(document, ".".join(parts[:position]), filter)
            if index is None:
                raise ValueError(f"The positional operator did not find the match needed: {path}")
            parts[position] = index

        target: Any = document
        for part in parts[:-1]:
            target = target[part] if isinstance(target, list) else target.setdefault(part, {})

        last = parts[-1]
        if isinstance(target, list):
            previous = target[last]
        else:
            previous = target.get(last, _MISSING)
        if previous == value:
            return False
        target[last] = copy.deepcopy(value)
        return True

    @staticmethod
    def _apply_pull(document: Dict[str, Any], path: str, condition: Any) -> bool:
        items = document.get(path)
        if not isinstance(items, list):
            return False

        if isinstance(condition, dict):
            kept = [item for item in items if not (isinstance(item, dict) and _matches(item, condition))]
        else:
            kept = [item for item in items if item != condition]

        if len(kept) == len(items):
            return False
        document[path] = kept
        return True

    def delete_many(self, filter: Dict[str, Any]) -> WriteResult:
        with self._lock:
            kept = [document for document in self._documents if not _matches(document, filter)]
            deleted = len(self._documents) - len(kept)
            self._documents = kept
        return WriteResult(matched_count=deleted, modified_count=deleted)

    def query_jobs(self, user_id: Any, query: JobQuery) -> JobPage:
        """Run the in-process equivalent of the jobs aggregation."""
        with self._lock:
            document = self._find({"_id": user_id})
            jobs = copy.deepcopy(document.get("jobs") or []) if document is not None else []
        return apply_job_query(jobs, query)

    def new_id(self) -> str:
        return generate_id()

    def coerce_id(self, raw: str) -> str:
        return raw
