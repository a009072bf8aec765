"""
Repository Interface Definitions

Defines the abstract interface for user document operations.
Jobs are embedded in each user document, so the same interface also
serves the job listing query. Swapping implementations (MongoDB or the
in-memory stand-in) does not change consumer code.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..job_query import JobPage, JobQuery


@dataclass
class WriteResult:
    """
    Result of a write operation.

    Attributes:
        matched_count: Number of documents that matched the filter
        modified_count: Number of documents actually modified
        upserted_id: ID of the inserted document (if any)
    """
    matched_count: int
    modified_count: int
    upserted_id: Optional[Any] = None


class UserRepositoryInterface(ABC):
    """
    Abstract interface for the users collection.

    Implementations:
    - MongoUserRepository: pymongo-backed document store
    - MemoryUserRepository: process-lifetime stand-in

    All methods follow fail-fast semantics: errors propagate to the caller.
    """

    @abstractmethod
    def find_one(self, filter: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Find a single user document.

        Args:
            filter: Query filter (e.g., {"username": "alice"})

        Returns:
            Document dict if found, None otherwise
        """
        pass

    @abstractmethod
    def insert_one(self, document: Dict[str, Any]) -> WriteResult:
        """
        Insert a single document.

        Args:
            document: Document to insert (an "_id" is generated if missing)

        Returns:
            WriteResult with upserted_id set to the new document's _id
        """
        pass

    @abstractmethod
    def update_one(self, filter: Dict[str, Any], update: Dict[str, Any]) -> WriteResult:
        """
        Update a single document.

        Args:
            filter: Query filter
            update: Update operations ($set, $push or $pull)

        Returns:
            WriteResult with match/modify counts
        """
        pass

    @abstractmethod
    def find_one_and_update(self, filter: Dict[str, Any], update: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Update a single document atomically and return it as it was before.

        Args:
            filter: Query filter
            update: Update operations ($set, $push or $pull)

        Returns:
            The pre-update document, or None if nothing matched
        """
        pass

    @abstractmethod
    def delete_many(self, filter: Dict[str, Any]) -> WriteResult:
        """
        Delete multiple documents.

        Args:
            filter: Query filter

        Returns:
            WriteResult with delete count
        """
        pass

    @abstractmethod
    def query_jobs(self, user_id: Any, query: JobQuery) -> JobPage:
        """
        Filter, sort and paginate the jobs embedded in one user document.

        Args:
            user_id: The owning user's _id
            query: Parsed listing parameters

        Returns:
            JobPage with the requested slice and the pre-pagination total
        """
        pass

    @abstractmethod
    def new_id(self) -> Any:
        """Generate a fresh identifier in this backend's scheme."""
        pass

    @abstractmethod
    def coerce_id(self, raw: str) -> Any:
        """Convert an identifier received as text to the stored form."""
        pass

    def close(self) -> None:
        """Release backend resources. No-op by default."""
