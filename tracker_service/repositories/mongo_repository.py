"""
MongoDB User Repository

Wraps pymongo access to the users collection. Job listing runs as an
aggregation over the embedded jobs array.
"""

import logging
from typing import Any, Dict, Optional

from bson import ObjectId
from pymongo import ASCENDING, MongoClient, ReturnDocument
from pymongo.collection import Collection

from ..job_query import JobPage, JobQuery, build_jobs_pipeline, parse_facet_result
from .base import UserRepositoryInterface, WriteResult

logger = logging.getLogger(__name__)


class MongoUserRepository(UserRepositoryInterface):
    """
    pymongo-backed repository for the users collection.

    Connection Management:
    - The MongoClient is created lazily on first use and reused
    - PyMongo handles connection pooling and thread safety internally

    Error Handling:
    - Fail-fast: All errors propagate to caller
    """

    def __init__(
        self,
        mongodb_uri: Optional[str] = None,
        database: str = "jobs",
        collection: str = "users",
        client: Optional[MongoClient] = None,
    ):
        """
        Initialize the repository with connection parameters.

        Args:
            mongodb_uri: MongoDB connection string
            database: Database name (default: "jobs")
            collection: Collection name (default: "users")
            client: Pre-built client (tests pass a mongomock client here)
        """
        self._mongodb_uri = mongodb_uri
        self._database_name = database
        self._collection_name = collection
        self._client = client
        self._collection: Optional[Collection] = None

    def _get_collection(self) -> Collection:
        """
        Get the users collection, creating the client if needed.

        Ensures the unique username index on first access.
        """
        if self._collection is None:
            if self._client is None:
                self._client = MongoClient(self._mongodb_uri)
            collection = self._client[self._database_name][self._collection_name]
            collection.create_index([("username", ASCENDING)], unique=True)
            self._collection = collection
            logger.info(
                f"MongoDB repository connected: {self._database_name}.{self._collection_name}"
            )
        return self._collection

    def find_one(self, filter: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Find a single user document."""
        return self._get_collection().find_one(filter)

    def insert_one(self, document: Dict[str, Any]) -> WriteResult:
        """Insert a single document."""
        result = self._get_collection().insert_one(document)
        return WriteResult(
            matched_count=0,
            modified_count=0,
            upserted_id=result.inserted_id,
        )

    def update_one(self, filter: Dict[str, Any], update: Dict[str, Any]) -> WriteResult:
        """Update a single document."""
        result = self._get_collection().update_one(filter, update)
        return WriteResult(
            matched_count=result.matched_count,
            modified_count=result.modified_count,
        )

    def find_one_and_update(self, filter: Dict[str, Any], update: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Update a single document and return its pre-update state."""
        return self._get_collection().find_one_and_update(
            filter, update, return_document=ReturnDocument.BEFORE
        )

    def delete_many(self, filter: Dict[str, Any]) -> WriteResult:
        """Delete multiple documents."""
        result = self._get_collection().delete_many(filter)
        return WriteResult(
            matched_count=result.deleted_count,
            modified_count=result.deleted_count,
        )

    def query_jobs(self, user_id: Any, query: JobQuery) -> JobPage:
        """Run the embedded-jobs aggregation for one user."""
        pipeline = build_jobs_pipeline(user_id, query)
        rows = list(self._get_collection().aggregate(pipeline))
        return parse_facet_result(rows)

    def new_id(self) -> ObjectId:
        return ObjectId()

    def coerce_id(self, raw: str) -> Any:
        """Use an ObjectId when the text is one, otherwise keep the raw value."""
        if ObjectId.is_valid(raw):
            return ObjectId(raw)
        return raw

    def close(self) -> None:
        """Close the client and forget the collection handle."""
        if self._client is not None:
            self._client.close()
        self._client = None
        self._collection = None
        logger.info("MongoDB repository connection closed")
