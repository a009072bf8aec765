"""
Job operations over the jobs embedded in each user document.

Every operation is scoped to the acting user's document; no operation
reads or modifies another user's jobs.
"""

import logging
from datetime import date, datetime, time
from typing import Any, Dict, Optional

from .errors import NotFoundError, ValidationError
from .job_query import JobPage, JobQuery
from .repositories.base import UserRepositoryInterface

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("company", "position", "date", "stage")


def to_storage_date(value: date) -> datetime:
    """Store calendar dates as naive UTC midnight timestamps."""
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


class JobService:
    """Add, list, update and remove a user's jobs."""

    def __init__(self, repository: UserRepositoryInterface):
        self.repository = repository

    def add_job(
        self,
        user: Dict[str, Any],
        company: Optional[str],
        position: Optional[str],
        date: Optional[date],
    ) -> Dict[str, Any]:
        """
        Append a new job to the user's list.

        Raises:
            ValidationError: If any field is missing
            NotFoundError: If the user document vanished
        """
        if not company or not position or not date:
            raise ValidationError("Company, position, and date are required")

        job = {
            "_id": self.repository.new_id(),
            "company": company,
            "position": position,
            "date": to_storage_date(date),
        }
        result = self.repository.update_one({"_id": user["_id"]}, {"$push": {"jobs": job}})
        if result.matched_count == 0:
            raise NotFoundError("User not found")

        logger.info(f"Added job {job['_id']} for {user['username']}")
        return job

    def list_jobs(self, user: Dict[str, Any], query: JobQuery) -> JobPage:
        return self.repository.query_jobs(user["_id"], query)

    def update_job(self, user: Dict[str, Any], job_id: str, fields: Dict[str, Any]) -> int:
        """
        Apply the supplied fields to one job.

        Args:
            user: Acting user document
            job_id: Job identifier as received in the path
            fields: Field values to set; unknown keys are ignored

        Returns:
            Number of modified documents (0 when the values were unchanged)

        Raises:
            ValidationError: If no updatable field was supplied
            NotFoundError: If the user has no job with this id
        """
        updates = {name: fields[name] for name in UPDATABLE_FIELDS if name in fields}
        if not updates:
            raise ValidationError("No updatable fields provided")

        if "date" in updates:
            updates["date"] = to_storage_date(updates["date"])

        result = self.repository.update_one(
            {"_id": user["_id"], "jobs._id": self.repository.coerce_id(job_id)},
            {"$set": {f"jobs.$.{name}": value for name, value in updates.items()}},
        )
        if result.matched_count == 0:
            raise NotFoundError("Job not found")

        logger.info(f"Updated job {job_id} for {user['username']}: {sorted(updates)}")
        return result.modified_count

    def delete_job(self, user: Dict[str, Any], job_id: str) -> None:
        """
        Remove one job.

        Raises:
            NotFoundError: If the user has no job with this id
        """
        result = self.repository.update_one(
            {"_id": user["_id"]},
            {"$pull": {"jobs": {"_id": self.repository.coerce_id(job_id)}}},
        )
        if result.modified_count == 0:
            raise NotFoundError("Job not found")

        logger.info(f"Deleted job {job_id} for {user['username']}")

    def clear_user_jobs(self, user: Dict[str, Any]) -> int:
        """
        Remove every job belonging to the acting user.

        Reads the job list and empties it in one step, so jobs added after
        the user document was loaded are counted too.

        Returns:
            Number of jobs removed

        Raises:
            NotFoundError: If the user document vanished
        """
        before = self.repository.find_one_and_update({"_id": user["_id"]}, {"$set": {"jobs": []}})
        if before is None:
            raise NotFoundError("User not found")
        removed = len(before.get("jobs") or [])

        logger.info(f"Cleared {removed} jobs for {user['username']}")
        return removed
