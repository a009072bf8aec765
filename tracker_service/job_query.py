"""
Job listing query builder.

Translates the GET /api/jobs query parameters into a JobQuery and executes
it two ways:

- build_jobs_pipeline(): MongoDB aggregation over the embedded jobs array
  (unwind -> match -> replaceRoot -> sort -> facet with page + count)
- apply_job_query(): the same steps performed in-process over a list of
  job dicts, used by the in-memory stand-in store

Both paths must return identical pages for identical data.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .errors import ValidationError

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

# $skip must fit a signed 64-bit BSON integer
MAX_SKIP = 2 ** 63 - 1

# Fields covered by the free-text "q" search
SEARCH_FIELDS = ("company", "position", "stage")


@dataclass
class JobPage:
    """One page of jobs plus the number of jobs matching the filter."""

    jobs: List[Dict[str, Any]]
    total: int


@dataclass
class JobQuery:
    """
    Parsed and validated job listing parameters.

    Attributes:
        companies: Exact company names to include (empty = no filter)
        positions: Exact positions to include (empty = no filter)
        stages: Exact stages to include (empty = no filter)
        date_from: Inclusive lower bound on the job date
        date_to: Inclusive upper bound on the job date
        search: Case-insensitive literal substring over company/position/stage
        oldest_first: Sort ascending by date when True, descending otherwise
        page: 1-based page number
        page_size: Jobs per page
    """

    companies: List[str] = field(default_factory=list)
    positions: List[str] = field(default_factory=list)
    stages: List[str] = field(default_factory=list)
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    search: Optional[str] = None
    oldest_first: bool = False
    page: int = DEFAULT_PAGE
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.page_size

    @classmethod
    def from_params(
        cls,
        company: Optional[str] = None,
        position: Optional[str] = None,
        stage: Optional[str] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        q: Optional[str] = None,
        sort: Optional[str] = None,
        page: Optional[str] = None,
        page_size: Optional[str] = None,
    ) -> "JobQuery":
        """
        Build a JobQuery from raw query-string values.

        Raises:
            ValidationError: If a date or paging value cannot be parsed
        """
        search = (q or "").strip()
        size = parse_positive_int(page_size, "pageSize", DEFAULT_PAGE_SIZE, maximum=MAX_PAGE_SIZE)
        return cls(
            companies=parse_list(company),
            positions=parse_list(position),
            stages=parse_list(stage),
            date_from=parse_date_filter(date_from, "dateFrom") if date_from else None,
            date_to=parse_date_filter(date_to, "dateTo", end_of_day=True) if date_to else None,
            search=search or None,
            oldest_first=sort == "oldest",
            page=parse_positive_int(page, "page", DEFAULT_PAGE, maximum=MAX_SKIP // size + 1),
            page_size=size,
        )


def parse_list(value: Optional[str]) -> List[str]:
    """Split a comma-separated parameter, dropping blank items."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_positive_int(value: Optional[str], name: str, default: int, maximum: Optional[int] = None) -> int:
    """Parse a paging parameter that must be an integer >= 1 and at most maximum."""
    if value is None or value == "":
        return default
    try:
        parsed = int(value)
    except ValueError:
        raise ValidationError(f"{name} must be a positive integer")
    if parsed < 1:
        raise ValidationError(f"{name} must be a positive integer")
    if maximum is not None and parsed > maximum:
        raise ValidationError(f"{name} must be at most {maximum}")
    return parsed


def parse_date_filter(value: str, name: str, end_of_day: bool = False) -> datetime:
    """
    Parse a date/datetime filter into a naive UTC datetime.

    Args:
        value: "YYYY-MM-DD" or an ISO 8601 datetime
        name: Parameter name used in the error message
        end_of_day: If True and value is date-only, use 23:59:59.999

    Raises:
        ValidationError: If the value is not a valid date
    """
    value = value.strip()
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"{name} is not a valid date: '{value}'")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)

    # MongoDB dates have millisecond precision
    if end_of_day and "T" not in value and " " not in value:
        parsed = parsed.replace(hour=23, minute=59, second=59, microsecond=999000)
    return parsed


def build_job_match(query: JobQuery) -> Dict[str, Any]:
    """
    Build the $match document applied to unwound user documents.

    Every supplied filter is a conjunction; the free-text search adds one
    $or clause across the searchable fields.
    """
    match: Dict[str, Any] = {}

    if query.companies:
        match["jobs.company"] = {"$in": list(query.companies)}
    if query.positions:
        match["jobs.position"] = {"$in": list(query.positions)}
    if query.stages:
        match["jobs.stage"] = {"$in": list(query.stages)}

    if query.date_from or query.date_to:
        date_cond: Dict[str, Any] = {}
        if query.date_from:
            date_cond["$gte"] = query.date_from
        if query.date_to:
            date_cond["$lte"] = query.date_to
        match["jobs.date"] = date_cond

    if query.search:
        # Escaped so the search is a literal substring, as in apply_job_query()
        regex = {"$regex": re.escape(query.search), "$options": "i"}
        match["$or"] = [{f"jobs.{name}": regex} for name in SEARCH_FIELDS]

    return match


def build_jobs_pipeline(user_id: Any, query: JobQuery) -> List[Dict[str, Any]]:
    """
    Build the aggregation pipeline for one user's embedded jobs.

    Args:
        user_id: The owning user's _id
        query: Parsed listing parameters

    Returns:
        Pipeline stages for users.aggregate()
    """
    direction = 1 if query.oldest_first else -1

    pipeline: List[Dict[str, Any]] = [
        {"$match": {"_id": user_id}},
        {"$unwind": {"path": "$jobs", "preserveNullAndEmptyArrays": False}},
    ]

    match = build_job_match(query)
    if match:
        pipeline.append({"$match": match})

    pipeline.append({"$replaceRoot": {"newRoot": "$jobs"}})
    # _id breaks ties between jobs on the same date
    pipeline.append({"$sort": {"date": direction, "_id": direction}})
    pipeline.append({
        "$facet": {
            "data": [{"$skip": query.skip}, {"$limit": query.page_size}],
            "total": [{"$count": "count"}],
        }
    })
    return pipeline


def parse_facet_result(rows: List[Dict[str, Any]]) -> JobPage:
    """Unpack the single $facet output document into a JobPage."""
    if not rows:
        return JobPage(jobs=[], total=0)

    facet = rows[0]
    data = facet.get("data") or []
    counts = facet.get("total") or []
    total = counts[0]["count"] if counts else 0
    return JobPage(jobs=list(data), total=total)


def _matches(job: Dict[str, Any], query: JobQuery) -> bool:
    if query.companies and job.get("company") not in query.companies:
        return False
    if query.positions and job.get("position") not in query.positions:
        return False
    if query.stages and job.get("stage") not in query.stages:
        return False

    job_date = job.get("date")
    if query.date_from and (job_date is None or job_date < query.date_from):
        return False
    if query.date_to and (job_date is None or job_date > query.date_to):
        return False

    if query.search:
        needle = query.search.lower()
        haystacks = [job.get(name) for name in SEARCH_FIELDS]
        if not any(isinstance(h, str) and needle in h.lower() for h in haystacks):
            return False

    return True


def apply_job_query(jobs: List[Dict[str, Any]], query: JobQuery) -> JobPage:
    """
    In-process equivalent of build_jobs_pipeline().

    Args:
        jobs: The user's embedded job dicts
        query: Parsed listing parameters

    Returns:
        JobPage with the requested slice and the pre-pagination total
    """
    matched = [job for job in jobs if _matches(job, query)]
    matched.sort(
        key=lambda job: (job.get("date") or datetime.min, str(job.get("_id"))),
        reverse=not query.oldest_first,
    )
    start = query.skip
    return JobPage(jobs=matched[start:start + query.page_size], total=len(matched))
