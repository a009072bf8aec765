"""
Jobs CRUD API Routes.

All endpoints act on the jobs embedded in the authenticated user's document:
- POST /api/jobs - Add a job
- GET /api/jobs - Filtered, sorted, paginated listing with total count
- PUT /api/jobs/{job_id} - Partial update
- DELETE /api/jobs/{job_id} - Remove one job
- DELETE /api/cleanup - Remove all of the user's jobs
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from ..dependencies import get_current_user_doc, get_job_service
from ..errors import api_operation
from ..job_query import JobQuery
from ..job_service import JobService
from ..logger import get_logger
from ..models import (
    JobCreatedResponse,
    JobCreateRequest,
    JobListResponse,
    JobOut,
    JobsDeletedResponse,
    JobUpdatedResponse,
    JobUpdateRequest,
)

router = APIRouter(prefix="/api", tags=["jobs"])


@router.post(
    "/jobs",
    response_model=JobCreatedResponse,
    response_model_exclude_none=True,
    status_code=201,
    summary="Add a job",
)
@api_operation("create job")
def create_job(
    body: JobCreateRequest,
    user: Dict[str, Any] = Depends(get_current_user_doc),
    job_service: JobService = Depends(get_job_service),
) -> JobCreatedResponse:
    job = job_service.add_job(user, body.company, body.position, body.date)
    return JobCreatedResponse(message="Job created successfully", job=JobOut(**job))


@router.get(
    "/jobs",
    response_model=JobListResponse,
    response_model_exclude_none=True,
    summary="List jobs",
)
@api_operation("fetch jobs")
def list_jobs(
    company: Optional[str] = Query(None, description="Comma-separated company names"),
    position: Optional[str] = Query(None, description="Comma-separated positions"),
    stage: Optional[str] = Query(None, description="Comma-separated stages"),
    date_from: Optional[str] = Query(None, alias="dateFrom", description="Inclusive start date"),
    date_to: Optional[str] = Query(None, alias="dateTo", description="Inclusive end date"),
    q: Optional[str] = Query(None, description="Substring search over company/position/stage"),
    sort: Optional[str] = Query(None, description="'oldest' for ascending date, otherwise newest first"),
    page: Optional[str] = Query(None, description="1-based page number (default 1)"),
    page_size: Optional[str] = Query(None, alias="pageSize", description="Jobs per page (default 10)"),
    user: Dict[str, Any] = Depends(get_current_user_doc),
    job_service: JobService = Depends(get_job_service),
) -> JobListResponse:
    """
    Return one page of the user's jobs and the total matching the filters.

    Unparseable dates or paging values are rejected with 400.
    """
    query = JobQuery.from_params(
        company=company,
        position=position,
        stage=stage,
        date_from=date_from,
        date_to=date_to,
        q=q,
        sort=sort,
        page=page,
        page_size=page_size,
    )
    result = job_service.list_jobs(user, query)
    return JobListResponse(
        jobs=[JobOut(**job) for job in result.jobs],
        total=result.total,
    )


@router.put(
    "/jobs/{job_id}",
    response_model=JobUpdatedResponse,
    summary="Update a job",
)
@api_operation("update job")
def update_job(
    job_id: str,
    body: JobUpdateRequest,
    user: Dict[str, Any] = Depends(get_current_user_doc),
    job_service: JobService = Depends(get_job_service),
) -> JobUpdatedResponse:
    """Apply only the fields present in the body; 404 if the job is unknown."""
    modified = job_service.update_job(user, job_id, body.supplied_fields())
    return JobUpdatedResponse(message="Job updated successfully", modified_count=modified)


@router.delete(
    "/jobs/{job_id}",
    response_model=JobsDeletedResponse,
    summary="Delete a job",
)
@api_operation("delete job")
def delete_job(
    job_id: str,
    user: Dict[str, Any] = Depends(get_current_user_doc),
    job_service: JobService = Depends(get_job_service),
) -> JobsDeletedResponse:
    job_service.delete_job(user, job_id)
    return JobsDeletedResponse(message="Job deleted successfully", deleted_count=1)


@router.delete(
    "/cleanup",
    response_model=JobsDeletedResponse,
    summary="Remove all of the current user's jobs",
)
@api_operation("clean up jobs")
def cleanup_jobs(
    user: Dict[str, Any] = Depends(get_current_user_doc),
    job_service: JobService = Depends(get_job_service),
) -> JobsDeletedResponse:
    removed = job_service.clear_user_jobs(user)
    get_logger(__name__, username=user["username"]).info(f"Cleanup removed {removed} jobs")
    return JobsDeletedResponse(
        message=f"Removed {removed} jobs for user {user['username']}.",
        deleted_count=removed,
    )
