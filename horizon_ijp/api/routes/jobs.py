"""
Job listing API endpoints.

Provides search over the internal job board and, for HR partners and
admins, job posting management.
"""

from fastapi import APIRouter, Depends, Query, HTTPException, status
from typing import Optional, Dict, Any, List

from horizon_ijp.api.dependencies import (
    get_data_store,
    require_roles,
    require_user,
    session_role,
    split_csv,
)
from horizon_ijp.api.schemas import JobCreate, JobUpdate
from horizon_ijp.models import Job, JobStatus, Role, User
from horizon_ijp.services import applications as application_service
from horizon_ijp.services import jobs as job_service
from horizon_ijp.services.errors import ConflictError, NotFoundError
from horizon_ijp.store import DataStore

router = APIRouter(prefix="/api/jobs", tags=["jobs"])

MANAGERS = (Role.HR, Role.ADMIN)


def _get_managed_job(store: DataStore, job_id: str, user: User, role: Optional[Role]) -> Job:
    """Fetch a job the caller may edit, or raise 404.

    HR partners only manage their own company's jobs.
    """
    job = job_service.get_job_by_id(store, job_id)
    if job is None or (role is Role.HR and job.company_id != user.company_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Job {job_id} not found"
        )
    return job


@router.get("", response_model=Dict[str, Any])
async def list_jobs(
    search: Optional[str] = Query(None, description="Search title, company, description and tags"),
    company: Optional[str] = Query(None, description="Comma-separated company IDs"),
    department: Optional[str] = Query(None, description="Comma-separated departments"),
    location: Optional[str] = Query(None, description="Comma-separated locations"),
    function: Optional[str] = Query(None, description="Comma-separated functions"),
    job_type: Optional[str] = Query(None, alias="type", description="Comma-separated job types"),
    experience_level: Optional[str] = Query(None, description="Comma-separated experience levels"),
    status_filter: Optional[str] = Query(None, alias="status", description="Comma-separated statuses"),
    salary_min: Optional[int] = Query(None, description="Lowest acceptable salary"),
    salary_max: Optional[int] = Query(None, description="Highest acceptable salary"),
    posted_after: Optional[str] = Query(None, description="ISO date"),
    posted_before: Optional[str] = Query(None, description="ISO date"),
    sort_by: Optional[str] = Query(None, description="newest, oldest, title_asc, title_desc, salary_high, salary_low"),
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page"),
    user: User = Depends(require_user),
    role: Optional[Role] = Depends(session_role),
    store: DataStore = Depends(get_data_store),
):
    """
    Search jobs with filters, sorting and pagination.

    Employees and CHROs only ever see open jobs. HR partners see every
    status but only their own company's jobs; admins see everything.
    """
    filters: Dict[str, Any] = {
        "search": search,
        "company": split_csv(company),
        "department": split_csv(department),
        "location": split_csv(location),
        "function": split_csv(function),
        "type": split_csv(job_type),
        "experience_level": split_csv(experience_level),
        "status": split_csv(status_filter),
        "salary_min": salary_min,
        "salary_max": salary_max,
        "posted_after": posted_after,
        "posted_before": posted_before,
    }
    if role not in MANAGERS:
        filters["status"] = JobStatus.OPEN.value
    elif role is Role.HR:
        filters["company"] = [user.company_id]

    result = job_service.get_jobs(store, filters, sort_by, page, page_size)
    return result.to_dict()


@router.get("/recommended", response_model=List[Dict[str, Any]])
async def recommended_jobs(
    limit: int = Query(6, ge=1, le=50),
    user: User = Depends(require_user),
    store: DataStore = Depends(get_data_store),
):
    """Most viewed open jobs."""
    return [job.to_dict() for job in job_service.get_recommended_jobs(store, limit)]


@router.get("/recent", response_model=List[Dict[str, Any]])
async def recent_jobs(
    limit: int = Query(6, ge=1, le=50),
    user: User = Depends(require_user),
    store: DataStore = Depends(get_data_store),
):
    return [job.to_dict() for job in job_service.get_recent_jobs(store, limit)]


@router.get("/locations", response_model=List[str])
async def job_locations(
    user: User = Depends(require_user),
    store: DataStore = Depends(get_data_store),
):
    return job_service.get_job_locations(store)


@router.get("/functions", response_model=List[str])
async def job_functions(
    user: User = Depends(require_user),
    store: DataStore = Depends(get_data_store),
):
    return job_service.get_job_functions(store)


@router.get("/stats", response_model=Dict[str, Any])
async def job_stats(
    user: User = Depends(require_roles(Role.HR, Role.CHRO, Role.ADMIN)),
    store: DataStore = Depends(get_data_store),
):
    """Job counts by status."""
    by_status = job_service.count_jobs_by_status(store)
    return {"total": sum(by_status.values()), "by_status": by_status}


@router.get("/saved", response_model=List[Dict[str, Any]])
async def saved_jobs(
    user: User = Depends(require_user),
    store: DataStore = Depends(get_data_store),
):
    return [job.to_dict() for job in job_service.get_saved_jobs(store, user)]


@router.get("/{job_id}", response_model=Dict[str, Any])
async def get_job(
    job_id: str,
    user: User = Depends(require_user),
    store: DataStore = Depends(get_data_store),
):
    """
    Get a job by ID.

    Counts as a view of the posting. The response also tells whether the
    current user has already applied.
    """
    job = job_service.record_job_view(store, job_id)
    if not job:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Job {job_id} not found"
        )
    return {
        **job.to_dict(),
        "has_applied": application_service.has_user_applied(store, user.id, job_id),
        "is_saved": job_id in user.saved_job_ids,
    }


@router.post("", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
async def create_job(
    job_data: JobCreate,
    user: User = Depends(require_roles(*MANAGERS)),
    role: Optional[Role] = Depends(session_role),
    store: DataStore = Depends(get_data_store),
):
    """Post a new job. HR partners may only post for their own company."""
    if role is Role.HR and job_data.company_id != user.company_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="HR partners can only post jobs for their own company"
        )
    try:
        job = job_service.create_job(store, job_data.model_dump(mode="json"), posted_by=user)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    return job.to_dict()


@router.patch("/{job_id}", response_model=Dict[str, Any])
async def update_job(
    job_id: str,
    job_update: JobUpdate,
    user: User = Depends(require_roles(*MANAGERS)),
    role: Optional[Role] = Depends(session_role),
    store: DataStore = Depends(get_data_store),
):
    """Update a job. Only the supplied fields change."""
    _get_managed_job(store, job_id, user, role)
    updates = job_update.model_dump(mode="json", exclude_unset=True)
    if not updates:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields to update"
        )
    try:
        job = job_service.update_job(store, job_id, updates)
    except ConflictError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    return job.to_dict()


@router.delete("/{job_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_job(
    job_id: str,
    user: User = Depends(require_roles(*MANAGERS)),
    role: Optional[Role] = Depends(session_role),
    store: DataStore = Depends(get_data_store),
):
    _get_managed_job(store, job_id, user, role)
    try:
        job_service.delete_job(store, job_id)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )


@router.post("/{job_id}/save", response_model=Dict[str, Any])
async def save_job(
    job_id: str,
    user: User = Depends(require_user),
    store: DataStore = Depends(get_data_store),
):
    """Bookmark an open job."""
    try:
        updated = job_service.save_job(store, user, job_id)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    except ConflictError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    return {"saved_job_ids": updated.saved_job_ids}


@router.delete("/{job_id}/save", response_model=Dict[str, Any])
async def unsave_job(
    job_id: str,
    user: User = Depends(require_user),
    store: DataStore = Depends(get_data_store),
):
    try:
        updated = job_service.unsave_job(store, user, job_id)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    return {"saved_job_ids": updated.saved_job_ids}
