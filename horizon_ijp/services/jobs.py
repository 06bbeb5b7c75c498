"""
Job listing service.

Search, lookup and HR-side management of job postings held in the
data store.
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Dict, List, Mapping, Optional

from horizon_ijp.filters import (
    After,
    AtLeast,
    AtMost,
    Before,
    Membership,
    Page,
    SortDirection,
    SortOption,
    TextSearch,
    query,
)
from horizon_ijp.models import Job, JobStatus, User, utc_now_iso
from horizon_ijp.services.errors import ConflictError, NotFoundError
from horizon_ijp.store import DataStore, generate_id

JOB_FILTERS = {
    "search": TextSearch(("title", "company_name", "description", "tags")),
    "company": Membership("company_id"),
    "department": Membership("department", ignore_case=True),
    "location": Membership("location", ignore_case=True),
    "function": Membership("function", ignore_case=True),
    "type": Membership("type"),
    "experience_level": Membership("experience_level"),
    "status": Membership("status"),
    # A job overlaps the requested band when its range reaches into it.
    "salary_min": AtLeast("salary_max"),
    "salary_max": AtMost("salary_min"),
    "posted_after": After("posted_date"),
    "posted_before": Before("posted_date"),
}

JOB_SORTS = {
    "newest": SortOption("posted_date", SortDirection.DESC, kind="date"),
    "oldest": SortOption("posted_date", SortDirection.ASC, kind="date"),
    "title_asc": SortOption("title", SortDirection.ASC),
    "title_desc": SortOption("title", SortDirection.DESC),
    "salary_high": SortOption("salary_max", SortDirection.DESC, kind="number", default=0),
    "salary_low": SortOption("salary_min", SortDirection.ASC, kind="number", default=0),
}

DEFAULT_JOB_SORT = "newest"


def get_jobs(
    store: DataStore,
    filters: Optional[Mapping[str, Any]] = None,
    sort_by: Optional[str] = None,
    page: Optional[int] = None,
    page_size: Optional[int] = None,
) -> Page[Job]:
    """Search jobs.

    Args:
        store: Data store to read from.
        filters: Criteria keyed by the names in ``JOB_FILTERS``.
        sort_by: One of ``JOB_SORTS``; defaults to newest first.
        page: 1-indexed page number.
        page_size: Items per page.

    Returns:
        The requested page of matching jobs.
    """
    return query(
        store.get_jobs(),
        filters,
        JOB_FILTERS,
        sort_by or DEFAULT_JOB_SORT,
        JOB_SORTS,
        page,
        page_size,
    )


def get_job_by_id(store: DataStore, job_id: str) -> Optional[Job]:
    return store.get_job_by_id(job_id)


def get_recommended_jobs(store: DataStore, limit: int = 6) -> List[Job]:
    """Most viewed open jobs."""
    open_jobs = [job for job in store.get_jobs() if job.status == JobStatus.OPEN.value]
    return sorted(open_jobs, key=lambda job: job.views_count, reverse=True)[:limit]


def get_recent_jobs(store: DataStore, limit: int = 6) -> List[Job]:
    page = get_jobs(store, {"status": JobStatus.OPEN.value}, "newest", 1, limit)
    return page.data


def get_jobs_by_company(store: DataStore, company_id: str) -> List[Job]:
    return [job for job in store.get_jobs() if job.company_id == company_id]


def get_job_locations(store: DataStore) -> List[str]:
    return sorted({job.location for job in store.get_jobs()})


def get_job_functions(store: DataStore) -> List[str]:
    return sorted({job.function for job in store.get_jobs()})


def count_jobs_by_status(store: DataStore) -> Dict[str, int]:
    counts = Counter(job.status for job in store.get_jobs())
    return {status.value: counts.get(status.value, 0) for status in JobStatus}


def create_job(store: DataStore, data: Mapping[str, Any], posted_by: User) -> Job:
    """Create a posting for one of the group companies.

    Raises:
        NotFoundError: If ``data["company_id"]`` names no company.
    """
    company = store.get_company_by_id(data["company_id"])
    if company is None:
        raise NotFoundError(f"Company {data['company_id']} not found")

    job_id = generate_id()
    now = utc_now_iso()
    job = Job(
        id=job_id,
        uuid=f"job-{job_id}",
        title=data["title"],
        description=data["description"],
        requirements=list(data.get("requirements") or []),
        responsibilities=list(data.get("responsibilities") or []),
        department=data["department"],
        function=data["function"],
        location=data["location"],
        type=data["type"],
        experience_level=data["experience_level"],
        salary_min=data.get("salary_min"),
        salary_max=data.get("salary_max"),
        salary_currency=data.get("salary_currency"),
        status=data.get("status") or JobStatus.OPEN.value,
        company_id=company.id,
        company_name=company.name,
        company_logo=company.logo,
        external_id=data.get("external_id") or f"IJP-{job_id}",
        posted_by=posted_by.id,
        posted_date=now,
        closing_date=data.get("closing_date"),
        tags=list(data.get("tags") or []),
        created_at=now,
        updated_at=now,
    )
    return store.create_job(job)


def update_job(store: DataStore, job_id: str, updates: Mapping[str, Any]) -> Job:
    """Apply a partial update to a job.

    Raises:
        NotFoundError: If the job does not exist.
        ConflictError: If the update would leave ``salary_min`` above
            ``salary_max``.
    """
    job = store.get_job_by_id(job_id)
    if job is None:
        raise NotFoundError(f"Job {job_id} not found")

    salary_min = updates.get("salary_min", job.salary_min)
    salary_max = updates.get("salary_max", job.salary_max)
    if salary_min is not None and salary_max is not None and salary_min > salary_max:
        raise ConflictError("salary_min must not exceed salary_max")

    updated = store.update_job(job_id, dict(updates))
    if updated is None:
        raise NotFoundError(f"Job {job_id} not found")
    return updated


def delete_job(store: DataStore, job_id: str) -> None:
    if not store.delete_job(job_id):
        raise NotFoundError(f"Job {job_id} not found")


def record_job_view(store: DataStore, job_id: str) -> Optional[Job]:
    """Increment the view counter of a job, returning the updated job."""
    job = store.get_job_by_id(job_id)
    if job is None:
        return None
    return store.update_job(job_id, {"views_count": job.views_count + 1})


def get_saved_jobs(store: DataStore, user: User) -> List[Job]:
    """The user's bookmarked jobs that still exist, in the order saved."""
    jobs = {job.id: job for job in store.get_jobs()}
    return [jobs[job_id] for job_id in user.saved_job_ids if job_id in jobs]


def save_job(store: DataStore, user: User, job_id: str) -> User:
    """Bookmark an open job. Saving a job twice keeps one entry.

    Raises:
        NotFoundError: If the job does not exist.
        ConflictError: If the job is not open.
    """
    job = store.get_job_by_id(job_id)
    if job is None:
        raise NotFoundError(f"Job {job_id} not found")
    if job.status != JobStatus.OPEN.value:
        raise ConflictError(f"Job {job_id} is not open")
    if job_id in user.saved_job_ids:
        return user
    return store.update_user(user.id, {"saved_job_ids": [*user.saved_job_ids, job_id]}) or user


def unsave_job(store: DataStore, user: User, job_id: str) -> User:
    if job_id not in user.saved_job_ids:
        raise NotFoundError(f"Job {job_id} is not saved")
    remaining = [saved for saved in user.saved_job_ids if saved != job_id]
    return store.update_user(user.id, {"saved_job_ids": remaining}) or user
