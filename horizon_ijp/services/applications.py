"""
Application tracking service.

Employees apply to open jobs and may withdraw; HR moves applications
through the pipeline.  Listings reuse the shared filter engine, with an
extra ``company_id`` criterion that narrows to applications for one
company's jobs.
"""

from __future__ import annotations

from collections import Counter
from datetime import timedelta
from typing import Any, Dict, List, Mapping, Optional

from horizon_ijp.filters import (
    After,
    Before,
    Membership,
    Page,
    SortDirection,
    SortOption,
    query,
)
from horizon_ijp.models import (
    Application,
    ApplicationStatus,
    JobStatus,
    User,
    parse_iso_datetime,
    utc_now_iso,
)
from horizon_ijp.services.errors import ConflictError, NotFoundError
from horizon_ijp.store import DataStore, generate_id

PIPELINE_ORDER = tuple(status.value for status in ApplicationStatus)

# Statuses an application can no longer leave.
FINAL_STATUSES = {
    ApplicationStatus.ACCEPTED.value,
    ApplicationStatus.REJECTED.value,
    ApplicationStatus.WITHDRAWN.value,
}

APPLICATION_FILTERS = {
    "user_id": Membership("user_id"),
    "job_id": Membership("job_id"),
    "status": Membership("status"),
    "applied_after": After("applied_at"),
    "applied_before": Before("applied_at"),
}

APPLICATION_SORTS = {
    "newest": SortOption("applied_at", SortDirection.DESC, kind="date"),
    "oldest": SortOption("applied_at", SortDirection.ASC, kind="date"),
    "status": SortOption("status", kind="rank", ranking=PIPELINE_ORDER),
}

DEFAULT_APPLICATION_SORT = "newest"

DEFAULT_RESUME_URL = "/documents/resume.pdf"


def get_applications(
    store: DataStore,
    filters: Optional[Mapping[str, Any]] = None,
    sort_by: Optional[str] = None,
    page: Optional[int] = None,
    page_size: Optional[int] = None,
) -> Page[Application]:
    """List applications matching ``filters``.

    Besides the keys of ``APPLICATION_FILTERS``, ``filters`` may carry
    ``company_id`` to keep only applications to that company's jobs.
    """
    criteria = dict(filters or {})
    applications = store.get_applications()

    company_id = criteria.pop("company_id", None)
    if company_id:
        job_ids = {job.id for job in store.get_jobs() if job.company_id == company_id}
        applications = [app for app in applications if app.job_id in job_ids]

    return query(
        applications,
        criteria,
        APPLICATION_FILTERS,
        sort_by or DEFAULT_APPLICATION_SORT,
        APPLICATION_SORTS,
        page,
        page_size,
    )


def get_application_by_id(store: DataStore, application_id: str) -> Optional[Application]:
    return store.get_application_by_id(application_id)


def get_user_applications(store: DataStore, user_id: str) -> List[Application]:
    return [app for app in store.get_applications() if app.user_id == user_id]


def get_applications_by_job(store: DataStore, job_id: str) -> List[Application]:
    return [app for app in store.get_applications() if app.job_id == job_id]


def has_user_applied(store: DataStore, user_id: str, job_id: str) -> bool:
    return any(
        app.user_id == user_id and app.job_id == job_id
        for app in store.get_applications()
    )


def count_applications_by_status(
    store: DataStore, applications: Optional[List[Application]] = None
) -> Dict[str, int]:
    if applications is None:
        applications = store.get_applications()
    counts = Counter(app.status for app in applications)
    return {status: counts.get(status, 0) for status in PIPELINE_ORDER}


def create_application(
    store: DataStore,
    user: User,
    job_id: str,
    cover_letter: Optional[str] = None,
    resume_url: Optional[str] = None,
    experience_level: Optional[str] = None,
) -> Application:
    """Submit ``user``'s application to a job.

    Raises:
        NotFoundError: If the job does not exist.
        ConflictError: If the job is not open or the user already applied.
    """
    job = store.get_job_by_id(job_id)
    if job is None:
        raise NotFoundError(f"Job {job_id} not found")
    if job.status != JobStatus.OPEN.value:
        raise ConflictError(f"Job {job_id} is not accepting applications")
    if has_user_applied(store, user.id, job_id):
        raise ConflictError("Application already exists for this job")

    application_id = generate_id()
    now = utc_now_iso()
    application = Application(
        id=application_id,
        uuid=f"app-{application_id}",
        job_id=job.id,
        job_title=job.title,
        user_id=user.id,
        user_name=user.full_name,
        user_email=user.email,
        user_company_name=user.company_name or "Unknown Company",
        user_experience_level=experience_level or job.experience_level,
        status=ApplicationStatus.SUBMITTED.value,
        cover_letter=cover_letter,
        resume_url=resume_url or DEFAULT_RESUME_URL,
        applied_at=now,
        created_at=now,
        updated_at=now,
    )
    return store.create_application(application)


def update_application_status(
    store: DataStore,
    application_id: str,
    status: str,
    notes: Optional[str] = None,
) -> Application:
    """Move an application to ``status``, optionally replacing its notes.

    Raises:
        NotFoundError: If the application does not exist.
        ConflictError: If the application is already in a final status.
    """
    application = store.get_application_by_id(application_id)
    if application is None:
        raise NotFoundError(f"Application {application_id} not found")
    if application.status in FINAL_STATUSES and application.status != status:
        raise ConflictError(f"Application {application_id} is already {application.status}")

    updates: Dict[str, Any] = {"status": status}
    if notes:
        updates["notes"] = notes
    updated = store.update_application(application_id, updates)
    if updated is None:
        raise NotFoundError(f"Application {application_id} not found")
    return updated


def withdraw_application(store: DataStore, application_id: str) -> Application:
    return update_application_status(
        store, application_id, ApplicationStatus.WITHDRAWN.value, "Withdrawn by applicant"
    )


def build_timeline(application: Application) -> List[Dict[str, Any]]:
    """Reconstruct the status history implied by an application's status.

    Only the current status is stored, so intermediate steps are spaced
    two days apart from ``applied_at``.
    """
    applied = parse_iso_datetime(application.applied_at)
    events = [
        {
            "id": f"{application.id}-1",
            "status": ApplicationStatus.SUBMITTED.value,
            "timestamp": application.applied_at,
            "notes": "Application received",
        }
    ]
    if applied is None:
        return events

    def stamp(days: int) -> str:
        return (applied + timedelta(days=days)).isoformat().replace("+00:00", "Z")

    if application.status == ApplicationStatus.REJECTED.value:
        events.append({"id": f"{application.id}-2", "status": ApplicationStatus.UNDER_REVIEW.value,
                       "timestamp": stamp(2), "notes": None})
        events.append({"id": f"{application.id}-3", "status": application.status,
                       "timestamp": stamp(5), "notes": application.notes})
    elif application.status == ApplicationStatus.WITHDRAWN.value:
        events.append({"id": f"{application.id}-2", "status": application.status,
                       "timestamp": stamp(3), "notes": "Withdrawn by applicant"})
    else:
        progression = PIPELINE_ORDER[:PIPELINE_ORDER.index(ApplicationStatus.ACCEPTED.value) + 1]
        current = progression.index(application.status) if application.status in progression else 0
        for step in range(1, current + 1):
            events.append({
                "id": f"{application.id}-{step + 1}",
                "status": progression[step],
                "timestamp": stamp(step * 2),
                "notes": application.notes if step == current else None,
            })
    return events


def get_applicant_detail(store: DataStore, application_id: str) -> Optional[Dict[str, Any]]:
    """Application enriched with applicant contact info, timeline and
    the applicant's other applications."""
    application = store.get_application_by_id(application_id)
    if application is None:
        return None
    user = store.get_user_by_id(application.user_id)
    related = [
        app.to_dict()
        for app in store.get_applications()
        if app.user_email == application.user_email and app.id != application.id
    ]
    return {
        **application.to_dict(),
        "phone": user.phone if user else None,
        "location": user.location if user else None,
        "timeline": build_timeline(application),
        "related_applications": related,
    }


def get_adjacent_application_ids(
    store: DataStore,
    application_id: str,
    filters: Optional[Mapping[str, Any]] = None,
    sort_by: Optional[str] = None,
) -> Dict[str, Optional[str]]:
    """Previous/next application ids within the filtered, sorted list."""
    ordered = get_applications(store, filters, sort_by, 1, len(store.get_applications()) or 1).data
    ids = [app.id for app in ordered]
    if application_id not in ids:
        return {"prev_id": None, "next_id": None}
    index = ids.index(application_id)
    return {
        "prev_id": ids[index - 1] if index > 0 else None,
        "next_id": ids[index + 1] if index < len(ids) - 1 else None,
    }
