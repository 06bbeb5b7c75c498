"""
Application tracking API endpoints.

Employees apply to open jobs, follow their applications and may
withdraw them.  HR partners review the applicants to their own
company's jobs and move them through the hiring pipeline.
"""

from fastapi import APIRouter, Depends, Query, HTTPException, status
from typing import Optional, Dict, Any

from horizon_ijp.api.dependencies import (
    get_data_store,
    require_roles,
    require_user,
    session_role,
    split_csv,
)
from horizon_ijp.api.schemas import ApplicationCreate, ApplicationStatusUpdate
from horizon_ijp.models import Application, Role, User
from horizon_ijp.services import applications as application_service
from horizon_ijp.services.errors import ConflictError, NotFoundError
from horizon_ijp.store import DataStore

router = APIRouter(prefix="/api/applications", tags=["applications"])


def _scope_filters(user: User, role: Optional[Role]) -> Dict[str, Any]:
    """Criteria restricting a listing to what ``role`` may see."""
    if role is Role.EMPLOYEE:
        return {"user_id": user.id}
    if role is Role.HR:
        return {"company_id": user.company_id}
    return {}


def _get_visible_application(
    store: DataStore, application_id: str, user: User, role: Optional[Role]
) -> Application:
    """Fetch an application the caller may see, or raise 404."""
    application = application_service.get_application_by_id(store, application_id)
    visible = application is not None
    if visible and role is Role.EMPLOYEE:
        visible = application.user_id == user.id
    elif visible and role is Role.HR:
        job = store.get_job_by_id(application.job_id)
        visible = job is not None and job.company_id == user.company_id
    if not visible:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Application {application_id} not found"
        )
    return application


def _list_filters(
    user: User,
    role: Optional[Role],
    status_filter: Optional[str],
    job_id: Optional[str],
    applied_after: Optional[str],
    applied_before: Optional[str],
) -> Dict[str, Any]:
    filters: Dict[str, Any] = {
        "status": split_csv(status_filter),
        "job_id": split_csv(job_id),
        "applied_after": applied_after,
        "applied_before": applied_before,
    }
    filters.update(_scope_filters(user, role))
    return filters


@router.get("", response_model=Dict[str, Any])
async def list_applications(
    status_filter: Optional[str] = Query(None, alias="status", description="Comma-separated statuses"),
    job_id: Optional[str] = Query(None, description="Comma-separated job IDs"),
    applied_after: Optional[str] = Query(None, description="ISO date"),
    applied_before: Optional[str] = Query(None, description="ISO date"),
    sort_by: Optional[str] = Query(None, description="newest, oldest or status"),
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page"),
    user: User = Depends(require_user),
    role: Optional[Role] = Depends(session_role),
    store: DataStore = Depends(get_data_store),
):
    """
    List applications.

    Employees see only their own applications and HR partners only those
    to their company's jobs. The response includes counts by status over
    the whole scoped set.
    """
    filters = _list_filters(user, role, status_filter, job_id, applied_after, applied_before)
    result = application_service.get_applications(store, filters, sort_by, page, page_size)

    scoped = application_service.get_applications(
        store, _scope_filters(user, role), page=1, page_size=len(store.get_applications()) or 1
    ).data
    result.extra["status_counts"] = application_service.count_applications_by_status(store, scoped)
    return result.to_dict()


@router.get("/{application_id}", response_model=Dict[str, Any])
async def get_application(
    application_id: str,
    user: User = Depends(require_user),
    role: Optional[Role] = Depends(session_role),
    store: DataStore = Depends(get_data_store),
):
    """
    Get an application with the applicant's contact details, status
    timeline and other applications.
    """
    _get_visible_application(store, application_id, user, role)
    return application_service.get_applicant_detail(store, application_id)


@router.get("/{application_id}/adjacent", response_model=Dict[str, Any])
async def get_adjacent_applications(
    application_id: str,
    status_filter: Optional[str] = Query(None, alias="status"),
    job_id: Optional[str] = Query(None),
    sort_by: Optional[str] = Query(None),
    user: User = Depends(require_roles(Role.HR, Role.CHRO, Role.ADMIN)),
    role: Optional[Role] = Depends(session_role),
    store: DataStore = Depends(get_data_store),
):
    """Previous and next application IDs for stepping through applicants."""
    _get_visible_application(store, application_id, user, role)
    filters = _list_filters(user, role, status_filter, job_id, None, None)
    return application_service.get_adjacent_application_ids(store, application_id, filters, sort_by)


@router.post("", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
async def create_application(
    application: ApplicationCreate,
    user: User = Depends(require_roles(Role.EMPLOYEE)),
    store: DataStore = Depends(get_data_store),
):
    """Apply to an open job."""
    try:
        created = application_service.create_application(
            store,
            user,
            application.job_id,
            cover_letter=application.cover_letter,
            resume_url=application.resume_url,
            experience_level=application.experience_level.value if application.experience_level else None,
        )
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
    return created.to_dict()


@router.patch("/{application_id}/status", response_model=Dict[str, Any])
async def update_application_status(
    application_id: str,
    status_update: ApplicationStatusUpdate,
    user: User = Depends(require_roles(Role.HR, Role.ADMIN)),
    role: Optional[Role] = Depends(session_role),
    store: DataStore = Depends(get_data_store),
):
    """Move an application to a new pipeline status."""
    _get_visible_application(store, application_id, user, role)
    try:
        updated = application_service.update_application_status(
            store, application_id, status_update.status.value, status_update.notes
        )
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
    return updated.to_dict()


@router.post("/{application_id}/withdraw", response_model=Dict[str, Any])
async def withdraw_application(
    application_id: str,
    user: User = Depends(require_user),
    store: DataStore = Depends(get_data_store),
):
    """Withdraw one of the current user's own applications."""
    application = application_service.get_application_by_id(store, application_id)
    if not application or application.user_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Application {application_id} not found"
        )
    try:
        updated = application_service.withdraw_application(store, application_id)
    except ConflictError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    return updated.to_dict()
