"""
Role landing pages.

These paths are gated by ``RoleAccessMiddleware``: a request only
reaches a handler here once the session's role may open the path.  The
handlers check the role again so they stay closed when mounted without
the middleware.  Each page returns the data its screen displays.
"""

from fastapi import APIRouter, Depends, Query
from typing import Optional, Dict, Any

from horizon_ijp.api.dependencies import get_data_store, require_roles, require_user, split_csv
from horizon_ijp.models import Role, User
from horizon_ijp.services import dashboard as dashboard_service
from horizon_ijp.services import jobs as job_service
from horizon_ijp.services import reports as report_service
from horizon_ijp.services.reports import ReportType
from horizon_ijp.store import DataStore

router = APIRouter(tags=["pages"])


@router.get("/login", response_model=Dict[str, Any])
async def login_page(redirect: Optional[str] = Query(None)):
    """Tell the client where to post credentials and where to go after."""
    return {
        "page": "login",
        "login_endpoint": "/api/auth/login",
        "redirect": redirect,
    }


@router.get("/dashboard", response_model=Dict[str, Any])
async def employee_dashboard(
    user: User = Depends(require_user),
    store: DataStore = Depends(get_data_store),
):
    return dashboard_service.employee_dashboard(store, user)


@router.get("/saved", response_model=Dict[str, Any])
async def saved_jobs_page(
    user: User = Depends(require_user),
    store: DataStore = Depends(get_data_store),
):
    jobs = job_service.get_saved_jobs(store, user)
    return {"total": len(jobs), "jobs": [job.to_dict() for job in jobs]}


@router.get("/hr/dashboard", response_model=Dict[str, Any])
async def hr_dashboard(
    user: User = Depends(require_roles(Role.HR, Role.ADMIN)),
    store: DataStore = Depends(get_data_store),
):
    return dashboard_service.hr_dashboard(store, user)


@router.get("/chro/dashboard", response_model=Dict[str, Any])
async def chro_dashboard(
    user: User = Depends(require_roles(Role.CHRO, Role.ADMIN)),
    store: DataStore = Depends(get_data_store),
):
    return dashboard_service.chro_dashboard(store)


@router.get("/chro/reports", response_model=Dict[str, Any])
async def chro_reports(
    report: ReportType = Query(ReportType.HIRING_OVERVIEW, description="Which report to build"),
    date_range: Optional[str] = Query(None, description="last-7-days, last-30-days, last-quarter, last-6-months or last-year"),
    start_date: Optional[str] = Query(None, description="ISO date; overrides date_range"),
    end_date: Optional[str] = Query(None, description="ISO date; overrides date_range"),
    company: Optional[str] = Query(None, description="Comma-separated company IDs"),
    department: Optional[str] = Query(None, description="Comma-separated departments"),
    status_filter: Optional[str] = Query(None, alias="status", description="Comma-separated application statuses"),
    user: User = Depends(require_roles(Role.CHRO, Role.ADMIN)),
    store: DataStore = Depends(get_data_store),
):
    """
    Build one hiring report.

    Without any date criteria the report covers all applications; a
    ``date_range`` preset is used only when no explicit dates are given.
    """
    if date_range and not (start_date or end_date):
        start_date, end_date = report_service.date_range_from_preset(date_range)
    filters: Dict[str, Any] = {
        "applied_after": start_date,
        "applied_before": end_date,
        "company": split_csv(company),
        "department": split_csv(department),
        "status": split_csv(status_filter),
    }
    filters = {name: value for name, value in filters.items() if value}
    return {
        **report_service.build_report(store, report, filters),
        "options": report_service.report_filter_options(store),
    }


@router.get("/admin/dashboard", response_model=Dict[str, Any])
async def admin_dashboard(
    user: User = Depends(require_roles(Role.ADMIN)),
    store: DataStore = Depends(get_data_store),
):
    return dashboard_service.admin_dashboard(store)
