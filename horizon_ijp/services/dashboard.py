"""
Dashboard metrics for each role's landing page.
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict

from horizon_ijp.models import ApplicationStatus, JobStatus, User, parse_iso_datetime
from horizon_ijp.services import applications as application_service
from horizon_ijp.services import jobs as job_service
from horizon_ijp.services import users as user_service
from horizon_ijp.store import DataStore

PENDING_REVIEW = {ApplicationStatus.SUBMITTED.value, ApplicationStatus.UNDER_REVIEW.value}


def employee_dashboard(store: DataStore, user: User) -> Dict[str, Any]:
    my_applications = application_service.get_user_applications(store, user.id)
    return {
        "recommended_jobs": [j.to_dict() for j in job_service.get_recommended_jobs(store)],
        "recent_jobs": [j.to_dict() for j in job_service.get_recent_jobs(store)],
        "application_count": len(my_applications),
        "applications_by_status": application_service.count_applications_by_status(
            store, my_applications
        ),
    }


def hr_dashboard(store: DataStore, user: User) -> Dict[str, Any]:
    """Metrics for the HR partner's own company."""
    company_jobs = job_service.get_jobs_by_company(store, user.company_id)
    job_ids = {job.id for job in company_jobs}
    company_applications = [
        app for app in store.get_applications() if app.job_id in job_ids
    ]

    today = datetime.now(timezone.utc).date()
    new_today = Counter()
    for app in company_applications:
        applied = parse_iso_datetime(app.applied_at)
        if applied is not None and applied.date() == today:
            new_today[app.job_id] += 1

    top_jobs = sorted(company_jobs, key=lambda job: job.applications_count, reverse=True)[:5]
    recent = application_service.get_applications(
        store, {"company_id": user.company_id}, "newest", 1, 5
    )

    return {
        "total_active_jobs": sum(1 for job in company_jobs if job.status == JobStatus.OPEN.value),
        "new_applications_today": sum(new_today.values()),
        "pending_reviews": sum(1 for app in company_applications if app.status in PENDING_REVIEW),
        "total_applications": len(company_applications),
        "top_jobs": [
            {
                "job": job.to_dict(),
                "applicants_count": job.applications_count,
                "new_today": new_today.get(job.id, 0),
            }
            for job in top_jobs
        ],
        "recent_applications": [app.to_dict() for app in recent.data],
    }


def chro_dashboard(store: DataStore) -> Dict[str, Any]:
    """Group-wide hiring metrics."""
    jobs = {job.id: job for job in store.get_jobs()}
    all_applications = store.get_applications()
    hires = [app for app in all_applications if app.status == ApplicationStatus.ACCEPTED.value]

    by_company = Counter(jobs[app.job_id].company_name for app in hires if app.job_id in jobs)
    by_function = Counter(jobs[app.job_id].function for app in hires if app.job_id in jobs)
    talent_flow = Counter(
        (app.user_company_name, jobs[app.job_id].company_name)
        for app in hires
        if app.job_id in jobs
    )

    return {
        "total_internal_hires": len(hires),
        "active_job_postings": sum(1 for job in jobs.values() if job.status == JobStatus.OPEN.value),
        "total_applications": len(all_applications),
        "hiring_funnel": application_service.count_applications_by_status(store, all_applications),
        "hires_by_company": [
            {"company_name": name, "count": count} for name, count in by_company.most_common()
        ],
        "hires_by_function": [
            {"function_name": name, "count": count} for name, count in by_function.most_common()
        ],
        "talent_flow": [
            {"from": source, "to": target, "count": count}
            for (source, target), count in talent_flow.most_common()
        ],
    }


def admin_dashboard(store: DataStore) -> Dict[str, Any]:
    companies = store.get_companies()
    return {
        "users_by_role": user_service.count_users_by_role(store),
        "jobs_by_status": job_service.count_jobs_by_status(store),
        "applications_by_status": application_service.count_applications_by_status(store),
        "company_count": len(companies),
        "company_sync_status": dict(Counter(company.sync_status for company in companies)),
        "data_store": {
            "initialized": store.is_initialized(),
            "counts": store.counts(),
        },
    }
