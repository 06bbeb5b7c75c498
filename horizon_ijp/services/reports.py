"""
Group-wide hiring reports for the CHRO.

Every report starts from the same slice of applications: those applied
within a date range, optionally narrowed to some companies, departments
or statuses.  Company and department are properties of the job, so
those criteria select jobs first and keep the applications to them.

Offered and accepted applications count as hires.  Time to hire is the
number of whole days between applying and the application's last
update.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from horizon_ijp.filters import After, Before, Membership, filter_records
from horizon_ijp.models import Application, ApplicationStatus, Job, JobStatus, parse_iso_datetime
from horizon_ijp.store import DataStore


class ReportType(str, Enum):
    HIRING_OVERVIEW = "hiring-overview"
    COMPANY_COMPARISON = "company-comparison"
    DEPARTMENT_ANALYSIS = "department-analysis"
    TIME_TO_HIRE = "time-to-hire"
    PIPELINE_ANALYSIS = "pipeline-analysis"


REPORT_FILTERS = {
    "applied_after": After("applied_at"),
    "applied_before": Before("applied_at"),
    "status": Membership("status"),
}

REPORT_JOB_FILTERS = {
    "company": Membership("company_id"),
    "department": Membership("department"),
}

DATE_RANGE_PRESETS = {
    "last-7-days": 7,
    "last-30-days": 30,
    "last-quarter": 90,
    "last-6-months": 182,
    "last-year": 365,
}
DEFAULT_PRESET = "last-30-days"

HIRED = {ApplicationStatus.OFFERED.value, ApplicationStatus.ACCEPTED.value}
CLOSED = {ApplicationStatus.REJECTED.value, ApplicationStatus.WITHDRAWN.value}

STAGE_LABELS = {
    ApplicationStatus.SUBMITTED.value: "Applied",
    ApplicationStatus.UNDER_REVIEW.value: "Reviewing",
    ApplicationStatus.SHORTLISTED.value: "Shortlisted",
    ApplicationStatus.INTERVIEW_SCHEDULED.value: "Interview",
    ApplicationStatus.OFFERED.value: "Offered",
    ApplicationStatus.ACCEPTED.value: "Accepted",
    ApplicationStatus.REJECTED.value: "Rejected",
    ApplicationStatus.WITHDRAWN.value: "Withdrawn",
}

# (label, lowest day, highest day); None means open-ended.
TIME_TO_HIRE_BUCKETS: Sequence[Tuple[str, int, Optional[int]]] = (
    ("0-7 days", 0, 7),
    ("8-14 days", 8, 14),
    ("15-30 days", 15, 30),
    ("31-60 days", 31, 60),
    ("60+ days", 61, None),
)


def date_range_from_preset(preset: Optional[str], today: Optional[date] = None) -> Tuple[str, str]:
    """Start and end dates (ISO) for a named range ending today.

    Unknown presets fall back to the last 30 days. The end date is
    tomorrow so that applications made today are inside the range.
    """
    today = today or datetime.now(timezone.utc).date()
    days = DATE_RANGE_PRESETS.get(preset or DEFAULT_PRESET, DATE_RANGE_PRESETS[DEFAULT_PRESET])
    return (today - timedelta(days=days)).isoformat(), (today + timedelta(days=1)).isoformat()


def _percent(part: int, whole: int) -> int:
    return round(part * 100 / whole) if whole else 0


def _mean(values: Sequence[int]) -> int:
    return round(sum(values) / len(values)) if values else 0


def days_to_hire(application: Application) -> int:
    applied = parse_iso_datetime(application.applied_at)
    updated = parse_iso_datetime(application.updated_at)
    if applied is None or updated is None:
        return 0
    return max((updated - applied).days, 0)


def select_applications(
    store: DataStore, filters: Optional[Mapping[str, Any]] = None
) -> Tuple[List[Application], Dict[str, Job]]:
    """Applications matching the report criteria, plus every job by ID.

    Args:
        filters: ``applied_after``/``applied_before`` (ISO dates),
            ``status``, ``company`` (company IDs) and ``department``.
    """
    criteria = dict(filters or {})
    jobs = store.get_jobs()
    job_criteria = {name: criteria.pop(name, None) for name in REPORT_JOB_FILTERS}

    applications = filter_records(store.get_applications(), criteria, REPORT_FILTERS)
    if any(job_criteria.values()):
        wanted = {job.id for job in filter_records(jobs, job_criteria, REPORT_JOB_FILTERS)}
        applications = [app for app in applications if app.job_id in wanted]
    return applications, {job.id: job for job in jobs}


def report_filter_options(store: DataStore) -> Dict[str, Any]:
    companies = sorted(store.get_companies(), key=lambda c: c.name.casefold())
    return {
        "companies": [{"id": c.id, "name": c.name} for c in companies],
        "departments": sorted({job.department for job in store.get_jobs() if job.department}),
        "statuses": [status.value for status in ApplicationStatus],
        "date_ranges": list(DATE_RANGE_PRESETS),
    }


def _outcome_counts(applications: Sequence[Application]) -> Dict[str, int]:
    hired_days = [days_to_hire(app) for app in applications if app.status in HIRED]
    return {
        "total_applications": len(applications),
        "total_hired": len(hired_days),
        "hire_rate": _percent(len(hired_days), len(applications)),
        "avg_time_to_hire": _mean(hired_days),
    }


def hiring_overview(store: DataStore, filters: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    applications, jobs = select_applications(store, filters)
    total = len(applications)
    all_jobs = list(jobs.values())

    stages = Counter(STAGE_LABELS.get(app.status, "Unknown") for app in applications)
    status_distribution = sorted(
        (
            {"stage": label, "count": stages[label], "percentage": _percent(stages[label], total)}
            for label in STAGE_LABELS.values()
            if stages[label]
        ),
        key=lambda row: row["count"],
        reverse=True,
    )

    by_job: Dict[str, List[Application]] = defaultdict(list)
    for app in applications:
        if app.job_id in jobs:
            by_job[app.job_id].append(app)
    rows = []
    for job_id, job_applications in by_job.items():
        job = jobs[job_id]
        statuses = Counter(app.status for app in job_applications)
        outcome = _outcome_counts(job_applications)
        rows.append({
            "id": job.id,
            "job_title": job.title,
            "company_name": job.company_name,
            "department": job.department,
            "status": job.status,
            "applications": len(job_applications),
            "shortlisted": statuses[ApplicationStatus.SHORTLISTED.value],
            "interviewed": statuses[ApplicationStatus.INTERVIEW_SCHEDULED.value],
            "offered": statuses[ApplicationStatus.OFFERED.value],
            "hired": outcome["total_hired"],
            "avg_time_to_hire": outcome["avg_time_to_hire"],
        })
    rows.sort(key=lambda row: row["applications"], reverse=True)

    outcome = _outcome_counts(applications)
    rejected = sum(1 for app in applications if app.status == ApplicationStatus.REJECTED.value)
    pending = sum(1 for app in applications if app.status not in HIRED | CLOSED)
    return {
        "summary": {
            **outcome,
            "total_rejected": rejected,
            "total_pending": pending,
            "open_positions": sum(1 for job in all_jobs if job.status == JobStatus.OPEN.value),
            "positions_filled": sum(1 for job in all_jobs if job.status == JobStatus.FILLED.value),
        },
        "status_distribution": status_distribution,
        "jobs": rows,
    }


def company_comparison(store: DataStore, filters: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Per-company outcomes for the selected companies, or all of them."""
    applications, jobs = select_applications(store, filters)
    selected = (filters or {}).get("company") or []
    if isinstance(selected, str):
        selected = [selected]
    companies = [c for c in store.get_companies() if not selected or c.id in selected]

    rows = []
    for company in companies:
        company_jobs = [job for job in jobs.values() if job.company_id == company.id]
        job_ids = {job.id for job in company_jobs}
        company_applications = [app for app in applications if app.job_id in job_ids]
        rows.append({
            "company_id": company.id,
            "company_name": company.name,
            "industry": company.industry,
            **_outcome_counts(company_applications),
            "open_positions": sum(1 for job in company_jobs if job.status == JobStatus.OPEN.value),
            "positions_filled": sum(1 for job in company_jobs if job.status == JobStatus.FILLED.value),
        })
    rows.sort(key=lambda row: row["total_applications"], reverse=True)
    return {"companies": rows}


def department_analysis(store: DataStore, filters: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    applications, jobs = select_applications(store, filters)
    departments = sorted({job.department for job in jobs.values() if job.department})

    rows = []
    for department in departments:
        job_ids = {job.id for job in jobs.values() if job.department == department}
        dept_applications = [app for app in applications if app.job_id in job_ids]
        statuses = Counter(app.status for app in dept_applications)
        by_company = Counter(jobs[app.job_id].company_name for app in dept_applications)
        rows.append({
            "department": department,
            **_outcome_counts(dept_applications),
            "shortlisted": statuses[ApplicationStatus.SHORTLISTED.value],
            "interviewed": statuses[ApplicationStatus.INTERVIEW_SCHEDULED.value],
            "offered": statuses[ApplicationStatus.OFFERED.value],
            "rejected": statuses[ApplicationStatus.REJECTED.value],
            "top_companies": [name for name, _ in by_company.most_common(3)],
        })
    rows.sort(key=lambda row: row["total_applications"], reverse=True)

    most_active = rows[0] if rows else None
    best_rate = max(rows, key=lambda row: row["hire_rate"]) if rows else None
    return {
        "summary": {
            "total_departments": len(rows),
            "most_active_department": most_active["department"] if most_active else None,
            "most_active_count": most_active["total_applications"] if most_active else 0,
            "highest_hire_rate_department": best_rate["department"] if best_rate else None,
            "highest_hire_rate": best_rate["hire_rate"] if best_rate else 0,
            "avg_applications_per_department": _mean([row["total_applications"] for row in rows]),
        },
        "departments": rows,
    }


def _time_to_hire_groups(groups: Mapping[str, List[int]]) -> List[Dict[str, Any]]:
    rows = [
        {
            "name": name,
            "avg_days": _mean(days),
            "min_days": min(days),
            "max_days": max(days),
            "total_hires": len(days),
        }
        for name, days in groups.items()
    ]
    return sorted(rows, key=lambda row: row["avg_days"])


def time_to_hire(store: DataStore, filters: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    applications, jobs = select_applications(store, filters)
    hires = [app for app in applications if app.status in HIRED]
    days = [days_to_hire(app) for app in hires]
    ordered = sorted(days)

    by_company: Dict[str, List[int]] = defaultdict(list)
    by_department: Dict[str, List[int]] = defaultdict(list)
    by_level: Dict[str, List[int]] = defaultdict(list)
    for app, elapsed in zip(hires, days):
        job = jobs.get(app.job_id)
        if job is not None:
            by_company[job.company_name].append(elapsed)
            by_department[job.department].append(elapsed)
        by_level[app.user_experience_level].append(elapsed)

    distribution = []
    for label, low, high in TIME_TO_HIRE_BUCKETS:
        count = sum(1 for d in days if d >= low and (high is None or d <= high))
        distribution.append({"range": label, "count": count, "percentage": _percent(count, len(days))})

    return {
        "summary": {
            "overall_avg": _mean(days),
            "fastest": ordered[0] if ordered else 0,
            "slowest": ordered[-1] if ordered else 0,
            "median": ordered[len(ordered) // 2] if ordered else 0,
            "percentile_90": ordered[int(len(ordered) * 0.9)] if ordered else 0,
        },
        "by_company": _time_to_hire_groups(by_company),
        "by_department": _time_to_hire_groups(by_department),
        "by_experience_level": [
            {"level": level, "avg_days": _mean(values), "total_hires": len(values)}
            for level, values in by_level.items()
        ],
        "distribution": distribution,
        "hires": [
            {
                "id": app.id,
                "applicant_name": app.user_name,
                "job_title": app.job_title,
                "company_name": jobs[app.job_id].company_name if app.job_id in jobs else None,
                "days_to_hire": elapsed,
                "hired_at": app.updated_at,
            }
            for app, elapsed in zip(hires, days)
        ],
    }


def pipeline_analysis(store: DataStore, filters: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Where the still-active applications sit in the pipeline.

    ``conversion_to_next`` is the share of applications at or beyond a
    stage that have moved past it.
    """
    applications, _ = select_applications(store, filters)
    active_statuses = [status for status in STAGE_LABELS if status not in CLOSED]
    counts = Counter(app.status for app in applications)
    total_active = sum(counts[status] for status in active_statuses)

    stages = []
    for index, status in enumerate(active_statuses):
        at_or_beyond = sum(counts[s] for s in active_statuses[index:])
        stages.append({
            "stage": STAGE_LABELS[status],
            "status": status,
            "count": counts[status],
            "percentage": _percent(counts[status], total_active),
            "conversion_to_next": _percent(at_or_beyond - counts[status], at_or_beyond),
        })
    return {
        "total_in_pipeline": total_active,
        "rejected": counts[ApplicationStatus.REJECTED.value],
        "withdrawn": counts[ApplicationStatus.WITHDRAWN.value],
        "stages": stages,
    }


REPORT_BUILDERS = {
    ReportType.HIRING_OVERVIEW: hiring_overview,
    ReportType.COMPANY_COMPARISON: company_comparison,
    ReportType.DEPARTMENT_ANALYSIS: department_analysis,
    ReportType.TIME_TO_HIRE: time_to_hire,
    ReportType.PIPELINE_ANALYSIS: pipeline_analysis,
}


def build_report(
    store: DataStore, report: ReportType, filters: Optional[Mapping[str, Any]] = None
) -> Dict[str, Any]:
    return {"report": report.value, "filters": dict(filters or {}), **REPORT_BUILDERS[report](store, filters)}
