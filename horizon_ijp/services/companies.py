"""
Company directory service.

Lookups and statistics for every role, and the admin-side management of
the group company list.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Mapping, Optional

from horizon_ijp.filters import Membership, Page, SortOption, TextSearch, query
from horizon_ijp.models import Company, CompanyStatus, JobStatus, SyncStatus, utc_now_iso
from horizon_ijp.services.errors import ConflictError, NotFoundError
from horizon_ijp.store import DataStore, generate_id

logger = logging.getLogger(__name__)

COMPANY_FILTERS = {
    "search": TextSearch(("name", "industry", "description")),
    "industry": Membership("industry", substring=True),
    "size": Membership("size"),
    "location": Membership("location", substring=True),
    "status": Membership("status"),
}

COMPANY_SORTS = {
    "name": SortOption("name"),
}


def get_companies(
    store: DataStore,
    filters: Optional[Mapping[str, Any]] = None,
    sort_by: Optional[str] = None,
    page: Optional[int] = None,
    page_size: Optional[int] = None,
) -> Page[Company]:
    return query(store.get_companies(), filters, COMPANY_FILTERS, sort_by, COMPANY_SORTS, page, page_size)


def get_company_by_id(store: DataStore, company_id: str) -> Optional[Company]:
    return store.get_company_by_id(company_id)


def get_company_stats(store: DataStore) -> List[Dict[str, Any]]:
    """Per-company job, open job, application and employee counts."""
    jobs = store.get_jobs()
    applications = store.get_applications()
    users = store.get_users()
    job_company = {job.id: job.company_id for job in jobs}

    stats = []
    for company in store.get_companies():
        stats.append({
            **company.to_dict(),
            "job_count": sum(1 for job in jobs if job.company_id == company.id),
            "open_job_count": sum(
                1 for job in jobs
                if job.company_id == company.id and job.status == JobStatus.OPEN.value
            ),
            "application_count": sum(
                1 for app in applications if job_company.get(app.job_id) == company.id
            ),
            "employee_count": sum(1 for user in users if user.company_id == company.id),
        })
    return stats


def get_company_industries(store: DataStore) -> List[str]:
    return sorted({company.industry for company in store.get_companies()})


def _find_by_name(store: DataStore, name: str) -> Optional[Company]:
    wanted = name.strip().casefold()
    return next((c for c in store.get_companies() if c.name.casefold() == wanted), None)


def _logo_path(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return f"/logos/{slug or 'company'}.svg"


def create_company(store: DataStore, data: Mapping[str, Any]) -> Company:
    """Add a group company. New companies start with a pending ATS sync.

    Raises:
        ConflictError: If a company with the same name exists.
    """
    if _find_by_name(store, data["name"]) is not None:
        raise ConflictError(f"Company {data['name']} already exists")

    company_id = generate_id()
    now = utc_now_iso()
    company = Company(
        id=company_id,
        uuid=f"company-{company_id}",
        name=data["name"].strip(),
        description=data.get("description"),
        logo=data.get("logo") or _logo_path(data["name"]),
        industry=data["industry"],
        size=data["size"],
        location=data["location"],
        ats_type=data.get("ats_type") or "custom",
        ats_endpoint=data.get("ats_endpoint"),
        sync_status=SyncStatus.PENDING.value,
        status=data.get("status") or CompanyStatus.ACTIVE.value,
        created_at=now,
        updated_at=now,
    )
    logger.info("Created company %s (%s)", company.id, company.name)
    return store.create_company(company)


def update_company(store: DataStore, company_id: str, updates: Mapping[str, Any]) -> Company:
    """Apply a partial update to a company.

    A new name or logo is copied onto the company's jobs and users, which
    carry them denormalized.

    Raises:
        NotFoundError: If the company does not exist.
        ConflictError: If the new name belongs to another company.
    """
    company = store.get_company_by_id(company_id)
    if company is None:
        raise NotFoundError(f"Company {company_id} not found")
    if "name" in updates:
        clash = _find_by_name(store, updates["name"])
        if clash is not None and clash.id != company_id:
            raise ConflictError(f"Company {updates['name']} already exists")

    updated = store.update_company(company_id, dict(updates))
    if updated is None:
        raise NotFoundError(f"Company {company_id} not found")

    if updated.name != company.name or updated.logo != company.logo:
        jobs = store.get_jobs()
        for job in jobs:
            if job.company_id == company_id:
                job.company_name = updated.name
                job.company_logo = updated.logo
        store.set_jobs(jobs)

        users = store.get_users()
        for user in users:
            if user.company_id == company_id:
                user.company_name = updated.name
        store.set_users(users)
    return updated


def toggle_company_status(store: DataStore, company_id: str) -> Company:
    company = store.get_company_by_id(company_id)
    if company is None:
        raise NotFoundError(f"Company {company_id} not found")
    new_status = (
        CompanyStatus.INACTIVE if company.status == CompanyStatus.ACTIVE.value else CompanyStatus.ACTIVE
    )
    return update_company(store, company_id, {"status": new_status.value})


def delete_company(store: DataStore, company_id: str) -> None:
    """Remove a company that no job or user refers to.

    Raises:
        NotFoundError: If the company does not exist.
        ConflictError: If jobs or users still belong to it.
    """
    if store.get_company_by_id(company_id) is None:
        raise NotFoundError(f"Company {company_id} not found")
    if any(job.company_id == company_id for job in store.get_jobs()) or any(
        user.company_id == company_id for user in store.get_users()
    ):
        raise ConflictError(f"Company {company_id} still has jobs or users")
    store.delete_company(company_id)
    logger.info("Deleted company %s", company_id)
