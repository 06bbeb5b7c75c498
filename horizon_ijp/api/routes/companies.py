"""
Group company API endpoints.

Every signed-in user can browse the companies; only admins add, edit
or remove them.
"""

from fastapi import APIRouter, Depends, Query, HTTPException, status
from typing import Optional, Dict, Any, List

from horizon_ijp.api.dependencies import get_data_store, require_roles, require_user, split_csv
from horizon_ijp.api.schemas import CompanyCreate, CompanyUpdate
from horizon_ijp.models import JobStatus, Role, User
from horizon_ijp.services import companies as company_service
from horizon_ijp.services import jobs as job_service
from horizon_ijp.services.errors import ConflictError, NotFoundError
from horizon_ijp.store import DataStore

router = APIRouter(prefix="/api/companies", tags=["companies"])


@router.get("", response_model=Dict[str, Any])
async def list_companies(
    search: Optional[str] = Query(None, description="Search name, industry and description"),
    industry: Optional[str] = Query(None, description="Comma-separated industries"),
    size: Optional[str] = Query(None, description="Comma-separated company sizes"),
    location: Optional[str] = Query(None, description="Comma-separated locations"),
    status_filter: Optional[str] = Query(None, alias="status", description="active or inactive"),
    sort_by: Optional[str] = Query(None, description="name"),
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page"),
    user: User = Depends(require_user),
    store: DataStore = Depends(get_data_store),
):
    filters = {
        "search": search,
        "industry": split_csv(industry),
        "size": split_csv(size),
        "location": split_csv(location),
        "status": split_csv(status_filter),
    }
    return company_service.get_companies(store, filters, sort_by, page, page_size).to_dict()


@router.get("/stats", response_model=List[Dict[str, Any]])
async def company_stats(
    user: User = Depends(require_roles(Role.CHRO, Role.ADMIN)),
    store: DataStore = Depends(get_data_store),
):
    """Per-company job, application and employee counts."""
    return company_service.get_company_stats(store)


@router.get("/industries", response_model=List[str])
async def company_industries(
    user: User = Depends(require_user),
    store: DataStore = Depends(get_data_store),
):
    return company_service.get_company_industries(store)


@router.get("/{company_id}", response_model=Dict[str, Any])
async def get_company(
    company_id: str,
    user: User = Depends(require_user),
    store: DataStore = Depends(get_data_store),
):
    """Get a company along with its open jobs."""
    company = company_service.get_company_by_id(store, company_id)
    if not company:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Company {company_id} not found"
        )
    open_jobs = [
        job.to_dict()
        for job in job_service.get_jobs_by_company(store, company_id)
        if job.status == JobStatus.OPEN.value
    ]
    return {**company.to_dict(), "open_jobs": open_jobs}


@router.post("", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
async def create_company(
    company_data: CompanyCreate,
    admin: User = Depends(require_roles(Role.ADMIN)),
    store: DataStore = Depends(get_data_store),
):
    try:
        company = company_service.create_company(store, company_data.model_dump(mode="json"))
    except ConflictError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    return company.to_dict()


@router.patch("/{company_id}", response_model=Dict[str, Any])
async def update_company(
    company_id: str,
    company_update: CompanyUpdate,
    admin: User = Depends(require_roles(Role.ADMIN)),
    store: DataStore = Depends(get_data_store),
):
    """Update a company. Only the supplied fields change."""
    updates = company_update.model_dump(mode="json", exclude_unset=True)
    if not updates:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields to update"
        )
    try:
        company = company_service.update_company(store, company_id, updates)
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
    return company.to_dict()


@router.post("/{company_id}/toggle-status", response_model=Dict[str, Any])
async def toggle_company_status(
    company_id: str,
    admin: User = Depends(require_roles(Role.ADMIN)),
    store: DataStore = Depends(get_data_store),
):
    """Switch a company between active and inactive."""
    try:
        company = company_service.toggle_company_status(store, company_id)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    return company.to_dict()


@router.delete("/{company_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_company(
    company_id: str,
    admin: User = Depends(require_roles(Role.ADMIN)),
    store: DataStore = Depends(get_data_store),
):
    """Remove a company. Companies with jobs or users cannot be removed."""
    try:
        company_service.delete_company(store, company_id)
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
