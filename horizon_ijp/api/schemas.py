"""
Pydantic schemas for API request bodies.

Responses are plain dictionaries built from the domain records; these
schemas only validate what clients send.
"""

from pydantic import BaseModel, EmailStr, Field, model_validator
from typing import Optional, List

from horizon_ijp.models import (
    ApplicationStatus,
    CompanySize,
    CompanyStatus,
    ExperienceLevel,
    JobStatus,
    JobType,
    Role,
    UserStatus,
)


# ============================================================================
# Auth Schemas
# ============================================================================

class LoginRequest(BaseModel):
    """Schema for user login."""
    email: EmailStr
    password: str = Field(..., min_length=1)
    remember_me: bool = False


# ============================================================================
# Job Schemas
# ============================================================================

class JobCreate(BaseModel):
    """Schema for posting a new job."""
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    requirements: List[str] = Field(default_factory=list)
    responsibilities: List[str] = Field(default_factory=list)
    department: str
    function: str
    location: str
    type: JobType
    experience_level: ExperienceLevel
    salary_min: Optional[int] = Field(None, ge=0)
    salary_max: Optional[int] = Field(None, ge=0)
    salary_currency: Optional[str] = None
    status: JobStatus = JobStatus.OPEN
    company_id: str
    closing_date: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_salary_range(self):
        if (
            self.salary_min is not None
            and self.salary_max is not None
            and self.salary_min > self.salary_max
        ):
            raise ValueError("salary_min must not exceed salary_max")
        return self


class JobUpdate(BaseModel):
    """Schema for updating a job. Only supplied fields change."""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    requirements: Optional[List[str]] = None
    responsibilities: Optional[List[str]] = None
    department: Optional[str] = None
    function: Optional[str] = None
    location: Optional[str] = None
    type: Optional[JobType] = None
    experience_level: Optional[ExperienceLevel] = None
    salary_min: Optional[int] = Field(None, ge=0)
    salary_max: Optional[int] = Field(None, ge=0)
    salary_currency: Optional[str] = None
    status: Optional[JobStatus] = None
    closing_date: Optional[str] = None
    tags: Optional[List[str]] = None


# ============================================================================
# Application Schemas
# ============================================================================

class ApplicationCreate(BaseModel):
    """Schema for applying to a job."""
    job_id: str
    cover_letter: Optional[str] = Field(None, max_length=5000)
    resume_url: Optional[str] = None
    experience_level: Optional[ExperienceLevel] = None


class ApplicationStatusUpdate(BaseModel):
    """Schema for moving an application through the pipeline."""
    status: ApplicationStatus
    notes: Optional[str] = None


# ============================================================================
# Company Schemas
# ============================================================================

class CompanyCreate(BaseModel):
    """Schema for adding a group company."""
    name: str = Field(..., min_length=1, max_length=200)
    industry: str = Field(..., min_length=1)
    size: CompanySize
    location: str = Field(..., min_length=1)
    description: Optional[str] = None
    logo: Optional[str] = None
    ats_type: Optional[str] = None
    ats_endpoint: Optional[str] = None
    status: CompanyStatus = CompanyStatus.ACTIVE


class CompanyUpdate(BaseModel):
    """Schema for updating a company. Only supplied fields change."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    industry: Optional[str] = None
    size: Optional[CompanySize] = None
    location: Optional[str] = None
    description: Optional[str] = None
    logo: Optional[str] = None
    ats_type: Optional[str] = None
    ats_endpoint: Optional[str] = None
    status: Optional[CompanyStatus] = None


# ============================================================================
# User Schemas
# ============================================================================

class UserCreate(BaseModel):
    """Schema for creating a user from the admin console."""
    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    role: Role
    department: str
    company_id: str
    current_job_title: Optional[str] = None
    location: Optional[str] = None
    phone: Optional[str] = None
    status: UserStatus = UserStatus.ACTIVE
    password: Optional[str] = Field(None, max_length=72)  # Bcrypt has 72-byte limit


class UserUpdate(BaseModel):
    """Schema for updating a user from the admin console."""
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    role: Optional[Role] = None
    department: Optional[str] = None
    current_job_title: Optional[str] = None
    location: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[UserStatus] = None


class PasswordReset(BaseModel):
    """Schema for setting a user's password."""
    new_password: str = Field(..., min_length=8, max_length=72)
