"""
Data models for the internal job marketplace.

Four entity types make up the marketplace: ``Company`` (a group company
whose openings are listed), ``Job`` (an opening posted by HR),
``User`` (an employee, HR partner, CHRO or administrator) and
``Application`` (an employee's application to a job).  Each entity has
a unique string ``id`` and is stored as a plain JSON object, so every
model can round-trip through ``to_dict`` / ``from_dict``.

The closed vocabularies used by those records (roles, statuses, job
types and so on) are string enums so their values serialize unchanged.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Type, TypeVar

R = TypeVar("R", bound="Record")


class Role(str, Enum):
    EMPLOYEE = "employee"
    HR = "hr"
    CHRO = "chro"
    ADMIN = "admin"


class JobStatus(str, Enum):
    DRAFT = "draft"
    OPEN = "open"
    CLOSED = "closed"
    FILLED = "filled"


class JobType(str, Enum):
    FULL_TIME = "full-time"
    PART_TIME = "part-time"
    CONTRACT = "contract"
    INTERNSHIP = "internship"


class ExperienceLevel(str, Enum):
    ENTRY = "entry"
    MID = "mid"
    SENIOR = "senior"
    LEAD = "lead"
    EXECUTIVE = "executive"


class ApplicationStatus(str, Enum):
    """Application pipeline stages, in pipeline order."""

    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    SHORTLISTED = "shortlisted"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    OFFERED = "offered"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


class CompanySize(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    ENTERPRISE = "enterprise"


class CompanyStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class SyncStatus(str, Enum):
    SUCCESS = "success"
    PENDING = "pending"
    FAILED = "failed"


class UserStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


def utc_now_iso() -> str:
    """Return the current UTC time as an ISO-8601 string ending in ``Z``."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp, returning None when it cannot be parsed.

    A trailing ``Z`` is accepted. Naive values are assumed to be UTC so
    that they compare cleanly with aware ones.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        text = value[:-1] + "+00:00" if value.endswith("Z") else value
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class Record:
    """Base class providing JSON-friendly (de)serialization."""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls: Type[R], data: Dict[str, Any]) -> R:
        """Build a record from a stored object, ignoring unknown keys.

        Raises:
            TypeError: If ``data`` is not a mapping or lacks a required field.
        """
        if not isinstance(data, dict):
            raise TypeError(f"{cls.__name__} record must be an object, got {type(data).__name__}")
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})


@dataclass
class Company(Record):
    """A group company whose openings are listed on the marketplace."""

    id: str
    uuid: str
    name: str
    logo: str
    industry: str
    size: str
    location: str
    ats_type: str
    sync_status: str
    created_at: str
    updated_at: str
    description: Optional[str] = None
    ats_endpoint: Optional[str] = None
    last_sync_at: Optional[str] = None
    status: str = CompanyStatus.ACTIVE.value


@dataclass
class Job(Record):
    """An opening posted by HR for one of the group companies.

    ``salary_min``/``salary_max`` are optional because many postings do
    not disclose a range; salary filters exclude such jobs.
    """

    id: str
    uuid: str
    title: str
    description: str
    department: str
    function: str
    location: str
    type: str
    experience_level: str
    status: str
    company_id: str
    company_name: str
    company_logo: str
    external_id: str
    posted_by: str
    posted_date: str
    created_at: str
    updated_at: str
    requirements: List[str] = field(default_factory=list)
    responsibilities: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    salary_currency: Optional[str] = None
    closing_date: Optional[str] = None
    applications_count: int = 0
    views_count: int = 0


@dataclass
class User(Record):
    """A marketplace user.

    ``password_hash`` is only set for accounts created through the admin
    API; seeded demo accounts have none. ``saved_job_ids`` holds the
    user's bookmarked jobs, oldest first.
    """

    id: str
    email: str
    first_name: str
    last_name: str
    role: str
    department: str
    company_id: str
    status: str
    created_at: str
    updated_at: str
    email_verified: bool = False
    company_name: Optional[str] = None
    current_job_title: Optional[str] = None
    location: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    last_login_at: Optional[str] = None
    password_hash: Optional[str] = None
    saved_job_ids: List[str] = field(default_factory=list)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_public_dict(self) -> Dict[str, Any]:
        """Serialize the user without credentials."""
        data = self.to_dict()
        data.pop("password_hash", None)
        return data


@dataclass
class Application(Record):
    """An employee's application to an internal opening."""

    id: str
    uuid: str
    job_id: str
    job_title: str
    user_id: str
    user_name: str
    user_email: str
    user_company_name: str
    user_experience_level: str
    status: str
    applied_at: str
    created_at: str
    updated_at: str
    cover_letter: Optional[str] = None
    resume_url: Optional[str] = None
    ats_link: Optional[str] = None
    notes: Optional[str] = None
