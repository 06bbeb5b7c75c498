"""
Key-value backed data store for the marketplace entities.

The marketplace has no relational backend.  Each entity collection
(jobs, applications, users, companies) is serialized as one JSON array
and kept under a fixed key in a ``KeyValueStore``.  On first start the
store is seeded from the static fixtures and an "initialized" flag is
set so later starts leave user changes alone; ``reset`` wipes
everything and reseeds.

``DataStore`` is constructed once per process around an injected
storage backend and handed to every consumer.  When it has no backend
(``storage=None``) all operations are no-ops and reads return empty
collections, which is how code paths that must not touch persisted
state (imports, schema generation) are kept side-effect free.

Read and serialization failures never propagate: they are logged and
the affected collection is treated as empty.
"""

from __future__ import annotations

import json
import logging
import secrets
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar

from .models import Application, Company, Job, Record, User, utc_now_iso

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)

STORAGE_KEYS = {
    "jobs": "horizon-jobs",
    "applications": "horizon-applications",
    "users": "horizon-users",
    "companies": "horizon-companies",
}
INITIALIZED_KEY = "horizon-data-initialized"

COLLECTION_MODELS: Dict[str, Type[Record]] = {
    "jobs": Job,
    "applications": Application,
    "users": User,
    "companies": Company,
}


class KeyValueStore(ABC):
    """Minimal string key-value interface used by ``DataStore``."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the value stored under ``key`` or None."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key``; missing keys are ignored."""

    @abstractmethod
    def clear(self) -> None:
        """Delete every key."""


class MemoryStorage(KeyValueStore):
    """Process-local dictionary storage."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()

    def keys(self) -> List[str]:
        return sorted(self._data)


def generate_id() -> str:
    """Return a unique identifier for a new entity."""
    return f"{int(time.time() * 1000)}-{secrets.token_hex(4)}"


FixtureLoader = Callable[[], Dict[str, List[Dict[str, Any]]]]


def _default_fixtures() -> Dict[str, List[Dict[str, Any]]]:
    from .fixtures import load_fixtures

    return load_fixtures()


class DataStore:
    """Entity collections persisted as JSON in a ``KeyValueStore``.

    Args:
        storage: Backend to persist into. None disables persistence.
        fixtures: Callable returning the seed data keyed by collection
            name (``jobs``, ``applications``, ``users``, ``companies``).
    """

    def __init__(
        self,
        storage: Optional[KeyValueStore],
        fixtures: Optional[FixtureLoader] = None,
    ):
        self.storage = storage
        self._fixtures = fixtures or _default_fixtures

    @property
    def available(self) -> bool:
        return self.storage is not None

    # --- lifecycle ---
    def initialize(self) -> bool:
        """Seed every collection from the fixtures unless already done.

        Returns:
            True if seed data was written, False if the store was already
            initialized, has no backend or the fixtures could not be read.
        """
        if self.storage is None:
            return False
        if self.storage.get(INITIALIZED_KEY):
            return False

        try:
            fixtures = self._fixtures()
        except (OSError, ValueError) as e:
            logger.error("Failed to load seed fixtures: %s", e)
            return False

        for name, key in STORAGE_KEYS.items():
            self._write_raw(key, fixtures.get(name, []))
        self.storage.set(INITIALIZED_KEY, "true")
        logger.info("Data store initialized with seed data")
        return True

    def reset(self) -> bool:
        """Drop all collections and the initialized flag, then reseed."""
        if self.storage is None:
            return False
        for key in STORAGE_KEYS.values():
            self.storage.remove(key)
        self.storage.remove(INITIALIZED_KEY)
        seeded = self.initialize()
        logger.info("Data store reset to seed data")
        return seeded

    def is_initialized(self) -> bool:
        if self.storage is None:
            return False
        return self.storage.get(INITIALIZED_KEY) == "true"

    def counts(self) -> Dict[str, int]:
        """Number of records held in each collection."""
        return {name: len(self._read(name)) for name in STORAGE_KEYS}

    # --- raw collection access ---
    def _write_raw(self, key: str, items: List[Dict[str, Any]]) -> None:
        try:
            payload = json.dumps(items, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.error("Failed to serialize %s: %s", key, e)
            return
        self.storage.set(key, payload)

    def _read(self, name: str) -> List[Record]:
        if self.storage is None:
            return []
        key = STORAGE_KEYS[name]
        data = self.storage.get(key)
        if not data:
            return []
        model = COLLECTION_MODELS[name]
        try:
            items = json.loads(data)
            if not isinstance(items, list):
                raise ValueError(f"expected a list, got {type(items).__name__}")
            return [model.from_dict(item) for item in items]
        except (TypeError, ValueError) as e:
            logger.error("Failed to parse %s data: %s", name, e)
            return []

    def _write(self, name: str, records: List[Record]) -> None:
        if self.storage is None:
            return
        self._write_raw(STORAGE_KEYS[name], [record.to_dict() for record in records])

    def _find(self, name: str, record_id: str) -> Optional[Record]:
        return next((r for r in self._read(name) if r.id == record_id), None)

    def _create(self, name: str, record: R, prepend: bool) -> R:
        records = self._read(name)
        if prepend:
            records.insert(0, record)
        else:
            records.append(record)
        self._write(name, records)
        return record

    def _update(self, name: str, record_id: str, updates: Dict[str, Any]) -> Optional[Record]:
        records = self._read(name)
        for index, record in enumerate(records):
            if record.id != record_id:
                continue
            merged = {**record.to_dict(), **updates, "id": record_id, "updated_at": utc_now_iso()}
            try:
                records[index] = type(record).from_dict(merged)
            except TypeError as e:
                logger.error("Rejected update to %s %s: %s", name, record_id, e)
                return None
            self._write(name, records)
            return records[index]
        return None

    def _delete(self, name: str, record_id: str) -> bool:
        records = self._read(name)
        remaining = [r for r in records if r.id != record_id]
        if len(remaining) == len(records):
            return False
        self._write(name, remaining)
        return True

    # --- jobs ---
    def get_jobs(self) -> List[Job]:
        return self._read("jobs")

    def set_jobs(self, jobs: List[Job]) -> None:
        self._write("jobs", jobs)

    def get_job_by_id(self, job_id: str) -> Optional[Job]:
        return self._find("jobs", job_id)

    def create_job(self, job: Job) -> Job:
        return self._create("jobs", job, prepend=True)

    def update_job(self, job_id: str, updates: Dict[str, Any]) -> Optional[Job]:
        return self._update("jobs", job_id, updates)

    def delete_job(self, job_id: str) -> bool:
        return self._delete("jobs", job_id)

    # --- applications ---
    def get_applications(self) -> List[Application]:
        return self._read("applications")

    def set_applications(self, applications: List[Application]) -> None:
        self._write("applications", applications)

    def get_application_by_id(self, application_id: str) -> Optional[Application]:
        return self._find("applications", application_id)

    def create_application(self, application: Application) -> Application:
        """Store a new application and bump the job's application count."""
        self._create("applications", application, prepend=True)
        job = self.get_job_by_id(application.job_id)
        if job is not None:
            self.update_job(job.id, {"applications_count": (job.applications_count or 0) + 1})
        return application

    def update_application(self, application_id: str, updates: Dict[str, Any]) -> Optional[Application]:
        return self._update("applications", application_id, updates)

    def delete_application(self, application_id: str) -> bool:
        return self._delete("applications", application_id)

    # --- users ---
    def get_users(self) -> List[User]:
        return self._read("users")

    def set_users(self, users: List[User]) -> None:
        self._write("users", users)

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        return self._find("users", user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        wanted = email.lower()
        return next((u for u in self.get_users() if u.email.lower() == wanted), None)

    def create_user(self, user: User) -> User:
        return self._create("users", user, prepend=False)

    def update_user(self, user_id: str, updates: Dict[str, Any]) -> Optional[User]:
        return self._update("users", user_id, updates)

    def delete_user(self, user_id: str) -> bool:
        return self._delete("users", user_id)

    # --- companies ---
    def get_companies(self) -> List[Company]:
        return self._read("companies")

    def set_companies(self, companies: List[Company]) -> None:
        self._write("companies", companies)

    def get_company_by_id(self, company_id: str) -> Optional[Company]:
        return self._find("companies", company_id)

    def create_company(self, company: Company) -> Company:
        return self._create("companies", company, prepend=False)

    def update_company(self, company_id: str, updates: Dict[str, Any]) -> Optional[Company]:
        return self._update("companies", company_id, updates)

    def delete_company(self, company_id: str) -> bool:
        return self._delete("companies", company_id)
