import pytest

from horizon_ijp.db import SQLiteStorage
from horizon_ijp.fixtures import load_fixtures
from horizon_ijp.models import Job, User
from horizon_ijp.store import (
    INITIALIZED_KEY,
    STORAGE_KEYS,
    DataStore,
    MemoryStorage,
    generate_id,
)


class CountingStorage(MemoryStorage):
    def __init__(self):
        super().__init__()
        self.writes = 0

    def set(self, key, value):
        self.writes += 1
        super().set(key, value)


def make_job(job_id, **overrides):
    data = dict(
        id=job_id, uuid=f"job-{job_id}", title="Tester", description="Tests things",
        department="QA", function="Engineering", location="Pune", type="full-time",
        experience_level="mid", status="open", company_id="c1",
        company_name="Horizon Technologies", company_logo="/logo.svg",
        external_id=f"X-{job_id}", posted_by="u5", posted_date="2025-06-10T00:00:00Z",
        created_at="2025-06-10T00:00:00Z", updated_at="2025-06-10T00:00:00Z",
    )
    data.update(overrides)
    return Job(**data)


def test_initialize_seeds_once():
    storage = CountingStorage()
    store = DataStore(storage)

    assert store.initialize() is True
    writes = storage.writes
    assert writes == len(STORAGE_KEYS) + 1
    jobs = storage.get(STORAGE_KEYS["jobs"])

    assert store.initialize() is False
    assert storage.writes == writes
    assert storage.get(INITIALIZED_KEY) == "true"
    assert storage.get(STORAGE_KEYS["jobs"]) == jobs


def test_seeded_counts(store):
    assert store.is_initialized()
    assert store.counts() == {"jobs": 12, "applications": 10, "users": 10, "companies": 5}


def test_initialize_keeps_user_changes(store):
    store.delete_job("j1")
    store.initialize()
    assert store.get_job_by_id("j1") is None


def test_reset_restores_seed_data(store):
    store.delete_job("j1")
    store.update_user("u1", {"first_name": "Changed"})
    assert store.reset() is True
    assert store.get_job_by_id("j1") is not None
    assert store.get_user_by_id("u1").first_name == "Priya"


def test_fixture_failure_leaves_store_uninitialized():
    def broken():
        raise OSError("missing")

    store = DataStore(MemoryStorage(), fixtures=broken)
    assert store.initialize() is False
    assert not store.is_initialized()
    assert store.get_jobs() == []


@pytest.mark.parametrize("payload", ["not json", '{"id": "j1"}', "[1, 2]"])
def test_unreadable_collection_is_empty(storage, store, payload):
    storage.set(STORAGE_KEYS["jobs"], payload)
    assert store.get_jobs() == []
    assert len(store.get_users()) == 10


def test_without_storage_everything_is_a_no_op():
    store = DataStore(None)
    assert not store.available
    assert store.initialize() is False
    assert store.reset() is False
    assert store.get_jobs() == []
    job = make_job("new")
    assert store.create_job(job) is job
    assert store.get_job_by_id("new") is None
    assert store.update_job("new", {"title": "x"}) is None
    assert store.delete_job("new") is False


def test_new_jobs_are_prepended_and_users_appended(store):
    store.create_job(make_job("new"))
    assert store.get_jobs()[0].id == "new"

    user = User(
        id="u99", email="new.person@horizongroup.in", first_name="New", last_name="Person",
        role="employee", department="QA", company_id="c1", status="active",
        created_at="2025-06-10T00:00:00Z", updated_at="2025-06-10T00:00:00Z",
    )
    store.create_user(user)
    assert store.get_users()[-1].id == "u99"
    assert store.get_user_by_email("NEW.PERSON@horizongroup.in").id == "u99"


def test_update_stamps_updated_at_and_keeps_id(store):
    before = store.get_job_by_id("j2")
    updated = store.update_job("j2", {"title": "Principal PM", "id": "hijack"})
    assert updated.id == "j2"
    assert updated.title == "Principal PM"
    assert updated.updated_at != before.updated_at
    assert store.get_job_by_id("j2").title == "Principal PM"
    assert store.update_job("missing", {"title": "x"}) is None


def test_create_application_bumps_job_count(store):
    from horizon_ijp.models import Application

    before = store.get_job_by_id("j3").applications_count
    application = Application(
        id="a99", uuid="app-a99", job_id="j3", job_title="Data Analyst", user_id="u1",
        user_name="Priya Sharma", user_email="priya.sharma@horizongroup.in",
        user_company_name="Horizon Technologies", user_experience_level="mid",
        status="submitted", applied_at="2025-06-10T00:00:00Z",
        created_at="2025-06-10T00:00:00Z", updated_at="2025-06-10T00:00:00Z",
    )
    store.create_application(application)
    assert store.get_applications()[0].id == "a99"
    assert store.get_job_by_id("j3").applications_count == before + 1


def test_bulk_setters_and_application_delete(store):
    store.set_companies(store.get_companies()[:2])
    assert [c.id for c in store.get_companies()] == ["c1", "c2"]

    applications = store.get_applications()
    store.set_applications(list(reversed(applications)))
    assert store.get_applications()[0].id == applications[-1].id

    assert store.delete_application("a10") is True
    assert store.delete_application("a10") is False
    assert store.get_application_by_id("a10") is None
    assert store.counts()["applications"] == 9


def test_generate_id_is_unique():
    assert len({generate_id() for _ in range(100)}) == 100


def test_sqlite_storage_persists(tmp_path):
    db_path = tmp_path / "horizon.db"
    with SQLiteStorage(db_path) as storage:
        store = DataStore(storage)
        assert store.initialize() is True
        store.delete_job("j1")

    with SQLiteStorage(db_path) as storage:
        store = DataStore(storage)
        assert store.initialize() is False
        assert store.get_job_by_id("j1") is None
        assert store.counts()["jobs"] == 11
        assert INITIALIZED_KEY in storage.keys()
        storage.clear()
        assert storage.keys() == []


def test_load_fixtures_rejects_bad_files(tmp_path):
    bad_yaml = tmp_path / "bad.yaml"
    bad_yaml.write_text("jobs: [unclosed", encoding="utf-8")
    with pytest.raises(ValueError):
        load_fixtures(bad_yaml)

    wrong_shape = tmp_path / "shape.yaml"
    wrong_shape.write_text("jobs: {id: j1}\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_fixtures(wrong_shape)

    partial = tmp_path / "partial.yaml"
    partial.write_text("companies: []\n", encoding="utf-8")
    assert load_fixtures(partial) == {"jobs": [], "applications": [], "users": [], "companies": []}
