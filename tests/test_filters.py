from horizon_ijp.filters import (
    After,
    AtLeast,
    AtMost,
    Before,
    Membership,
    SortDirection,
    SortOption,
    TextSearch,
    filter_records,
    query,
    sort_by_option,
    sort_records,
)

SCHEMA = {
    "search": TextSearch(("title", "tags")),
    "location": Membership("location", ignore_case=True),
    "type": Membership("type"),
    "salary_min": AtLeast("salary_max"),
    "salary_max": AtMost("salary_min"),
    "posted_after": After("posted_date"),
    "posted_before": Before("posted_date"),
}

JOBS = [
    {"id": "1", "title": "Senior Engineer", "location": "Bangalore", "type": "full-time",
     "salary_min": 100, "salary_max": 200, "posted_date": "2025-06-01T00:00:00Z", "tags": ["python"]},
    {"id": "2", "title": "Junior Engineer", "location": "Mumbai", "type": "contract",
     "salary_min": 50, "salary_max": 80, "posted_date": "2025-05-01T00:00:00Z", "tags": []},
    {"id": "3", "title": "Analyst", "location": "bangalore", "type": "full-time",
     "salary_min": None, "salary_max": None, "posted_date": "2025-04-01T00:00:00Z", "tags": ["SQL"]},
]


def ids(records):
    return [r["id"] for r in records]


def test_search_matches_substring_case_insensitively():
    assert ids(filter_records(JOBS, {"search": "senior"}, SCHEMA)) == ["1"]


def test_search_matches_list_fields():
    assert ids(filter_records(JOBS, {"search": "sql"}, SCHEMA)) == ["3"]


def test_membership_is_or_within_a_filter():
    result = filter_records(JOBS, {"type": ["contract", "full-time"]}, SCHEMA)
    assert ids(result) == ["1", "2", "3"]


def test_membership_ignore_case():
    assert ids(filter_records(JOBS, {"location": "BANGALORE"}, SCHEMA)) == ["1", "3"]


def test_filters_combine_with_and():
    result = filter_records(JOBS, {"location": "bangalore", "type": "full-time", "search": "engineer"}, SCHEMA)
    assert ids(result) == ["1"]


def test_salary_bounds_exclude_jobs_without_salary():
    assert ids(filter_records(JOBS, {"salary_min": 70}, SCHEMA)) == ["1", "2"]
    assert ids(filter_records(JOBS, {"salary_max": 60}, SCHEMA)) == ["2"]


def test_date_bounds_are_strict():
    assert ids(filter_records(JOBS, {"posted_after": "2025-05-01T00:00:00Z"}, SCHEMA)) == ["1"]
    assert ids(filter_records(JOBS, {"posted_before": "2025-05-01"}, SCHEMA)) == ["3"]


def test_unknown_and_malformed_criteria_are_ignored():
    criteria = {"colour": "blue", "salary_min": "lots", "posted_after": "yesterday", "type": []}
    assert ids(filter_records(JOBS, criteria, SCHEMA)) == ["1", "2", "3"]


def test_empty_criteria_returns_a_copy():
    result = filter_records(JOBS, None, SCHEMA)
    assert result == JOBS
    assert result is not JOBS


def test_filter_is_subset_and_idempotent():
    criteria = {"location": "bangalore", "salary_min": 10}
    once = filter_records(JOBS, criteria, SCHEMA)
    assert all(record in JOBS for record in once)
    assert filter_records(once, criteria, SCHEMA) == once


def test_sort_records_is_case_insensitive_and_stable():
    records = [{"n": "b", "i": 1}, {"n": "A", "i": 2}, {"n": "b", "i": 3}, {"n": "a", "i": 4}]
    assert [r["i"] for r in sort_records(records, "n")] == [2, 4, 1, 3]
    assert [r["i"] for r in sort_records(records, "n", "desc")] == [1, 3, 2, 4]


def test_sort_records_puts_missing_values_last():
    records = [{"v": None, "i": 1}, {"v": 2, "i": 2}, {"v": 1, "i": 3}]
    assert [r["i"] for r in sort_records(records, "v", SortDirection.DESC)] == [2, 3, 1]


def test_sort_records_leaves_order_for_bad_input():
    records = [{"v": 1}, {"v": "a"}, {"v": 0}]
    assert sort_records(records, "v") == records
    assert sort_records(records, "v", "sideways") == records
    assert sort_records(records, "") == records


def test_sort_by_option_rank():
    options = {"status": SortOption("status", kind="rank", ranking=("new", "review", "done"))}
    records = [{"status": "done"}, {"status": "new"}, {"status": "unknown"}, {"status": "review"}]
    ordered = sort_by_option(records, "status", options)
    assert [r["status"] for r in ordered] == ["new", "review", "done", "unknown"]


def test_sort_by_option_unknown_name_keeps_order():
    assert sort_by_option(JOBS, "nope", {}) == JOBS


def test_query_filters_sorts_and_pages():
    options = {"newest": SortOption("posted_date", SortDirection.DESC, kind="date")}
    page = query(JOBS, {"location": "bangalore"}, SCHEMA, "newest", options, page=1, page_size=1)
    assert ids(page.data) == ["1"]
    assert page.pagination.total == 2
    assert page.pagination.has_next_page is True
    assert page.to_dict(lambda r: r["id"])["data"] == ["1"]
