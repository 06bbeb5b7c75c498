import pytest

from horizon_ijp.access import (
    DASHBOARDS,
    check_access,
    dashboard_for_role,
    has_route_access,
    issue_token,
    login_redirect,
    parse_role,
    validate_token,
)
from horizon_ijp.models import Role

TOKEN = issue_token()


@pytest.mark.parametrize("path", [
    "/admin/companies", "/admin/dashboard", "/dashboard", "/hr/jobs", "/chro/reports", "/anything/else",
])
def test_admin_is_admitted_everywhere(path):
    decision = check_access(path, TOKEN, "admin")
    assert decision.allowed
    assert decision.role is Role.ADMIN


def test_employee_is_sent_home_from_admin_pages():
    decision = check_access("/admin/companies", TOKEN, "employee")
    assert not decision.allowed
    assert decision.redirect_to == "/dashboard"


@pytest.mark.parametrize("role, path", [
    ("employee", "/jobs/j1"),
    ("employee", "/applications"),
    ("hr", "/hr/applicants/a1"),
    ("chro", "/chro/reports"),
    ("chro", "/settings"),
])
def test_roles_open_their_own_pages(role, path):
    assert check_access(path, TOKEN, role).allowed


@pytest.mark.parametrize("role, path, target", [
    ("hr", "/dashboard", "/hr/dashboard"),
    ("employee", "/hr/dashboard", "/dashboard"),
    ("chro", "/hr/jobs", "/chro/dashboard"),
    ("hr", "/admin/users", "/hr/dashboard"),
])
def test_other_roles_pages_redirect_to_own_dashboard(role, path, target):
    decision = check_access(path, TOKEN, role)
    assert not decision.allowed
    assert decision.redirect_to == target


def test_unauthenticated_protected_page_goes_to_login():
    decision = check_access("/jobs", None, None)
    assert not decision.allowed
    assert decision.redirect_to == "/login?redirect=%2Fjobs"


@pytest.mark.parametrize("path", ["/login", "/forgot-password", "/reset-password/abc", "/summary"])
def test_unauthenticated_public_pages_are_open(path):
    assert check_access(path, None, None).allowed


def test_root_is_always_open():
    assert check_access("/", None, None).allowed
    assert check_access("/", TOKEN, "hr").allowed


def test_logged_in_users_skip_auth_pages():
    decision = check_access("/login", TOKEN, "hr")
    assert decision.redirect_to == "/hr/dashboard"
    assert check_access("/summary", TOKEN, "hr").allowed


def test_role_without_valid_token_is_unauthenticated():
    decision = check_access("/admin/dashboard", "stolen", "admin")
    assert decision.redirect_to == login_redirect("/admin/dashboard")


def test_unknown_role_is_unauthenticated():
    decision = check_access("/dashboard", TOKEN, "superuser")
    assert decision.redirect_to == "/login?redirect=%2Fdashboard"


def test_helpers():
    assert parse_role("chro") is Role.CHRO
    assert parse_role(Role.HR) is Role.HR
    assert parse_role("") is None
    assert parse_role("root") is None
    assert validate_token(issue_token())
    assert not validate_token("mock-token-")
    assert not validate_token(None)
    assert issue_token() != issue_token()
    assert not has_route_access(None, "/dashboard")
    assert dashboard_for_role(None) == "/dashboard"
    assert set(DASHBOARDS) == set(Role)
