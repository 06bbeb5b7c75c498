from conftest import ADMIN_EMAIL, CHRO_EMAIL, EMPLOYEE_EMAIL, HR_EMAIL, INACTIVE_EMAIL, login

JOB_PAYLOAD = {
    "title": "QA Engineer", "description": "Own the test strategy", "department": "Engineering",
    "function": "Engineering", "location": "Pune", "type": "full-time",
    "experience_level": "mid", "company_id": "c1", "salary_min": 10, "salary_max": 20,
}

NEW_USER = {
    "email": "new.hire@horizongroup.in", "first_name": "New", "last_name": "Hire",
    "role": "employee", "department": "Finance", "company_id": "c2",
}


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_root_is_public(client):
    assert client.get("/", follow_redirects=False).status_code == 200


def test_pages_redirect_to_login_when_anonymous(client):
    response = client.get("/dashboard", follow_redirects=False)
    assert response.status_code == 307
    assert response.headers["location"] == "/login?redirect=%2Fdashboard"
    assert client.get("/login", follow_redirects=False).status_code == 200


def test_api_requires_authentication(client):
    assert client.get("/api/jobs").status_code == 401
    assert client.get("/api/auth/me").status_code == 401


def test_role_cookie_alone_grants_nothing(client):
    client.cookies.set("user-role", "admin")
    response = client.get("/admin/dashboard", follow_redirects=False)
    assert response.status_code == 307
    assert response.headers["location"].startswith("/login")


def test_login_failures(client):
    response = client.post("/api/auth/login", json={"email": INACTIVE_EMAIL, "password": "x"})
    assert response.status_code == 401
    response = client.post("/api/auth/login", json={"email": "not-an-email", "password": "x"})
    assert response.status_code == 422


def test_employee_session(client):
    body = login(client, EMPLOYEE_EMAIL)
    assert body["redirect_to"] == "/dashboard"
    assert "password_hash" not in body["user"]
    assert client.cookies.get("auth-token") == body["token"]

    me = client.get("/api/auth/me").json()
    assert me["role"] == "employee"

    page = client.get("/dashboard", follow_redirects=False)
    assert page.status_code == 200
    assert page.headers["x-user-role"] == "employee"
    assert page.json()["application_count"] == 2

    response = client.get("/admin/dashboard", follow_redirects=False)
    assert response.status_code == 307
    assert response.headers["location"] == "/dashboard"

    response = client.get("/login", follow_redirects=False)
    assert response.headers["location"] == "/dashboard"


def test_employees_only_see_open_jobs(client):
    login(client, EMPLOYEE_EMAIL)
    body = client.get("/api/jobs", params={"status": "draft,closed"}).json()
    assert body["pagination"]["total"] == 9
    assert {job["status"] for job in body["data"]} == {"open"}


def test_job_search_params(client):
    login(client, EMPLOYEE_EMAIL)
    body = client.get("/api/jobs", params={"location": "Mumbai,Pune", "sort_by": "title_asc", "page_size": 2}).json()
    assert body["pagination"]["total"] == 4
    assert body["pagination"]["total_pages"] == 2
    assert [job["title"] for job in body["data"]] == ["Data Analyst", "DevOps Engineer"]

    assert client.get("/api/jobs", params={"page": 0}).status_code == 422
    assert client.get("/api/jobs/locations").json()[0] == "Bangalore"


def test_job_detail_counts_views(client):
    login(client, EMPLOYEE_EMAIL)
    first = client.get("/api/jobs/j1").json()
    second = client.get("/api/jobs/j1").json()
    assert second["views_count"] == first["views_count"] + 1
    assert first["has_applied"] is True
    assert client.get("/api/jobs/missing").status_code == 404


def test_employee_applies_and_withdraws(client):
    login(client, EMPLOYEE_EMAIL)
    response = client.post("/api/applications", json={"job_id": "j3", "cover_letter": "Keen"})
    assert response.status_code == 201
    application_id = response.json()["id"]

    assert client.post("/api/applications", json={"job_id": "j3"}).status_code == 400
    assert client.post("/api/applications", json={"job_id": "j8"}).status_code == 400
    assert client.post("/api/applications", json={"job_id": "nope"}).status_code == 404

    mine = client.get("/api/applications").json()
    assert mine["pagination"]["total"] == 3
    assert {app["user_id"] for app in mine["data"]} == {"u1"}
    assert mine["status_counts"]["submitted"] == 2

    response = client.post(f"/api/applications/{application_id}/withdraw")
    assert response.json()["status"] == "withdrawn"
    assert client.post("/api/applications/a3/withdraw").status_code == 404
    assert client.get("/api/applications/a3").status_code == 404


def test_employee_cannot_manage(client):
    login(client, EMPLOYEE_EMAIL)
    assert client.patch("/api/applications/a1/status", json={"status": "offered"}).status_code == 403
    assert client.delete("/api/jobs/j1").status_code == 403
    assert client.get("/api/users").status_code == 403


def test_hr_reviews_own_company(client):
    body = login(client, HR_EMAIL)
    assert body["redirect_to"] == "/hr/dashboard"

    applications = client.get("/api/applications").json()
    assert applications["pagination"]["total"] == 5

    response = client.patch("/api/applications/a1/status", json={"status": "shortlisted", "notes": "Strong"})
    assert response.status_code == 200
    assert response.json()["status"] == "shortlisted"

    assert client.patch("/api/applications/a3/status", json={"status": "offered"}).status_code == 404
    assert client.patch("/api/applications/a9/status", json={"status": "offered"}).status_code == 400
    assert client.patch("/api/applications/a1/status", json={"status": "hired"}).status_code == 422

    detail = client.get("/api/applications/a1").json()
    assert detail["timeline"][-1]["status"] == "shortlisted"
    assert client.get("/api/applications/a1/adjacent").status_code == 200

    closed = client.get("/api/jobs", params={"status": "draft,filled"}).json()
    assert [job["id"] for job in closed["data"]] == ["j11"]

    assert client.get("/hr/dashboard", follow_redirects=False).status_code == 200


def test_hr_manages_jobs(client):
    login(client, HR_EMAIL)
    response = client.post("/api/jobs", json=JOB_PAYLOAD)
    assert response.status_code == 201
    job_id = response.json()["id"]

    bad = {**JOB_PAYLOAD, "salary_min": 30}
    assert client.post("/api/jobs", json=bad).status_code == 422

    response = client.patch(f"/api/jobs/{job_id}", json={"status": "closed"})
    assert response.json()["status"] == "closed"
    assert client.patch(f"/api/jobs/{job_id}", json={}).status_code == 400

    assert client.delete(f"/api/jobs/{job_id}").status_code == 204
    assert client.get(f"/api/jobs/{job_id}").status_code == 404


def test_chro_reports(client):
    login(client, CHRO_EMAIL)
    metrics = client.get("/chro/dashboard", follow_redirects=False).json()
    assert metrics["total_internal_hires"] == 1
    assert len(client.get("/api/companies/stats").json()) == 5
    assert client.get("/api/users/stats").json()["total"] == 10
    assert client.get("/hr/jobs", follow_redirects=False).headers["location"] == "/chro/dashboard"


def test_admin_manages_users(client):
    login(client, ADMIN_EMAIL)
    assert client.get("/admin/companies", follow_redirects=False).status_code != 307

    new_user = NEW_USER
    assert client.post("/api/users", json={**new_user, "password": "weak"}).status_code == 400
    response = client.post("/api/users", json={**new_user, "password": "Secret#123"})
    assert response.status_code == 201
    user_id = response.json()["id"]
    assert client.post("/api/users", json=new_user).status_code == 400

    users = client.get("/api/users", params={"search": "new hire"}).json()
    assert users["pagination"]["total"] == 0
    users = client.get("/api/users", params={"search": "hire"}).json()
    assert [u["id"] for u in users["data"]] == [user_id]

    response = client.patch(f"/api/users/{user_id}", json={"role": "hr"})
    assert response.json()["role"] == "hr"
    assert client.get("/api/users/missing").status_code == 404


def test_role_change_ends_sessions(client):
    login(client, EMPLOYEE_EMAIL)
    employee_token = client.cookies.get("auth-token")

    client.cookies.clear()
    login(client, ADMIN_EMAIL)
    client.patch("/api/users/u1", json={"role": "hr"})

    client.cookies.clear()
    client.cookies.set("auth-token", employee_token)
    assert client.get("/api/auth/me").status_code == 401


def test_admin_data_store(client):
    login(client, ADMIN_EMAIL)
    status = client.get("/api/admin/data-store").json()
    assert status == {
        "available": True,
        "initialized": True,
        "counts": {"jobs": 12, "applications": 10, "users": 10, "companies": 5},
    }
    client.delete("/api/jobs/j1")
    response = client.post("/api/admin/data-store/reset")
    assert response.status_code == 200
    assert response.json()["counts"]["jobs"] == 12


def test_logout(client):
    login(client, EMPLOYEE_EMAIL)
    assert client.post("/api/auth/logout").status_code == 200
    assert client.get("/api/auth/me").status_code == 401
    assert client.get("/dashboard", follow_redirects=False).status_code == 307


def test_companies(client):
    login(client, EMPLOYEE_EMAIL)
    assert client.get("/api/companies").json()["pagination"]["total"] == 5
    company = client.get("/api/companies/c3").json()
    assert [job["id"] for job in company["open_jobs"]] == ["j5", "j6"]
    assert client.get("/api/companies/c404").status_code == 404
    assert client.get("/api/companies/stats").status_code == 403


def test_hr_job_management_is_company_scoped(client):
    login(client, HR_EMAIL)
    listing = client.get("/api/jobs", params={"company": "c2", "page_size": 100}).json()
    assert listing["pagination"]["total"] == 4
    assert {job["company_id"] for job in listing["data"]} == {"c1"}

    assert client.patch("/api/jobs/j3", json={"title": "Hijacked"}).status_code == 404
    assert client.delete("/api/jobs/j5").status_code == 404
    assert client.post("/api/jobs", json={**JOB_PAYLOAD, "company_id": "c2"}).status_code == 403

    assert client.get("/api/jobs/j3").json()["title"] == "Data Analyst"
    assert client.get("/api/jobs/j5").status_code == 200


def test_admin_manages_any_company_jobs(client):
    login(client, ADMIN_EMAIL)
    response = client.post("/api/jobs", json={**JOB_PAYLOAD, "company_id": "c2"})
    assert response.status_code == 201
    assert response.json()["company_name"] == "Horizon Financial Services"
    assert client.post("/api/jobs", json={**JOB_PAYLOAD, "company_id": "c404"}).status_code == 404

    assert client.patch("/api/jobs/j3", json={"title": "Senior Data Analyst"}).status_code == 200
    assert client.delete("/api/jobs/j5").status_code == 204
    assert client.get("/api/jobs", params={"company": "c2"}).json()["pagination"]["total"] == 4


def test_job_update_keeps_salary_range_ordered(client):
    login(client, HR_EMAIL)
    assert client.patch("/api/jobs/j1", json={"salary_min": 4000000}).status_code == 400
    assert client.patch("/api/jobs/j1", json={"salary_max": 100}).status_code == 400
    response = client.patch("/api/jobs/j1", json={"salary_min": 4000000, "salary_max": 5000000})
    assert response.status_code == 200
    assert response.json()["salary_min"] == 4000000


def test_saved_jobs(client):
    login(client, EMPLOYEE_EMAIL)
    page = client.get("/saved", follow_redirects=False)
    assert page.status_code == 200
    assert [job["id"] for job in page.json()["jobs"]] == ["j3", "j9"]

    assert client.post("/api/jobs/j1/save").json()["saved_job_ids"] == ["j3", "j9", "j1"]
    assert client.post("/api/jobs/j1/save").json()["saved_job_ids"] == ["j3", "j9", "j1"]
    assert client.post("/api/jobs/j8/save").status_code == 400
    assert client.post("/api/jobs/nope/save").status_code == 404
    assert client.get("/api/jobs/j1").json()["is_saved"] is True

    assert client.delete("/api/jobs/j3/save").json()["saved_job_ids"] == ["j9", "j1"]
    assert client.delete("/api/jobs/j3/save").status_code == 404
    assert [job["id"] for job in client.get("/api/jobs/saved").json()] == ["j9", "j1"]


def test_chro_reports_page(client):
    login(client, CHRO_EMAIL)
    body = client.get("/chro/reports", follow_redirects=False).json()
    assert body["report"] == "hiring-overview"
    assert body["summary"]["total_applications"] == 10
    assert body["summary"]["total_hired"] == 2
    assert body["options"]["statuses"][0] == "submitted"

    body = client.get(
        "/chro/reports",
        params={"report": "company-comparison", "company": "c2,c1"},
        follow_redirects=False,
    ).json()
    assert [row["company_id"] for row in body["companies"]] == ["c1", "c2"]

    body = client.get(
        "/chro/reports",
        params={"department": "Engineering", "start_date": "2025-06-01", "end_date": "2025-06-10"},
        follow_redirects=False,
    ).json()
    assert body["summary"]["total_applications"] == 3

    response = client.get("/chro/reports", params={"report": "forecast"}, follow_redirects=False)
    assert response.status_code == 422


def test_reports_are_closed_to_other_roles(client):
    login(client, HR_EMAIL)
    response = client.get("/chro/reports", follow_redirects=False)
    assert response.status_code == 307
    assert response.headers["location"] == "/hr/dashboard"


def test_dashboards_check_roles_without_middleware(client):
    from fastapi import FastAPI
    from fastapi.testclient import TestClient

    from horizon_ijp.api.routes import pages

    token = login(client, EMPLOYEE_EMAIL)["token"]
    bare = FastAPI()
    bare.include_router(pages.router)
    with TestClient(bare) as bare_client:
        bare_client.cookies.set("auth-token", token)
        assert bare_client.get("/dashboard").status_code == 200
        assert bare_client.get("/hr/dashboard").status_code == 403
        assert bare_client.get("/chro/dashboard").status_code == 403
        assert bare_client.get("/chro/reports").status_code == 403
        assert bare_client.get("/admin/dashboard").status_code == 403


def test_admin_manages_companies(client):
    login(client, ADMIN_EMAIL)
    new_company = {"name": "Horizon Logistics", "industry": "Logistics", "size": "medium", "location": "Chennai"}
    response = client.post("/api/companies", json=new_company)
    assert response.status_code == 201
    company = response.json()
    assert company["sync_status"] == "pending"
    assert company["logo"] == "/logos/horizon-logistics.svg"
    assert client.post("/api/companies", json={**new_company, "name": "horizon logistics"}).status_code == 400

    company_url = f"/api/companies/{company['id']}"
    assert client.patch(company_url, json={"location": "Kochi"}).json()["location"] == "Kochi"
    assert client.patch(company_url, json={}).status_code == 400
    assert client.post(f"{company_url}/toggle-status").json()["status"] == "inactive"
    inactive = client.get("/api/companies", params={"status": "inactive"}).json()
    assert [c["id"] for c in inactive["data"]] == [company["id"]]

    assert client.delete(company_url).status_code == 204
    assert client.get(company_url).status_code == 404
    assert client.delete("/api/companies/c1").status_code == 400
    assert client.delete("/api/companies/c404").status_code == 404

    client.patch("/api/companies/c1", json={"name": "Horizon Tech"})
    assert client.get("/api/jobs/j1").json()["company_name"] == "Horizon Tech"
    assert client.get("/api/users/u1").json()["company_name"] == "Horizon Tech"


def test_only_admins_manage_companies(client):
    login(client, HR_EMAIL)
    assert client.post("/api/companies", json={
        "name": "Horizon Logistics", "industry": "Logistics", "size": "medium", "location": "Chennai",
    }).status_code == 403
    assert client.patch("/api/companies/c1", json={"location": "Mysuru"}).status_code == 403
    assert client.delete("/api/companies/c4").status_code == 403


def test_admin_deletes_users(client):
    login(client, "arjun.mehta@horizongroup.in")
    employee_token = client.cookies.get("auth-token")

    client.cookies.clear()
    login(client, ADMIN_EMAIL)
    assert client.delete("/api/users/u2").status_code == 204
    assert client.get("/api/users/u2").status_code == 404
    assert client.delete("/api/users/u2").status_code == 404
    assert client.delete("/api/users/u8").status_code == 400

    client.cookies.clear()
    client.cookies.set("auth-token", employee_token)
    assert client.get("/api/auth/me").status_code == 401


def test_reset_ends_sessions_of_removed_users(client):
    login(client, ADMIN_EMAIL)
    admin_token = client.cookies.get("auth-token")
    assert client.post("/api/users", json=NEW_USER).status_code == 201

    client.cookies.clear()
    login(client, NEW_USER["email"])
    new_user_token = client.cookies.get("auth-token")

    client.cookies.clear()
    client.cookies.set("auth-token", admin_token)
    assert client.post("/api/admin/data-store/reset").status_code == 200

    client.cookies.clear()
    client.cookies.set("auth-token", new_user_token)
    response = client.get("/dashboard", follow_redirects=False)
    assert response.status_code == 307
    assert response.headers["location"] == "/login?redirect=%2Fdashboard"
    assert client.get("/api/auth/me").status_code == 401


def test_pages_redirect_when_session_user_is_gone(client):
    from horizon_ijp.api.dependencies import get_data_store

    login(client, EMPLOYEE_EMAIL)
    get_data_store().delete_user("u1")
    response = client.get("/dashboard", follow_redirects=False)
    assert response.status_code == 307
    assert response.headers["location"] == "/login?redirect=%2Fdashboard"
