import re

from tests.conftest import make_balance, make_request, sign_in


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"


class TestRouteGuard:
    def test_unauthenticated_request_page_redirects_to_login(self, client):
        response = client.get("/requests", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/login"

    def test_unknown_path_goes_through_root_to_login(self, client):
        response = client.get("/no/such/page")
        assert response.url.path == "/login"

    def test_login_page_redirects_home_when_signed_in(self, client, backend):
        sign_in(client, "adm-token")
        response = client.get("/login", follow_redirects=False)
        assert response.headers["location"] == "/"

    def test_other_roles_pages_redirect_to_root(self, client, backend):
        sign_in(client, "emp-token")
        response = client.get("/admin/users", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/"

    def test_stale_cookie_is_cleared(self, client):
        sign_in(client, "expired-token")
        response = client.get("/", follow_redirects=False)
        assert response.headers["location"] == "/login"
        assert 'token=""' in response.headers["set-cookie"]


class TestLogin:
    def test_successful_login_sets_cookie(self, client, backend):
        backend.add("POST", "/auth/login", {"token": "emp-token"})

        response = client.post(
            "/login",
            data={"email": "emily.johnson@example.com", "password": "secret"},
            follow_redirects=False,
        )

        assert response.status_code == 303
        assert response.headers["location"] == "/"
        assert "token=emp-token" in response.headers["set-cookie"]

    def test_bad_credentials_shown_inline(self, client, backend):
        backend.add("POST", "/auth/login", {"message": "Invalid email or password"}, status_code=401)

        response = client.post(
            "/login", data={"email": "emily.johnson@example.com", "password": "nope"}
        )

        assert response.status_code == 401
        assert "Invalid email or password" in response.text
        assert "set-cookie" not in response.headers

    def test_malformed_email(self, client, backend):
        response = client.post("/login", data={"email": "not-an-email", "password": "x"})
        assert response.status_code == 400
        assert backend.calls_to("POST", "/auth/login") == []

    def test_logout_clears_cookie(self, client):
        sign_in(client, "emp-token")
        response = client.post("/logout", follow_redirects=False)
        assert response.headers["location"] == "/login"
        assert 'token=""' in response.headers["set-cookie"]


class TestDashboard:
    def test_employee_sees_total_balance(self, client, backend):
        sign_in(client, "emp-token")
        backend.add("GET", "/employee/requests", [make_request("r-1")])
        backend.add("GET", "/employee/balance", [
            make_balance("lt-annual", "Annual Leave", 20, 5),
            make_balance("lt-sick", "Sick Leave", 10, 2.5),
        ])

        response = client.get("/")

        assert response.status_code == 200
        assert "Welcome back, Emily" in response.text
        assert "22.5 days" in response.text

    def test_employee_dashboard_survives_backend_failure(self, client, backend):
        sign_in(client, "emp-token")
        backend.fail("GET", "/employee/requests")
        backend.add("GET", "/employee/balance", [make_balance("lt-annual", "Annual Leave", 20, 5)])

        response = client.get("/")

        assert response.status_code == 200
        assert "No recent requests found." in response.text
        assert "0 days" in response.text

    def test_manager_pending_count(self, client, backend):
        sign_in(client, "mgr-token")
        backend.add("GET", "/manager/pending", [make_request(f"p-{i}") for i in range(4)])
        backend.add("GET", "/manager/history", [])

        response = client.get("/")

        match = re.search(r'id="pending-count"><dt>Pending Approvals</dt><dd>(\d+)</dd>', response.text)
        assert match and match.group(1) == "4"
        assert "And 1 more pending requests..." in response.text

    def test_401_during_fetch_logs_out(self, client, backend):
        sign_in(client, "emp-token")
        backend.add("GET", "/employee/requests", {"detail": "expired"}, status_code=401)
        backend.add("GET", "/employee/balance", [])

        response = client.get("/", follow_redirects=False)

        assert response.headers["location"] == "/login"
        assert 'token=""' in response.headers["set-cookie"]


class TestApplyLeave:
    def _leave_types(self, backend):
        backend.add("GET", "/admin/leave-types", [
            {"id": "lt-annual", "name": "Annual Leave", "daysAllowed": 20, "description": "", "isActive": True},
            {"id": "lt-old", "name": "Retired Type", "daysAllowed": 5, "description": "", "isActive": False},
        ])

    def test_form_offers_only_active_types(self, client, backend):
        sign_in(client, "emp-token")
        self._leave_types(backend)

        response = client.get("/apply")

        assert "Annual Leave (20 days allowed)" in response.text
        assert "Retired Type" not in response.text

    def test_submit_sends_total_days_and_redirects_later(self, client, backend):
        sign_in(client, "emp-token")
        backend.add("POST", "/employee/requests", make_request("r-new"), status_code=201)

        response = client.post("/apply", data={
            "leave_type_id": "lt-annual",
            "start_date": "2024-03-01",
            "end_date": "2024-03-03",
            "reason": "trip",
        })

        assert response.status_code == 200
        sent = backend.json_sent("POST", "/employee/requests")
        assert len(sent) == 1
        assert sent[0]["totalDays"] == 3
        assert "Leave request submitted successfully!" in response.text
        assert 'content="2;url=/requests"' in response.text

    def test_server_message_shown_on_failure(self, client, backend):
        sign_in(client, "emp-token")
        self._leave_types(backend)
        backend.add("POST", "/employee/requests", {"message": "Insufficient balance"}, status_code=400)

        response = client.post("/apply", data={
            "leave_type_id": "lt-annual",
            "start_date": "2024-03-01",
            "end_date": "2024-03-03",
            "reason": "trip",
        })

        assert response.status_code == 400
        assert "Insufficient balance" in response.text
        assert "url=/requests" not in response.text

    def test_fallback_message_on_server_error(self, client, backend):
        sign_in(client, "emp-token")
        self._leave_types(backend)
        backend.add("POST", "/employee/requests", {}, status_code=500)

        response = client.post("/apply", data={
            "leave_type_id": "lt-annual",
            "start_date": "2024-03-01",
            "end_date": "2024-03-03",
            "reason": "trip",
        })

        assert "Failed to submit leave request" in response.text

    def test_end_before_start_rejected_without_calling_backend(self, client, backend):
        sign_in(client, "emp-token")
        self._leave_types(backend)

        response = client.post("/apply", data={
            "leave_type_id": "lt-annual",
            "start_date": "2024-03-05",
            "end_date": "2024-03-01",
            "reason": "trip",
        })

        assert response.status_code == 400
        assert "End date cannot be before start date" in response.text
        assert backend.calls_to("POST", "/employee/requests") == []

    def test_missing_reason(self, client, backend):
        sign_in(client, "emp-token")
        self._leave_types(backend)

        response = client.post("/apply", data={
            "leave_type_id": "lt-annual",
            "start_date": "2024-03-01",
            "end_date": "2024-03-02",
        })

        assert "Please fill in all required fields" in response.text

    def test_total_days_preview(self, client):
        sign_in(client, "emp-token")
        assert client.get("/apply/total-days?start=2024-01-01&end=2024-01-05").json() == {"totalDays": 5}
        assert client.get("/apply/total-days?start=2024-01-01").json() == {"totalDays": 0}


class TestBalanceAndRequests:
    def test_balance_cards(self, client, backend):
        sign_in(client, "emp-token")
        backend.add("GET", "/employee/balance", [
            make_balance("lt-annual", "Annual Leave", 10, 11),
            make_balance("lt-sick", "Sick Leave", 10, 8),
            make_balance("lt-study", "Study Leave", 10, 10),
        ])

        response = client.get("/balance")

        assert "110%" in response.text
        assert "width: 100%" in response.text
        assert "Low Balance" in response.text
        assert "Exhausted" in response.text

    def test_empty_balance(self, client, backend):
        sign_in(client, "emp-token")
        backend.add("GET", "/employee/balance", [])
        assert "No leave balance information available." in client.get("/balance").text

    def test_cancel_pending_request(self, client, backend):
        sign_in(client, "emp-token")
        backend.add("DELETE", "/employee/requests/r-1", None, status_code=204)

        response = client.post("/requests/r-1/cancel", follow_redirects=False)

        assert response.headers["location"] == "/requests"
        assert len(backend.calls_to("DELETE", "/employee/requests/r-1")) == 1

    def test_requests_list_only_offers_cancel_for_pending(self, client, backend):
        sign_in(client, "emp-token")
        backend.add("GET", "/employee/requests", [
            make_request("r-1"),
            make_request("r-2", status="approved"),
        ])

        response = client.get("/requests")

        assert "/requests/r-1/cancel" in response.text
        assert "/requests/r-2/cancel" not in response.text


class TestManagerActions:
    def test_reject_requires_comments(self, client, backend):
        sign_in(client, "mgr-token")
        backend.add("GET", "/manager/pending", [make_request("r-1")])

        response = client.post("/manager/pending/r-1/reject", data={"comments": "  "})

        assert response.status_code == 400
        assert "Comments are required" in response.text
        assert backend.calls_to("POST", "/manager/reject/r-1") == []

    def test_approve_with_optional_comment(self, client, backend):
        sign_in(client, "mgr-token")
        backend.add("POST", "/manager/approve/r-1", {"ok": True})

        response = client.post("/manager/pending/r-1/approve", data={}, follow_redirects=False)

        assert response.headers["location"] == "/manager/pending"
        assert backend.json_sent("POST", "/manager/approve/r-1") == [{}]

    def test_history_page(self, client, backend):
        sign_in(client, "mgr-token")
        backend.add("GET", "/manager/history", [
            make_request("r-1", status="rejected", reviewComments="Busy week")
        ])

        response = client.get("/manager/history")

        assert "Busy week" in response.text
        assert "Rejected" in response.text


class TestAdminPages:
    def test_create_leave_type(self, client, backend):
        sign_in(client, "adm-token")
        backend.add("POST", "/admin/leave-types", {
            "id": "lt-new", "name": "Study", "daysAllowed": 3, "description": "", "isActive": True
        })

        response = client.post(
            "/admin/leave-types",
            data={"name": "Study", "days_allowed": "3", "description": ""},
            follow_redirects=False,
        )

        assert response.headers["location"] == "/admin/leave-types"
        assert backend.json_sent("POST", "/admin/leave-types") == [
            {"name": "Study", "daysAllowed": 3.0, "description": "", "isActive": True}
        ]

    def test_toggle_user(self, client, backend):
        sign_in(client, "adm-token")
        backend.add("PUT", "/admin/users/u-emp", {
            "id": "u-emp", "email": "e@example.com", "firstName": "Emily", "role": "employee",
            "isActive": False,
        })

        client.post("/admin/users/u-emp/toggle", data={"is_active": "false"}, follow_redirects=False)

        assert backend.json_sent("PUT", "/admin/users/u-emp") == [{"isActive": False}]

    def test_holidays_listed(self, client, backend):
        sign_in(client, "adm-token")
        backend.add("GET", "/admin/holidays", [
            {"id": "h-1", "name": "New Year", "date": "2025-01-01", "description": "", "isActive": True}
        ])

        response = client.get("/admin/holidays")

        assert "New Year" in response.text
        assert "01 Jan 2025" in response.text

    def test_create_holiday_error_shown(self, client, backend):
        sign_in(client, "adm-token")
        backend.add("GET", "/admin/holidays", [])
        backend.add("POST", "/admin/holidays", {"message": "Holiday already exists"}, status_code=409)

        response = client.post(
            "/admin/holidays", data={"name": "New Year", "holiday_date": "2025-01-01"}
        )

        assert "Holiday already exists" in response.text


class TestMalformedBackendData:
    def test_dashboard_renders_empty_lists(self, client, backend):
        sign_in(client, "emp-token")
        backend.add("GET", "/employee/requests", [make_request(7)])
        backend.add("GET", "/employee/balance", [make_balance("lt-annual", "Annual Leave", 20, 5)])

        response = client.get("/")

        assert response.status_code == 200
        assert "No recent requests found." in response.text
        assert "0 days" in response.text

    def test_list_page_renders_empty(self, client, backend):
        sign_in(client, "mgr-token")
        backend.add("GET", "/manager/history", [{"id": "h-1"}])

        response = client.get("/manager/history")

        assert response.status_code == 200
        assert "No reviewed requests yet." in response.text

    def test_total_days_preview_with_offset(self, client):
        sign_in(client, "emp-token")
        response = client.get(
            "/apply/total-days", params={"start": "2024-01-01T00:00:00+00:00", "end": "2024-01-05"}
        )
        assert response.json() == {"totalDays": 5}
