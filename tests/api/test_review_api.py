"""
Tests for the review workflow HTTP endpoints.

These cover status codes, role checks and response shape.
Workflow rules are tested in tests/services.
"""

import pytest

from finance_review.config import get_settings
from finance_review.models import Notification

FINANCE = {"X-User-Id": "finance-1"}
ADMIN = {"X-User-Id": "admin-1"}
VIEWER = {"X-User-Id": "viewer-1"}


@pytest.fixture
def record_id(client, roles):
    response = client.post(
        "/monthly-records/initialize",
        json={
            "month": "2026-10",
            "members": [
                {"member_id": "EMP-001", "total_savings": 1000, "loan_balance": 500},
            ],
        },
        headers=FINANCE,
    )
    assert response.status_code == 201
    return response.json()[0]["id"]


@pytest.fixture
def change_log_id(client, record_id):
    response = client.patch(
        f"/monthly-records/{record_id}",
        json={"total_savings": 1200},
        headers=FINANCE,
    )
    return response.json()["changes"][0]["id"]


class TestMonthlyRecords:

    def test_initialize_returns_pending_records(self, client, roles):
        response = client.post(
            "/monthly-records/initialize",
            json={"month": "2026-10", "members": [{"member_id": "EMP-001"}]},
            headers=FINANCE,
        )
        data = response.json()
        assert response.status_code == 201
        assert data[0]["status"] == "pending"
        assert data[0]["month"] == "2026-10-01"
        assert data[0]["created_by"] == "finance-1"

    def test_viewer_cannot_initialize(self, client, roles):
        response = client.post(
            "/monthly-records/initialize",
            json={"month": "2026-10", "members": [{"member_id": "EMP-001"}]},
            headers=VIEWER,
        )
        assert response.status_code == 403

    def test_missing_identity_returns_401(self, client, roles):
        response = client.get("/monthly-records?month=2026-10")
        assert response.status_code == 401

    def test_list_month(self, client, record_id):
        response = client.get("/monthly-records?month=2026-10", headers=VIEWER)
        assert response.status_code == 200
        assert [r["id"] for r in response.json()] == [record_id]

    def test_list_month_bad_format(self, client, roles):
        response = client.get("/monthly-records?month=oct", headers=VIEWER)
        assert response.status_code == 422

    def test_get_missing_record(self, client, roles):
        response = client.get("/monthly-records/999", headers=VIEWER)
        assert response.status_code == 404

    def test_edit_returns_changes(self, client, record_id):
        response = client.patch(
            f"/monthly-records/{record_id}",
            json={"total_savings": 1200, "loan_balance": 500},
            headers=FINANCE,
        )
        data = response.json()
        assert response.status_code == 200
        assert data["record"]["status"] == "updated"
        assert len(data["changes"]) == 1
        assert data["changes"][0]["old_value"] == "1000"
        assert data["changes"][0]["new_value"] == "1200"
        assert data["notifications_sent"] == 2
        assert data["notifications_failed"] == 0

    def test_unchanged_edit_returns_no_changes(self, client, record_id):
        response = client.patch(
            f"/monthly-records/{record_id}",
            json={"total_savings": 1000},
            headers=FINANCE,
        )
        data = response.json()
        assert response.status_code == 200
        assert data["changes"] == []
        assert data["record"]["status"] == "pending"

    def test_negative_amount_returns_422(self, client, record_id):
        response = client.patch(
            f"/monthly-records/{record_id}",
            json={"total_savings": -1},
            headers=FINANCE,
        )
        assert response.status_code == 422

    @pytest.mark.parametrize("amount", [1e30, 1e16, "12345678901234567890"])
    def test_amount_too_large_returns_422(self, client, record_id, amount):
        response = client.patch(
            f"/monthly-records/{record_id}",
            json={"total_savings": amount},
            headers=FINANCE,
        )
        assert response.status_code == 422

    def test_initialize_with_huge_amount_returns_422(self, client, roles):
        response = client.post(
            "/monthly-records/initialize",
            json={
                "month": "2026-11",
                "members": [{"member_id": "EMP-002", "total_savings": 1e25}],
            },
            headers=FINANCE,
        )
        assert response.status_code == 422

    def test_edit_missing_record_returns_404(self, client, roles):
        response = client.patch(
            "/monthly-records/999",
            json={"total_savings": 1},
            headers=FINANCE,
        )
        assert response.status_code == 404

    def test_viewer_cannot_edit(self, client, record_id):
        response = client.patch(
            f"/monthly-records/{record_id}",
            json={"total_savings": 1},
            headers=VIEWER,
        )
        assert response.status_code == 403


class TestReview:

    def test_approve(self, client, change_log_id):
        response = client.post(
            f"/change-logs/{change_log_id}/approve", headers=ADMIN
        )
        data = response.json()
        assert response.status_code == 200
        assert data["change_log"]["status"] == "approved"
        assert data["change_log"]["reviewed_by"] == "admin-1"
        assert data["notifications_sent"] == 1

    def test_second_approve_returns_409(self, client, change_log_id):
        client.post(f"/change-logs/{change_log_id}/approve", headers=ADMIN)
        response = client.post(
            f"/change-logs/{change_log_id}/approve", headers=ADMIN
        )
        assert response.status_code == 409

    def test_finance_cannot_approve(self, client, change_log_id):
        response = client.post(
            f"/change-logs/{change_log_id}/approve", headers=FINANCE
        )
        assert response.status_code == 403

    def test_approve_missing_returns_404(self, client, roles):
        response = client.post("/change-logs/999/approve", headers=ADMIN)
        assert response.status_code == 404

    def test_comment_reopens_change(self, client, change_log_id):
        response = client.post(
            f"/change-logs/{change_log_id}/comments",
            json={"content": "please verify source document", "scope": "field"},
            headers=ADMIN,
        )
        data = response.json()
        assert response.status_code == 201
        assert data["reopened"] is True
        assert data["change_log"]["status"] == "needs_revision"
        assert data["comment"]["content"] == "please verify source document"

    def test_blank_comment_returns_422(self, client, change_log_id):
        response = client.post(
            f"/change-logs/{change_log_id}/comments",
            json={"content": "   "},
            headers=ADMIN,
        )
        assert response.status_code == 422

    def test_list_comments(self, client, change_log_id):
        client.post(
            f"/change-logs/{change_log_id}/comments",
            json={"content": "one"},
            headers=ADMIN,
        )
        response = client.get(
            f"/change-logs/{change_log_id}/comments", headers=FINANCE
        )
        assert response.status_code == 200
        assert [c["content"] for c in response.json()] == ["one"]

    def test_list_change_logs_by_status(self, client, change_log_id):
        response = client.get(
            "/change-logs?status=pending", headers=ADMIN
        )
        assert [e["id"] for e in response.json()] == [change_log_id]

        client.post(f"/change-logs/{change_log_id}/approve", headers=ADMIN)
        response = client.get("/change-logs?status=pending", headers=ADMIN)
        assert response.json() == []


class TestNotifications:

    def test_admin_sees_edit_notification(self, client, change_log_id):
        response = client.get("/notifications", headers=ADMIN)
        data = response.json()
        assert response.status_code == 200
        assert len(data) == 1
        assert data[0]["title"] == "Monthly Data Updated"
        assert "1 field changed" in data[0]["message"]
        assert data[0]["related_change_log_id"] == change_log_id

    def test_mark_read(self, client, change_log_id):
        [notification] = client.get("/notifications", headers=ADMIN).json()

        response = client.post(
            f"/notifications/{notification['id']}/read", headers=ADMIN
        )

        assert response.status_code == 200
        assert response.json()["read"] is True
        count = client.get("/notifications/unread-count", headers=ADMIN).json()
        assert count["unread"] == 0

    def test_mark_someone_elses_returns_403(self, client, change_log_id):
        [notification] = client.get("/notifications", headers=ADMIN).json()
        response = client.post(
            f"/notifications/{notification['id']}/read", headers=FINANCE
        )
        assert response.status_code == 403

    def test_mark_all_read(self, client, change_log_id):
        response = client.post("/notifications/read-all", headers=ADMIN)
        assert response.json()["marked"] == 1

    def test_editor_notified_on_approval(self, client, change_log_id):
        client.post(f"/change-logs/{change_log_id}/approve", headers=ADMIN)
        data = client.get("/notifications", headers=FINANCE).json()
        assert [n["title"] for n in data] == ["Change Approved"]

    def test_default_limit_follows_page_size_setting(
        self, client, roles, db_session, monkeypatch
    ):
        monkeypatch.setattr(get_settings(), "NOTIFICATION_PAGE_SIZE", 2)
        db_session.add_all([
            Notification(user_id="admin-1", title=f"T{i}", message="M")
            for i in range(3)
        ])
        db_session.commit()

        default_page = client.get("/notifications", headers=ADMIN).json()
        full_page = client.get("/notifications?limit=3", headers=ADMIN).json()

        assert [n["title"] for n in default_page] == ["T2", "T1"]
        assert len(full_page) == 3
