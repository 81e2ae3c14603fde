"""
Asset request workflow tests.

Verifies:
- Requests are filed for the Employee matching the user's email
- Only Pending requests can be reviewed, and only once
- Visibility and deletion rules per role
"""

import pytest

from asset_tracker.errors import InvalidStateError, NotFoundError, PermissionDeniedError, ValidationError
from asset_tracker.models import AssetRequest, User
from asset_tracker.services import request_service


@pytest.fixture
def pending(employee, employee_user):
    return request_service.create_request(employee_user, {
        "assetType": "Laptop",
        "justification": "Current machine is five years old",
        "priority": "High",
    })


@pytest.fixture
def other_user(db_session):
    user = User(name="Jane Smith", email="jane.smith@company.com", password_hash="x", role="Employee")
    db_session.add(user)
    db_session.commit()
    return user


class TestCreate:

    def test_create_defaults(self, employee, employee_user):
        req = request_service.create_request(employee_user, {"assetType": "Monitor", "justification": "Dual screen"})
        assert req["status"] == "Pending"
        assert req["priority"] == "Medium"
        assert req["employee"]["employeeId"] == "EMP001"
        assert req["requester"]["id"] == employee_user.id
        assert req["requestDate"] is not None

    def test_user_without_employee_record(self, db_session, other_user):
        with pytest.raises(ValidationError, match="No employee record found for this user"):
            request_service.create_request(other_user, {"assetType": "Mouse", "justification": "Broken"})

    @pytest.mark.parametrize("payload", [
        {"justification": "missing type"},
        {"assetType": "Laptop"},
        {"assetType": "Laptop", "justification": "x", "priority": "Whenever"},
        {"assetType": "Laptop", "justification": "x", "categoryId": 99999},
    ])
    def test_invalid(self, employee, employee_user, payload):
        with pytest.raises(ValidationError):
            request_service.create_request(employee_user, payload)


class TestReview:

    def test_approve_once(self, pending, manager_user):
        reviewed = request_service.review_request(
            pending["id"], status="Approved", reviewer_id=manager_user.id, review_notes="ok",
        )
        assert reviewed["status"] == "Approved"
        assert reviewed["reviewer"]["id"] == manager_user.id
        assert reviewed["reviewDate"] is not None

        with pytest.raises(InvalidStateError, match="Request has already been reviewed"):
            request_service.review_request(pending["id"], status="Rejected", reviewer_id=manager_user.id)

    def test_fulfil_with_asset(self, pending, manager_user, make_asset):
        asset = make_asset()
        reviewed = request_service.review_request(
            pending["id"], status="Fulfilled", reviewer_id=manager_user.id, assigned_asset_id=asset["id"],
        )
        assert reviewed["assignedAssetId"] == asset["id"]
        assert reviewed["assignedAsset"]["assetTag"] == asset["assetTag"]

    def test_bad_outcome(self, pending, manager_user):
        with pytest.raises(ValidationError):
            request_service.review_request(pending["id"], status="Pending", reviewer_id=manager_user.id)

    def test_unknown_asset(self, pending, manager_user, db_session):
        with pytest.raises(ValidationError):
            request_service.review_request(
                pending["id"], status="Fulfilled", reviewer_id=manager_user.id, assigned_asset_id=424242,
            )
        assert db_session.get(AssetRequest, pending["id"]).status == "Pending"

    def test_unknown_request(self, db_session, manager_user):
        with pytest.raises(NotFoundError):
            request_service.review_request(31337, status="Approved", reviewer_id=manager_user.id)

    def test_pending_count(self, pending, manager_user):
        assert request_service.pending_count() == 1
        request_service.review_request(pending["id"], status="Rejected", reviewer_id=manager_user.id)
        assert request_service.pending_count() == 0


class TestAccess:

    def test_employee_sees_only_own(self, pending, other_user, manager_user):
        assert [r["id"] for r in request_service.list_requests(manager_user)] == [pending["id"]]
        assert request_service.list_requests(other_user) == []

        with pytest.raises(PermissionDeniedError):
            request_service.get_request(other_user, pending["id"])

    def test_requester_withdraws_pending(self, pending, employee_user, db_session):
        request_service.delete_request(employee_user, pending["id"])
        assert db_session.get(AssetRequest, pending["id"]) is None

    def test_requester_cannot_withdraw_reviewed(self, pending, employee_user, manager_user):
        request_service.review_request(pending["id"], status="Approved", reviewer_id=manager_user.id)
        with pytest.raises(InvalidStateError):
            request_service.delete_request(employee_user, pending["id"])

    def test_other_employee_cannot_delete(self, pending, other_user):
        with pytest.raises(PermissionDeniedError):
            request_service.delete_request(other_user, pending["id"])

    def test_privileged_delete_any_status(self, pending, admin_user, manager_user, db_session):
        request_service.review_request(pending["id"], status="Rejected", reviewer_id=manager_user.id)
        request_service.delete_request(admin_user, pending["id"])
        assert db_session.get(AssetRequest, pending["id"]) is None
