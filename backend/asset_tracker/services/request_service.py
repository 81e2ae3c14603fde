# Overview: Service-layer operations for asset requests; a review workflow separate from the asset lifecycle.

"""
Asset Request Service

STATE MACHINE:
    Pending -> Approved | Rejected | Fulfilled   (one review, by Admin/Manager)

    Reviewed requests are terminal. Approving or fulfilling a request never
    issues an asset; assignedAssetId only records which asset was meant.

ACCESS:
- Employees see and withdraw only their own requests, and only withdraw
  while Pending.
- Privileged roles see everything and may delete at any status.
"""
from __future__ import annotations

from sqlalchemy import func
from sqlalchemy.orm import aliased

from ..extensions import db
from ..errors import InvalidStateError, NotFoundError, PermissionDeniedError
from ..models import Asset, AssetRequest, Category, Employee, User
from ..models.requests import (
    REQUEST_PRIORITIES,
    REQUEST_STATUSES,
    REQUEST_STATUS_APPROVED,
    REQUEST_STATUS_FULFILLED,
    REQUEST_STATUS_PENDING,
    REQUEST_STATUS_REJECTED,
)
from ..validation import ModelValidationPolicy, ValidationError, validate_payload
from .asset_service import find_employee_for_email
from .concurrency import lock_for_update, run_in_transaction
from asset_tracker.time_utils import utcnow

REVIEW_OUTCOMES = (REQUEST_STATUS_APPROVED, REQUEST_STATUS_REJECTED, REQUEST_STATUS_FULFILLED)

REQUEST_POLICY = ModelValidationPolicy(
    fields={
        "assetType": "asset_type",
        "justification": "justification",
        "priority": "priority",
        "categoryId": "category_id",
    },
    required_on_create={"assetType", "justification"},
    choices={"priority": REQUEST_PRIORITIES},
)


def _request_query():
    requester = aliased(User)
    reviewer = aliased(User)
    return (
        db.session.query(AssetRequest, Employee, requester, reviewer, Category, Asset)
        .outerjoin(Employee, Employee.id == AssetRequest.employee_id)
        .outerjoin(requester, requester.id == AssetRequest.requested_by)
        .outerjoin(reviewer, reviewer.id == AssetRequest.reviewed_by)
        .outerjoin(Category, Category.id == AssetRequest.category_id)
        .outerjoin(Asset, Asset.id == AssetRequest.assigned_asset_id)
    )


def _serialize_row(row) -> dict:
    req, employee, requester, reviewer, category, asset = row

    def summary(obj):
        return obj.to_summary() if obj is not None else None

    return req.to_dict(
        employee=summary(employee),
        requester=summary(requester),
        reviewer=summary(reviewer),
        category=summary(category),
        assigned_asset=summary(asset),
    )


def _load(request_id: int) -> dict:
    row = _request_query().filter(AssetRequest.id == request_id).first()
    if row is None:
        raise NotFoundError("Asset request not found")
    return _serialize_row(row)


def _get(request_id: int) -> AssetRequest:
    req = db.session.get(AssetRequest, request_id)
    if req is None:
        raise NotFoundError("Asset request not found")
    return req


def create_request(user: User, payload: dict) -> dict:
    """
    File a request on behalf of the Employee record matching the user's email.

    Raises:
        ValidationError: no Employee for this user, bad fields, unknown category
    """
    employee = find_employee_for_email(user.email)
    if employee is None:
        raise ValidationError("No employee record found for this user")

    patch = validate_payload(model=AssetRequest, payload=payload, policy=REQUEST_POLICY, partial=False)
    if patch.get("category_id") is not None and db.session.get(Category, patch["category_id"]) is None:
        raise ValidationError("Category does not exist")

    req = AssetRequest(
        employee_id=employee.id,
        requested_by=user.id,
        request_date=utcnow(),
        status=REQUEST_STATUS_PENDING,
        **patch,
    )
    db.session.add(req)
    db.session.commit()
    return _load(req.id)


def list_requests(user: User, *, status: str | None = None) -> list[dict]:
    q = _request_query()
    if not user.is_privileged:
        q = q.filter(AssetRequest.requested_by == user.id)
    if status:
        if status not in REQUEST_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(REQUEST_STATUSES)}")
        q = q.filter(AssetRequest.status == status)
    rows = q.order_by(AssetRequest.request_date.desc(), AssetRequest.id.desc()).all()
    return [_serialize_row(r) for r in rows]


def get_request(user: User, request_id: int) -> dict:
    req = _get(request_id)
    if not user.is_privileged and req.requested_by != user.id:
        raise PermissionDeniedError("Access denied")
    return _load(req.id)


def review_request(
    request_id: int,
    *,
    status: str,
    reviewer_id: int,
    review_notes: str | None = None,
    assigned_asset_id: int | None = None,
) -> dict:
    """
    Pending -> Approved | Rejected | Fulfilled.

    Raises:
        ValidationError: bad outcome or unknown assigned asset
        InvalidStateError: request is no longer Pending
    """
    if status not in REVIEW_OUTCOMES:
        raise ValidationError(f"status must be one of: {', '.join(REVIEW_OUTCOMES)}")

    def _work() -> int:
        req = lock_for_update(db.session.query(AssetRequest).filter(AssetRequest.id == request_id)).first()
        if req is None:
            raise NotFoundError("Asset request not found")
        if req.status != REQUEST_STATUS_PENDING:
            raise InvalidStateError("Request has already been reviewed")
        if assigned_asset_id is not None and db.session.get(Asset, assigned_asset_id) is None:
            raise ValidationError("Assigned asset does not exist")

        req.status = status
        req.reviewed_by = reviewer_id
        req.review_date = utcnow()
        req.review_notes = review_notes
        if assigned_asset_id is not None:
            req.assigned_asset_id = assigned_asset_id
        return req.id

    return _load(run_in_transaction(_work))


def delete_request(user: User, request_id: int) -> None:
    req = _get(request_id)
    if not user.is_privileged:
        if req.requested_by != user.id:
            raise PermissionDeniedError("Access denied")
        if req.status != REQUEST_STATUS_PENDING:
            raise InvalidStateError("Only pending requests can be withdrawn")
    db.session.delete(req)
    db.session.commit()


def pending_count() -> int:
    return (
        db.session.query(func.count(AssetRequest.id))
        .filter(AssetRequest.status == REQUEST_STATUS_PENDING)
        .scalar()
        or 0
    )
