from __future__ import annotations

from ..extensions import db
from asset_tracker.time_utils import to_utc_z

REQUEST_PRIORITIES = ("Low", "Medium", "High", "Urgent")

REQUEST_STATUS_PENDING = "Pending"
REQUEST_STATUS_APPROVED = "Approved"
REQUEST_STATUS_REJECTED = "Rejected"
REQUEST_STATUS_FULFILLED = "Fulfilled"
REQUEST_STATUSES = (
    REQUEST_STATUS_PENDING,
    REQUEST_STATUS_APPROVED,
    REQUEST_STATUS_REJECTED,
    REQUEST_STATUS_FULFILLED,
)


class AssetRequest(db.Model):
    """
    Employee-initiated request for equipment.

    LIFECYCLE:
    1. Pending: created by the employee, may be withdrawn (deleted) by them
    2. Approved / Rejected / Fulfilled: set once by a reviewer (terminal)

    Independent of the asset state machine: approving or fulfilling a request
    does not issue the asset; assigned_asset_id is informational.
    """
    __tablename__ = "asset_requests"
    __table_args__ = (
        db.CheckConstraint(f"priority IN {REQUEST_PRIORITIES}", name="ck_asset_requests_priority"),
        db.CheckConstraint(f"status IN {REQUEST_STATUSES}", name="ck_asset_requests_status"),
        db.Index("ix_asset_requests_status", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=False, index=True)
    requested_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=True)

    asset_type = db.Column(db.String(100), nullable=False)
    justification = db.Column(db.Text, nullable=False)
    priority = db.Column(db.String(16), nullable=False, default="Medium")
    status = db.Column(db.String(16), nullable=False, default=REQUEST_STATUS_PENDING)

    request_date = db.Column(db.DateTime(timezone=True), nullable=False, index=True)

    reviewed_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    review_date = db.Column(db.DateTime(timezone=True), nullable=True)
    review_notes = db.Column(db.Text, nullable=True)
    assigned_asset_id = db.Column(db.Integer, db.ForeignKey("assets.id", ondelete="SET NULL"), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self, *, employee=None, requester=None, reviewer=None, category=None, assigned_asset=None) -> dict:
        return {
            "id": self.id,
            "employeeId": self.employee_id,
            "requestedBy": self.requested_by,
            "categoryId": self.category_id,
            "assetType": self.asset_type,
            "justification": self.justification,
            "priority": self.priority,
            "status": self.status,
            "requestDate": to_utc_z(self.request_date),
            "reviewedBy": self.reviewed_by,
            "reviewDate": to_utc_z(self.review_date),
            "reviewNotes": self.review_notes,
            "assignedAssetId": self.assigned_asset_id,
            "employee": employee,
            "requester": requester,
            "reviewer": reviewer,
            "category": category,
            "assignedAsset": assigned_asset,
        }
