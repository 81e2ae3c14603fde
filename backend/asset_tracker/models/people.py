from __future__ import annotations

from ..extensions import db
from asset_tracker.time_utils import to_utc_z, to_iso_date
from .auth import ACCOUNT_STATUSES


class Employee(db.Model):
    """
    People who can hold assets.

    Employees are not login accounts; history and request rows reference them
    as the holder/beneficiary. Deactivate rather than delete once an employee
    appears in the audit trail.
    """
    __tablename__ = "employees"
    __table_args__ = (
        db.CheckConstraint(f"status IN {ACCOUNT_STATUSES}", name="ck_employees_status"),
        db.Index("ix_employees_department", "department"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # Human-facing staff number, e.g. "EMP001"
    employee_id = db.Column(db.String(50), nullable=False, unique=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    department = db.Column(db.String(100), nullable=False)
    designation = db.Column(db.String(100), nullable=True)
    contact = db.Column(db.String(30), nullable=True)
    branch = db.Column(db.String(100), nullable=False, default="Head Office")
    status = db.Column(db.String(16), nullable=False, default="active")
    joining_date = db.Column(db.Date, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def to_summary(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "employeeId": self.employee_id,
            "department": self.department,
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "employeeId": self.employee_id,
            "name": self.name,
            "email": self.email,
            "department": self.department,
            "designation": self.designation,
            "contact": self.contact,
            "branch": self.branch,
            "status": self.status,
            "joiningDate": to_iso_date(self.joining_date),
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }
