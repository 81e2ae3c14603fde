# backend/asset_tracker/services/employee_service.py
"""
Employee Service

Employees are asset holders, not login accounts. Once an employee shows up in
the audit trail the row is kept; callers deactivate it instead of deleting.
"""
from __future__ import annotations

from sqlalchemy import func

from ..extensions import db
from ..errors import NotFoundError, ReferentialIntegrityError
from ..models import AssetHistory, AssetRequest, Employee
from ..models.auth import ACCOUNT_STATUSES
from ..models.requests import REQUEST_STATUS_PENDING
from ..validation import (
    LIKE_ESCAPE,
    contains_pattern,
    ConflictError,
    ModelValidationPolicy,
    enforce_rules_employee,
    validate_payload,
)
from .asset_service import assets_held_by, normalize_paging, page_count

EMPLOYEE_POLICY = ModelValidationPolicy(
    fields={
        "employeeId": "employee_id",
        "name": "name",
        "email": "email",
        "department": "department",
        "designation": "designation",
        "contact": "contact",
        "branch": "branch",
        "status": "status",
        "joiningDate": "joining_date",
    },
    required_on_create={"employeeId", "name", "email", "department"},
    choices={"status": ACCOUNT_STATUSES},
)


def _check_unique(patch: dict, exclude_id: int | None = None) -> None:
    for key, label in (("employee_id", "Employee ID"), ("email", "Email")):
        if patch.get(key) is None:
            continue
        q = db.session.query(Employee.id).filter(getattr(Employee, key) == patch[key])
        if exclude_id is not None:
            q = q.filter(Employee.id != exclude_id)
        if q.first():
            raise ConflictError(f"{label} already exists")


def get_employee(employee_id: int) -> Employee:
    employee = db.session.get(Employee, employee_id)
    if employee is None:
        raise NotFoundError("Employee not found")
    return employee


def list_employees(
    *,
    page=None,
    limit=None,
    search: str | None = None,
    status: str | None = None,
    department: str | None = None,
) -> dict:
    page, limit = normalize_paging(page, limit)

    q = db.session.query(Employee)
    if search:
        pattern = contains_pattern(search)
        q = q.filter(db.or_(
            Employee.name.ilike(pattern, escape=LIKE_ESCAPE),
            Employee.email.ilike(pattern, escape=LIKE_ESCAPE),
            Employee.employee_id.ilike(pattern, escape=LIKE_ESCAPE),
        ))
    if status:
        q = q.filter(Employee.status == status)
    if department:
        q = q.filter(Employee.department == department)

    total = q.count()
    employees = (
        q.order_by(Employee.created_at.desc(), Employee.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {
        "employees": [e.to_dict() for e in employees],
        "total": total,
        "page": page,
        "pages": page_count(total, limit),
    }


def list_departments() -> list[str]:
    rows = (
        db.session.query(Employee.department)
        .filter(Employee.department.isnot(None), Employee.department != "")
        .distinct()
        .order_by(Employee.department.asc())
        .all()
    )
    return [r[0] for r in rows]


def create_employee(payload: dict) -> Employee:
    patch = validate_payload(model=Employee, payload=payload, policy=EMPLOYEE_POLICY, partial=False)
    enforce_rules_employee(patch)
    _check_unique(patch)

    employee = Employee(**patch)
    db.session.add(employee)
    db.session.flush()
    return employee


def update_employee(employee_id: int, payload: dict) -> Employee:
    employee = get_employee(employee_id)
    patch = validate_payload(model=Employee, payload=payload, policy=EMPLOYEE_POLICY, partial=True)
    enforce_rules_employee(patch)
    _check_unique(patch, exclude_id=employee.id)

    for key, value in patch.items():
        setattr(employee, key, value)
    db.session.flush()
    return employee


def delete_employee(employee_id: int) -> None:
    """
    Raises:
        ReferentialIntegrityError: the employee holds an assigned asset, has
            pending requests, or appears in history/requests at all
    """
    employee = get_employee(employee_id)

    held = assets_held_by(employee.id)
    if held:
        raise ReferentialIntegrityError(
            f"Cannot delete employee. {len(held)} assigned asset(s) must be returned first."
        )

    pending = (
        db.session.query(func.count(AssetRequest.id))
        .filter(AssetRequest.employee_id == employee.id, AssetRequest.status == REQUEST_STATUS_PENDING)
        .scalar()
    )
    if pending:
        raise ReferentialIntegrityError(
            f"Cannot delete employee. {pending} pending request(s) are open for this employee."
        )

    referenced = (
        db.session.query(AssetHistory.id).filter(AssetHistory.employee_id == employee.id).first()
        or db.session.query(AssetRequest.id).filter(AssetRequest.employee_id == employee.id).first()
    )
    if referenced:
        raise ReferentialIntegrityError(
            "Cannot delete employee with asset history. Set the status to inactive instead."
        )

    db.session.delete(employee)
    db.session.flush()
