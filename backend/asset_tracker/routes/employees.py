# backend/asset_tracker/routes/employees.py
from flask import Blueprint, request, jsonify

from ..decorators import require_auth, require_role
from ..errors import AssetTrackerError
from ..responses import json_body, domain_error, internal_error
from ..services import employee_service
from ..services.concurrency import run_in_transaction


employees_bp = Blueprint("employees", __name__, url_prefix="/api/employees")


@employees_bp.get("")
@require_auth
def list_employees():
    """
    Query params: page, limit (default 10), search, status, department.

    Returns {employees, total, page, pages}.
    """
    try:
        result = employee_service.list_employees(
            page=request.args.get("page"),
            limit=request.args.get("limit"),
            search=request.args.get("search"),
            status=request.args.get("status"),
            department=request.args.get("department"),
        )
        return jsonify(result), 200
    except AssetTrackerError as e:
        return domain_error(e)
    except Exception:
        return internal_error("Failed to list employees")


@employees_bp.get("/departments/list")
@require_auth
def list_departments():
    try:
        return jsonify(employee_service.list_departments()), 200
    except Exception:
        return internal_error("Failed to list departments")


@employees_bp.get("/<int:employee_id>")
@require_auth
def get_employee(employee_id: int):
    try:
        return jsonify(employee_service.get_employee(employee_id).to_dict()), 200
    except AssetTrackerError as e:
        return domain_error(e)
    except Exception:
        return internal_error("Failed to fetch employee")


@employees_bp.post("")
@require_auth
@require_role("Admin", "Manager")
def create_employee():
    try:
        data = json_body()
        employee_id = run_in_transaction(lambda: employee_service.create_employee(data).id)
        return jsonify(employee_service.get_employee(employee_id).to_dict()), 201
    except AssetTrackerError as e:
        return domain_error(e)
    except Exception:
        return internal_error("Failed to create employee")


@employees_bp.put("/<int:employee_id>")
@require_auth
@require_role("Admin", "Manager")
def update_employee(employee_id: int):
    try:
        data = json_body()
        run_in_transaction(lambda: employee_service.update_employee(employee_id, data).id)
        return jsonify(employee_service.get_employee(employee_id).to_dict()), 200
    except AssetTrackerError as e:
        return domain_error(e)
    except Exception:
        return internal_error("Failed to update employee")


@employees_bp.delete("/<int:employee_id>")
@require_auth
@require_role("Admin")
def delete_employee(employee_id: int):
    try:
        run_in_transaction(lambda: employee_service.delete_employee(employee_id))
        return jsonify({"message": "Employee deleted successfully"}), 200
    except AssetTrackerError as e:
        return domain_error(e)
    except Exception:
        return internal_error("Failed to delete employee")
