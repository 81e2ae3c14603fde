# backend/asset_tracker/routes/categories.py
from flask import Blueprint, request, jsonify

from ..decorators import require_auth, require_role
from ..errors import AssetTrackerError
from ..responses import json_body, domain_error, internal_error
from ..services import category_service
from ..services.concurrency import run_in_transaction


categories_bp = Blueprint("categories", __name__, url_prefix="/api/categories")


@categories_bp.get("")
@require_auth
def list_categories():
    try:
        return jsonify(category_service.list_categories(
            status=request.args.get("status"),
            search=request.args.get("search"),
        )), 200
    except Exception:
        return internal_error("Failed to list categories")


@categories_bp.get("/<int:category_id>")
@require_auth
def get_category(category_id: int):
    try:
        return jsonify(category_service.serialize_category(category_service.get_category(category_id))), 200
    except AssetTrackerError as e:
        return domain_error(e)
    except Exception:
        return internal_error("Failed to fetch category")


@categories_bp.post("")
@require_auth
@require_role("Admin", "Manager")
def create_category():
    try:
        data = json_body()
        category_id = run_in_transaction(lambda: category_service.create_category(data).id)
        return jsonify(category_service.serialize_category(category_service.get_category(category_id))), 201
    except AssetTrackerError as e:
        return domain_error(e)
    except Exception:
        return internal_error("Failed to create category")


@categories_bp.put("/<int:category_id>")
@require_auth
@require_role("Admin", "Manager")
def update_category(category_id: int):
    try:
        data = json_body()
        run_in_transaction(lambda: category_service.update_category(category_id, data).id)
        return jsonify(category_service.serialize_category(category_service.get_category(category_id))), 200
    except AssetTrackerError as e:
        return domain_error(e)
    except Exception:
        return internal_error("Failed to update category")


@categories_bp.delete("/<int:category_id>")
@require_auth
@require_role("Admin")
def delete_category(category_id: int):
    """
    Returns:
        200: Category deleted
        400: Category still has assets
        404: Category not found
    """
    try:
        run_in_transaction(lambda: category_service.delete_category(category_id))
        return jsonify({"message": "Category deleted successfully"}), 200
    except AssetTrackerError as e:
        return domain_error(e)
    except Exception:
        return internal_error("Failed to delete category")
