# Overview: Flask API routes for employee asset requests and their review.

# backend/asset_tracker/routes/asset_requests.py
from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_role
from ..errors import AssetTrackerError, ValidationError
from ..responses import json_body, domain_error, internal_error
from ..services import request_service


requests_bp = Blueprint("asset_requests", __name__, url_prefix="/api/asset-requests")


@requests_bp.post("")
@require_auth
@require_role("Employee")
def create_request():
    """
    Request body:
    {
        "assetType": str,
        "justification": str,
        "priority": "Low" | "Medium" | "High" | "Urgent" (optional, default Medium),
        "categoryId": int (optional)
    }
    """
    try:
        return jsonify(request_service.create_request(g.current_user, json_body())), 201
    except AssetTrackerError as e:
        return domain_error(e)
    except Exception:
        return internal_error("Failed to create asset request")


@requests_bp.get("")
@require_auth
def list_requests():
    """Employees see their own requests; Admin and Manager see all."""
    try:
        return jsonify(request_service.list_requests(g.current_user, status=request.args.get("status"))), 200
    except AssetTrackerError as e:
        return domain_error(e)
    except Exception:
        return internal_error("Failed to list asset requests")


@requests_bp.get("/pending/count")
@require_auth
@require_role("Admin", "Manager")
def pending_count():
    try:
        return jsonify({"count": request_service.pending_count()}), 200
    except Exception:
        return internal_error("Failed to count pending requests")


@requests_bp.get("/<int:request_id>")
@require_auth
def get_request(request_id: int):
    try:
        return jsonify(request_service.get_request(g.current_user, request_id)), 200
    except AssetTrackerError as e:
        return domain_error(e)
    except Exception:
        return internal_error("Failed to fetch asset request")


@requests_bp.patch("/<int:request_id>/review")
@require_auth
@require_role("Admin", "Manager")
def review_request(request_id: int):
    """
    Request body:
    {
        "status": "Approved" | "Rejected" | "Fulfilled",
        "reviewNotes": str (optional),
        "assignedAssetId": int (optional)
    }

    Returns:
        200: Request reviewed
        400: Bad outcome, unknown asset, or request already reviewed
        404: Request not found
    """
    try:
        data = json_body()
        assigned = data.get("assignedAssetId")
        if assigned in ("", None):
            assigned = None
        elif isinstance(assigned, bool) or not str(assigned).strip().isdigit():
            raise ValidationError("assignedAssetId must be an integer id")
        else:
            assigned = int(assigned)

        result = request_service.review_request(
            request_id,
            status=data.get("status"),
            reviewer_id=g.current_user.id,
            review_notes=data.get("reviewNotes"),
            assigned_asset_id=assigned,
        )
        return jsonify(result), 200
    except AssetTrackerError as e:
        return domain_error(e)
    except Exception:
        return internal_error("Failed to review asset request")


@requests_bp.delete("/<int:request_id>")
@require_auth
def delete_request(request_id: int):
    try:
        request_service.delete_request(g.current_user, request_id)
        return jsonify({"message": "Asset request deleted successfully"}), 200
    except AssetTrackerError as e:
        return domain_error(e)
    except Exception:
        return internal_error("Failed to delete asset request")
