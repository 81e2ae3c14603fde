# Overview: Flask API routes for asset lifecycle transitions and history queries.

# backend/asset_tracker/routes/asset_history.py
"""
Asset lifecycle API routes.

Each transition endpoint runs one transaction in lifecycle_service and
answers with the new history record, joined with its asset, employee and
performer.
"""
from flask import Blueprint, Response, request, jsonify, g, current_app

from ..decorators import require_auth, require_role
from ..errors import AssetTrackerError
from ..responses import json_body, domain_error, internal_error
from ..services import lifecycle_service, pdf_service
from ..validation import required_id


history_bp = Blueprint("asset_history", __name__, url_prefix="/api/asset-history")


@history_bp.post("/issue")
@require_auth
@require_role("Admin", "Manager")
def issue_asset():
    """
    Request body:
    {
        "assetId": int,
        "employeeId": int,
        "condition": str (optional),
        "notes": str (optional)
    }

    Returns:
        201: Asset issued
        400: Asset not Available / employee inactive / bad input
        404: Asset or employee not found
    """
    try:
        data = json_body()
        record = lifecycle_service.issue_asset(
            required_id(data, "assetId"),
            required_id(data, "employeeId"),
            performed_by=g.current_user.id,
            condition=data.get("condition"),
            notes=data.get("notes"),
        )
        current_app.logger.info(
            "asset issued asset_id=%s employee_id=%s by user_id=%s",
            record["assetId"], record["employeeId"], g.current_user.id,
        )
        return jsonify(record), 201
    except AssetTrackerError as e:
        return domain_error(e)
    except Exception:
        return internal_error("Failed to issue asset")


@history_bp.post("/return")
@require_auth
@require_role("Admin", "Manager")
def return_asset():
    """
    Request body:
    {
        "assetId": int,
        "condition": str (optional),
        "reason": str (optional),
        "notes": str (optional)
    }
    """
    try:
        data = json_body()
        record = lifecycle_service.return_asset(
            required_id(data, "assetId"),
            performed_by=g.current_user.id,
            condition=data.get("condition"),
            reason=data.get("reason"),
            notes=data.get("notes"),
        )
        current_app.logger.info(
            "asset returned asset_id=%s condition=%s by user_id=%s",
            record["assetId"], record["condition"], g.current_user.id,
        )
        return jsonify(record), 201
    except AssetTrackerError as e:
        return domain_error(e)
    except Exception:
        return internal_error("Failed to return asset")


@history_bp.post("/scrap")
@require_auth
@require_role("Admin")
def scrap_asset():
    """
    Request body:
    {
        "assetId": int,
        "reason": str,
        "notes": str (optional)
    }
    """
    try:
        data = json_body()
        record = lifecycle_service.scrap_asset(
            required_id(data, "assetId"),
            reason=data.get("reason"),
            performed_by=g.current_user.id,
            notes=data.get("notes"),
        )
        current_app.logger.info(
            "asset scrapped asset_id=%s by user_id=%s", record["assetId"], g.current_user.id,
        )
        return jsonify(record), 201
    except AssetTrackerError as e:
        return domain_error(e)
    except Exception:
        return internal_error("Failed to scrap asset")


@history_bp.get("")
@require_auth
def list_history():
    """
    Query params: assetId, employeeId, action, startDate, endDate, page, limit (default 20).

    Returns {history, total, page, pages}.
    """
    try:
        result = lifecycle_service.list_history(
            page=request.args.get("page"),
            limit=request.args.get("limit"),
            asset_id=request.args.get("assetId"),
            employee_id=request.args.get("employeeId"),
            action=request.args.get("action"),
            start_date=request.args.get("startDate"),
            end_date=request.args.get("endDate"),
        )
        return jsonify(result), 200
    except AssetTrackerError as e:
        return domain_error(e)
    except Exception:
        return internal_error("Failed to list asset history")


@history_bp.get("/timeline/<int:asset_id>")
@require_auth
def asset_timeline(asset_id: int):
    try:
        return jsonify(lifecycle_service.timeline(asset_id)), 200
    except AssetTrackerError as e:
        return domain_error(e)
    except Exception:
        return internal_error("Failed to load asset timeline")


@history_bp.get("/report/pdf")
@require_auth
def history_report_pdf():
    """Query params: assetId, startDate, endDate. Returns a PDF attachment."""
    try:
        records = lifecycle_service.report_history(
            asset_id=request.args.get("assetId"),
            start_date=request.args.get("startDate"),
            end_date=request.args.get("endDate"),
        )
        pdf = pdf_service.build_history_report(records)
        return Response(
            pdf,
            mimetype="application/pdf",
            headers={"Content-Disposition": "attachment; filename=asset-history-report.pdf"},
        )
    except AssetTrackerError as e:
        return domain_error(e)
    except Exception:
        return internal_error("Failed to generate history report")
