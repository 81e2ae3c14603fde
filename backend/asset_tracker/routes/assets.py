# Overview: Flask API routes for the asset registry; parses input and returns JSON responses.

# backend/asset_tracker/routes/assets.py
"""
Asset registry API routes.

Creation goes through the lifecycle service so the Purchase record lands in
the same transaction. Updates and deletes are plain registry writes.

Image handling:
- a newly saved upload is deleted again if the request fails
- a replaced or orphaned image is deleted only after the commit succeeds
"""
from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_auth, require_role
from ..errors import AssetTrackerError
from ..responses import json_body, domain_error, internal_error
from ..services import asset_service, lifecycle_service, reporting_service, storage_service
from ..services.concurrency import run_in_transaction


assets_bp = Blueprint("assets", __name__, url_prefix="/api/assets")


def _asset_payload() -> dict:
    """JSON body, or multipart form fields when an image is attached."""
    if request.mimetype == "multipart/form-data" or request.form:
        return {k: v for k, v in request.form.items() if k != "image"}
    return json_body()


@assets_bp.get("")
@require_auth
def list_assets():
    """
    Query params: page, limit (default 10), search, status, categoryId, branch.

    Returns {assets, total, page, pages}.
    """
    try:
        result = asset_service.list_assets(
            page=request.args.get("page"),
            limit=request.args.get("limit"),
            search=request.args.get("search"),
            status=request.args.get("status"),
            category_id=request.args.get("categoryId"),
            branch=request.args.get("branch"),
        )
        return jsonify(result), 200
    except AssetTrackerError as e:
        return domain_error(e)
    except Exception:
        return internal_error("Failed to list assets")


@assets_bp.get("/stock/summary")
@require_auth
def stock_summary():
    try:
        return jsonify(reporting_service.stock_summary()), 200
    except Exception:
        return internal_error("Failed to build stock summary")


@assets_bp.get("/my-assets")
@require_auth
def my_assets():
    """Assets currently issued to the Employee record matching the caller's email."""
    try:
        return jsonify(asset_service.my_assets(g.current_user.email)), 200
    except Exception:
        return internal_error("Failed to list my assets")


@assets_bp.get("/<int:asset_id>")
@require_auth
def get_asset(asset_id: int):
    try:
        return jsonify(asset_service.serialize_asset(asset_service.get_asset(asset_id))), 200
    except AssetTrackerError as e:
        return domain_error(e)
    except Exception:
        return internal_error("Failed to fetch asset")


@assets_bp.post("")
@require_auth
@require_role("Admin", "Manager")
def create_asset():
    """
    Register a new asset (JSON or multipart with an `image` file).

    Returns:
        201: Asset created, Purchase history recorded
        400: Validation error or duplicate tag/serial
    """
    # Body parsing stays outside the try: an oversized upload must surface as 413
    payload = _asset_payload()
    upload = request.files.get("image")

    image_url = None
    try:
        image_url = storage_service.save_image(upload)
        asset = lifecycle_service.register_asset(
            payload,
            performed_by=g.current_user.id,
            image_url=image_url,
        )
        current_app.logger.info("asset registered id=%s tag=%s", asset["id"], asset["assetTag"])
        return jsonify(asset), 201
    except AssetTrackerError as e:
        storage_service.release_image(image_url)
        return domain_error(e)
    except Exception:
        storage_service.release_image(image_url)
        return internal_error("Failed to create asset")


@assets_bp.put("/<int:asset_id>")
@require_auth
@require_role("Admin", "Manager")
def update_asset(asset_id: int):
    # Body parsing stays outside the try: an oversized upload must surface as 413
    payload = _asset_payload()
    upload = request.files.get("image")

    image_url = None
    try:
        image_url = storage_service.save_image(upload)

        def _work():
            asset, replaced = asset_service.update_asset(asset_id, payload, image_url=image_url)
            return asset.id, replaced

        _, replaced_image = run_in_transaction(_work)
        storage_service.release_image(replaced_image)

        return jsonify(asset_service.serialize_asset(asset_service.get_asset(asset_id))), 200
    except AssetTrackerError as e:
        storage_service.release_image(image_url)
        return domain_error(e)
    except Exception:
        storage_service.release_image(image_url)
        return internal_error("Failed to update asset")


@assets_bp.delete("/<int:asset_id>")
@require_auth
@require_role("Admin")
def delete_asset(asset_id: int):
    """
    Returns:
        200: Asset and its history deleted
        400: Asset is currently assigned
        404: Asset not found
    """
    try:
        image_url = run_in_transaction(lambda: asset_service.delete_asset(asset_id))
        storage_service.release_image(image_url)
        current_app.logger.info("asset deleted id=%s", asset_id)
        return jsonify({"message": "Asset deleted successfully"}), 200
    except AssetTrackerError as e:
        return domain_error(e)
    except Exception:
        return internal_error("Failed to delete asset")
