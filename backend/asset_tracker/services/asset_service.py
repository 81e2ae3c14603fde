# backend/asset_tracker/services/asset_service.py
"""
Asset Registry Service

WHY: Assets carry the field-level invariants (unique tag/serial, enumerated
status/condition, a real category). This module owns those checks and the
paged search used by the inventory screen.

DESIGN:
- Functions only flush; the caller decides when to commit. The lifecycle
  service composes create_asset() into its own transaction.
- The registry never writes AssetHistory and never moves status, with one
  exception: a manual reset from "Under Repair" back to "Available".
"""
from __future__ import annotations

from ..extensions import db
from ..errors import InvalidStateError, NotFoundError
from ..models import Asset, AssetHistory, AssetRequest, Category, Employee
from ..models.assets import (
    ASSET_STATUSES,
    ASSET_STATUS_ASSIGNED,
    ASSET_STATUS_AVAILABLE,
    ASSET_STATUS_UNDER_REPAIR,
    CONDITIONS,
)
from ..validation import (
    LIKE_ESCAPE,
    contains_pattern,
    ConflictError,
    ModelValidationPolicy,
    ValidationError,
    enforce_rules_asset,
    validate_payload,
)

ASSET_POLICY = ModelValidationPolicy(
    fields={
        "assetTag": "asset_tag",
        "serialNumber": "serial_number",
        "categoryId": "category_id",
        "make": "make",
        "model": "model",
        "specifications": "specifications",
        "purchaseDate": "purchase_date",
        "purchasePrice": "purchase_price",
        "warrantyExpiry": "warranty_expiry",
        "vendor": "vendor",
        "branch": "branch",
        "location": "location",
        "status": "status",
        "condition": "condition",
        "notes": "notes",
    },
    required_on_create={"assetTag", "serialNumber", "categoryId", "make", "model"},
    choices={"status": ASSET_STATUSES, "condition": CONDITIONS},
)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def page_count(total: int, limit: int) -> int:
    return (total + limit - 1) // limit


def normalize_paging(page, limit, default_limit: int = DEFAULT_PAGE_SIZE) -> tuple[int, int]:
    """Clamp page/limit query values; bad input falls back to defaults."""
    try:
        page = int(page) if page not in (None, "") else 1
    except (TypeError, ValueError):
        raise ValidationError("page must be an integer")
    try:
        limit = int(limit) if limit not in (None, "") else default_limit
    except (TypeError, ValueError):
        raise ValidationError("limit must be an integer")
    return max(page, 1), min(max(limit, 1), MAX_PAGE_SIZE)


def _require_category(category_id: int) -> Category:
    category = db.session.get(Category, category_id)
    if category is None:
        raise ValidationError("Category does not exist")
    return category


def _check_unique(*, asset_tag: str | None, serial_number: str | None, exclude_id: int | None = None) -> None:
    if asset_tag is not None:
        q = db.session.query(Asset.id).filter(Asset.asset_tag == asset_tag)
        if exclude_id is not None:
            q = q.filter(Asset.id != exclude_id)
        if q.first():
            raise ConflictError("Asset tag already exists")

    if serial_number is not None:
        q = db.session.query(Asset.id).filter(Asset.serial_number == serial_number)
        if exclude_id is not None:
            q = q.filter(Asset.id != exclude_id)
        if q.first():
            raise ConflictError("Serial number already exists")


def get_asset(asset_id: int) -> Asset:
    asset = db.session.get(Asset, asset_id)
    if asset is None:
        raise NotFoundError("Asset not found")
    return asset


def serialize_asset(asset: Asset) -> dict:
    return asset.to_dict(category=db.session.get(Category, asset.category_id))


def create_asset(payload: dict, *, image_url: str | None = None) -> Asset:
    """
    Validate and insert an asset. Flushes, does not commit.

    Raises:
        ValidationError: missing/malformed fields or unknown category
        ConflictError: duplicate asset tag or serial number
    """
    patch = validate_payload(model=Asset, payload=payload, policy=ASSET_POLICY, partial=False)
    enforce_rules_asset(patch)

    # New stock always enters the registry as Available
    if patch.get("status") not in (None, ASSET_STATUS_AVAILABLE):
        raise InvalidStateError("New assets must start as Available")
    patch.pop("status", None)

    _require_category(patch["category_id"])
    _check_unique(asset_tag=patch["asset_tag"], serial_number=patch["serial_number"])

    asset = Asset(**patch)
    if image_url:
        asset.image_url = image_url
    db.session.add(asset)
    db.session.flush()
    return asset


def update_asset(asset_id: int, payload: dict, *, image_url: str | None = None) -> tuple[Asset, str | None]:
    """
    Apply a partial update. Flushes, does not commit.

    Returns (asset, replaced_image_url). The caller releases the replaced
    image only after the commit succeeds.
    """
    asset = get_asset(asset_id)
    patch = validate_payload(model=Asset, payload=payload, policy=ASSET_POLICY, partial=True)
    enforce_rules_asset(patch)

    new_status = patch.pop("status", None)
    if new_status is not None and new_status != asset.status:
        if not (asset.status == ASSET_STATUS_UNDER_REPAIR and new_status == ASSET_STATUS_AVAILABLE):
            raise InvalidStateError(
                "Status changes go through the asset-history endpoints "
                "(only Under Repair -> Available may be set directly)"
            )
        asset.status = new_status

    if "category_id" in patch:
        _require_category(patch["category_id"])
    _check_unique(
        asset_tag=patch.get("asset_tag"),
        serial_number=patch.get("serial_number"),
        exclude_id=asset.id,
    )

    for key, value in patch.items():
        setattr(asset, key, value)

    replaced_image = None
    if image_url:
        replaced_image = asset.image_url
        asset.image_url = image_url

    db.session.flush()
    return asset, replaced_image


def delete_asset(asset_id: int) -> str | None:
    """
    Remove an asset and its history. Flushes, does not commit.

    Returns the image url to release after commit.

    Raises:
        InvalidStateError: asset is currently Assigned
    """
    asset = get_asset(asset_id)
    if asset.status == ASSET_STATUS_ASSIGNED:
        raise InvalidStateError("Cannot delete an assigned asset. Please return it first.")

    image_url = asset.image_url
    # ON DELETE CASCADE is not enforced on every backend (SQLite without the pragma)
    db.session.query(AssetHistory).filter(AssetHistory.asset_id == asset.id).delete(synchronize_session=False)
    db.session.query(AssetRequest).filter(AssetRequest.assigned_asset_id == asset.id).update(
        {AssetRequest.assigned_asset_id: None}, synchronize_session=False
    )
    db.session.delete(asset)
    db.session.flush()
    return image_url


def list_assets(
    *,
    page=None,
    limit=None,
    search: str | None = None,
    status: str | None = None,
    category_id=None,
    branch: str | None = None,
) -> dict:
    """
    Paged asset search, newest first.

    search is a case-insensitive substring match over assetTag, serialNumber,
    make and model.
    """
    page, limit = normalize_paging(page, limit)

    q = db.session.query(Asset, Category).outerjoin(Category, Category.id == Asset.category_id)

    if search:
        pattern = contains_pattern(search)
        q = q.filter(db.or_(
            Asset.asset_tag.ilike(pattern, escape=LIKE_ESCAPE),
            Asset.serial_number.ilike(pattern, escape=LIKE_ESCAPE),
            Asset.make.ilike(pattern, escape=LIKE_ESCAPE),
            Asset.model.ilike(pattern, escape=LIKE_ESCAPE),
        ))
    if status:
        q = q.filter(Asset.status == status)
    if category_id not in (None, ""):
        try:
            q = q.filter(Asset.category_id == int(category_id))
        except (TypeError, ValueError):
            raise ValidationError("categoryId must be an integer")
    if branch:
        q = q.filter(Asset.branch == branch)

    total = q.count()
    rows = (
        q.order_by(Asset.created_at.desc(), Asset.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return {
        "assets": [asset.to_dict(category=category) for asset, category in rows],
        "total": total,
        "page": page,
        "pages": page_count(total, limit),
    }


def find_employee_for_email(email: str | None) -> Employee | None:
    if not email:
        return None
    return db.session.query(Employee).filter(db.func.lower(Employee.email) == email.strip().lower()).first()


def assets_held_by(employee_id: int) -> list[dict]:
    """
    Assigned assets whose most recent Issue record names this employee.
    """
    latest_issue = (
        db.session.query(
            AssetHistory.asset_id.label("asset_id"),
            db.func.max(AssetHistory.id).label("history_id"),
        )
        .filter(AssetHistory.action == "Issue")
        .group_by(AssetHistory.asset_id)
        .subquery()
    )

    rows = (
        db.session.query(Asset, Category)
        .join(latest_issue, latest_issue.c.asset_id == Asset.id)
        .join(AssetHistory, AssetHistory.id == latest_issue.c.history_id)
        .outerjoin(Category, Category.id == Asset.category_id)
        .filter(Asset.status == ASSET_STATUS_ASSIGNED, AssetHistory.employee_id == employee_id)
        .order_by(Asset.created_at.desc(), Asset.id.desc())
        .all()
    )
    return [asset.to_dict(category=category) for asset, category in rows]


def my_assets(user_email: str | None) -> list[dict]:
    employee = find_employee_for_email(user_email)
    if employee is None:
        return []
    return assets_held_by(employee.id)
