# Overview: Service-layer operations for the asset lifecycle; the only writer of Asset.status and AssetHistory.

"""
Asset Lifecycle Service

================================================================================
PURPOSE: Move assets between states and record every move in asset_history
================================================================================

STATE MACHINE:
    Available    --issue(employee)-->  Assigned
    Assigned     --return-->           Available | Under Repair
    Available    --scrap-->            Scrapped
    Under Repair --scrap-->            Scrapped

    Scrapped is terminal. "Under Repair" -> "Available" is a manual registry
    reset (asset_service.update_asset), not a lifecycle transition.

RULES:
1. Every transition writes exactly one AssetHistory row in the same
   transaction as the status change. Both commit or neither does.
2. Preconditions are checked against a row read FOR UPDATE; the asset's
   version_id makes the losing writer of a race fail with StaleDataError,
   which run_in_transaction retries against the committed state.
3. A return goes to "Under Repair" when condition is Poor or the free-text
   reason contains "repair" (case-insensitive substring).
4. Role checks happen in the routes; nothing here depends on the caller's role.

================================================================================
"""

from __future__ import annotations

from datetime import datetime, time

from ..extensions import db
from ..errors import InvalidStateError, NotFoundError
from ..models import Asset, AssetHistory, Employee, User
from ..models.assets import (
    ASSET_STATUS_ASSIGNED,
    ASSET_STATUS_AVAILABLE,
    ASSET_STATUS_SCRAPPED,
    ASSET_STATUS_UNDER_REPAIR,
    CONDITIONS,
    HISTORY_ACTIONS,
)
from ..validation import ValidationError, optional_condition, optional_text
from . import asset_service
from .concurrency import lock_for_update, run_in_transaction
from asset_tracker.time_utils import parse_iso_datetime, utcnow

DEFAULT_HISTORY_PAGE_SIZE = 20
PURCHASE_NOTE = "Asset purchased and added to inventory"


def decide_return_status(condition: str | None, reason: str | None) -> str:
    """Status an Assigned asset lands in when it comes back."""
    if condition == "Poor" or "repair" in (reason or "").lower():
        return ASSET_STATUS_UNDER_REPAIR
    return ASSET_STATUS_AVAILABLE


def _locked_asset(asset_id: int) -> Asset:
    asset = lock_for_update(db.session.query(Asset).filter(Asset.id == asset_id)).first()
    if asset is None:
        raise NotFoundError("Asset not found")
    return asset


def _append_history(asset: Asset, action: str, *, performed_by: int | None, **fields) -> AssetHistory:
    entry = AssetHistory(
        asset_id=asset.id,
        action=action,
        action_date=fields.pop("action_date", None) or utcnow(),
        performed_by=performed_by,
        **fields,
    )
    db.session.add(entry)
    db.session.flush()
    return entry


def last_issue_employee_id(asset_id: int) -> int | None:
    """Holder named by the most recent Issue record, or None."""
    row = (
        db.session.query(AssetHistory.employee_id)
        .filter(AssetHistory.asset_id == asset_id, AssetHistory.action == "Issue")
        .order_by(AssetHistory.action_date.desc(), AssetHistory.id.desc())
        .first()
    )
    return row[0] if row else None


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

def register_asset(payload: dict, *, performed_by: int | None, image_url: str | None = None) -> dict:
    """
    Insert a new asset and its Purchase record as one unit.

    The Purchase actionDate is the purchase date (midnight UTC) when given,
    capped at now so the record never sorts after later transitions.
    """
    def _work() -> int:
        asset = asset_service.create_asset(payload, image_url=image_url)
        now = utcnow()
        action_date = now
        if asset.purchase_date is not None:
            action_date = min(datetime.combine(asset.purchase_date, time.min), now)
        _append_history(
            asset,
            "Purchase",
            performed_by=performed_by,
            action_date=action_date,
            condition=asset.condition,
            notes=PURCHASE_NOTE,
        )
        return asset.id

    asset_id = run_in_transaction(_work)
    return asset_service.serialize_asset(asset_service.get_asset(asset_id))


def issue_asset(
    asset_id: int,
    employee_id: int,
    *,
    performed_by: int | None,
    condition: str | None = None,
    notes: str | None = None,
) -> dict:
    """
    Available -> Assigned.

    Raises:
        NotFoundError: unknown asset or employee
        InvalidStateError: asset not Available, or employee inactive
    """
    condition = optional_condition(condition, CONDITIONS)
    notes = optional_text(notes, "notes")

    def _work() -> int:
        asset = _locked_asset(asset_id)
        if asset.status != ASSET_STATUS_AVAILABLE:
            raise InvalidStateError(f"Asset is not available for issue (current status: {asset.status})")
        employee = db.session.get(Employee, employee_id)
        if employee is None:
            raise NotFoundError("Employee not found")
        if not employee.is_active:
            raise InvalidStateError("Cannot issue asset to an inactive employee")

        asset.status = ASSET_STATUS_ASSIGNED
        if condition:
            asset.condition = condition

        entry = _append_history(
            asset,
            "Issue",
            performed_by=performed_by,
            employee_id=employee.id,
            condition=condition or asset.condition,
            notes=notes,
        )
        return entry.id

    return get_history_record(run_in_transaction(_work))


def return_asset(
    asset_id: int,
    *,
    performed_by: int | None,
    condition: str | None = None,
    reason: str | None = None,
    notes: str | None = None,
) -> dict:
    """
    Assigned -> Available | Under Repair.

    The Return record is attributed to the holder named by the latest Issue
    record (None if the asset was never issued through this service).
    """
    condition = optional_condition(condition, CONDITIONS)
    reason = optional_text(reason, "reason")
    notes = optional_text(notes, "notes")

    def _work() -> int:
        asset = _locked_asset(asset_id)
        if asset.status != ASSET_STATUS_ASSIGNED:
            raise InvalidStateError(f"Asset is not currently assigned (current status: {asset.status})")

        asset.status = decide_return_status(condition, reason)
        if condition:
            asset.condition = condition

        entry = _append_history(
            asset,
            "Return",
            performed_by=performed_by,
            employee_id=last_issue_employee_id(asset.id),
            condition=condition or asset.condition,
            reason=reason,
            notes=notes,
        )
        return entry.id

    return get_history_record(run_in_transaction(_work))


def scrap_asset(
    asset_id: int,
    *,
    reason: str,
    performed_by: int | None,
    notes: str | None = None,
) -> dict:
    """
    Available | Under Repair -> Scrapped. Condition is forced to Poor.

    Raises:
        ValidationError: blank reason
        InvalidStateError: asset is Assigned or already Scrapped
    """
    reason = optional_text(reason, "reason")
    notes = optional_text(notes, "notes")
    if not reason:
        raise ValidationError("reason is required")

    def _work() -> int:
        asset = _locked_asset(asset_id)
        if asset.status == ASSET_STATUS_ASSIGNED:
            raise InvalidStateError("Cannot scrap an assigned asset. Please return it first.")
        if asset.status == ASSET_STATUS_SCRAPPED:
            raise InvalidStateError("Asset is already scrapped")

        asset.status = ASSET_STATUS_SCRAPPED
        asset.condition = "Poor"

        entry = _append_history(
            asset,
            "Scrap",
            performed_by=performed_by,
            condition="Poor",
            reason=reason,
            notes=notes,
        )
        return entry.id

    return get_history_record(run_in_transaction(_work))


# ---------------------------------------------------------------------------
# Read side: explicit joins, no lazy loading
# ---------------------------------------------------------------------------

def _history_query():
    return (
        db.session.query(AssetHistory, Asset, Employee, User)
        .outerjoin(Asset, Asset.id == AssetHistory.asset_id)
        .outerjoin(Employee, Employee.id == AssetHistory.employee_id)
        .outerjoin(User, User.id == AssetHistory.performed_by)
    )


def _serialize_row(row) -> dict:
    entry, asset, employee, performer = row
    return entry.to_dict(
        asset=asset.to_summary() if asset is not None else None,
        employee=employee.to_summary() if employee is not None else None,
        performer=performer.to_summary() if performer is not None else None,
    )


def get_history_record(history_id: int) -> dict:
    row = _history_query().filter(AssetHistory.id == history_id).first()
    if row is None:
        raise NotFoundError("History record not found")
    return _serialize_row(row)


def _int_filter(value, wire_name: str) -> int | None:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{wire_name} must be an integer")


def _date_filter(value, wire_name: str, *, end_of_day: bool = False) -> datetime | None:
    try:
        return parse_iso_datetime(value, end_of_day=end_of_day)
    except ValueError:
        raise ValidationError(f"{wire_name} must be an ISO-8601 date or datetime")


def _filtered_history(*, asset_id=None, employee_id=None, action=None, start_date=None, end_date=None):
    q = _history_query()

    asset_id = _int_filter(asset_id, "assetId")
    if asset_id is not None:
        q = q.filter(AssetHistory.asset_id == asset_id)

    employee_id = _int_filter(employee_id, "employeeId")
    if employee_id is not None:
        q = q.filter(AssetHistory.employee_id == employee_id)

    if action:
        if action not in HISTORY_ACTIONS:
            raise ValidationError(f"action must be one of: {', '.join(HISTORY_ACTIONS)}")
        q = q.filter(AssetHistory.action == action)

    start = _date_filter(start_date, "startDate")
    end = _date_filter(end_date, "endDate", end_of_day=True)
    if start is not None:
        q = q.filter(AssetHistory.action_date >= start)
    if end is not None:
        q = q.filter(AssetHistory.action_date <= end)

    return q


def list_history(*, page=None, limit=None, **filters) -> dict:
    """Paged, filtered history, newest first."""
    page, limit = asset_service.normalize_paging(page, limit, default_limit=DEFAULT_HISTORY_PAGE_SIZE)
    q = _filtered_history(**filters)

    total = q.count()
    rows = (
        q.order_by(AssetHistory.action_date.desc(), AssetHistory.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {
        "history": [_serialize_row(r) for r in rows],
        "total": total,
        "page": page,
        "pages": asset_service.page_count(total, limit),
    }


def report_history(*, asset_id=None, start_date=None, end_date=None) -> list[dict]:
    """Unpaged history for the PDF report."""
    q = _filtered_history(asset_id=asset_id, start_date=start_date, end_date=end_date)
    rows = q.order_by(AssetHistory.action_date.desc(), AssetHistory.id.desc()).all()
    return [_serialize_row(r) for r in rows]


def timeline(asset_id: int) -> list[dict]:
    """Every history record of one asset, most recent first."""
    asset_service.get_asset(asset_id)
    rows = (
        _history_query()
        .filter(AssetHistory.asset_id == asset_id)
        .order_by(AssetHistory.action_date.desc(), AssetHistory.id.desc())
        .all()
    )
    return [_serialize_row(r) for r in rows]
