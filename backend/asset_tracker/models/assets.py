from __future__ import annotations

from ..extensions import db
from asset_tracker.time_utils import to_utc_z, to_iso_date
from .auth import ACCOUNT_STATUSES

ASSET_STATUS_AVAILABLE = "Available"
ASSET_STATUS_ASSIGNED = "Assigned"
ASSET_STATUS_UNDER_REPAIR = "Under Repair"
ASSET_STATUS_SCRAPPED = "Scrapped"
ASSET_STATUSES = (
    ASSET_STATUS_AVAILABLE,
    ASSET_STATUS_ASSIGNED,
    ASSET_STATUS_UNDER_REPAIR,
    ASSET_STATUS_SCRAPPED,
)

CONDITIONS = ("Excellent", "Good", "Fair", "Poor")

HISTORY_ACTIONS = ("Purchase", "Issue", "Return", "Repair", "Scrap", "Transfer")


def _money(value) -> float:
    return float(value) if value is not None else 0.0


class Category(db.Model):
    """Asset categories (Laptop, Monitor, ...). Codes are stored uppercase."""
    __tablename__ = "categories"
    __table_args__ = (
        db.CheckConstraint(f"status IN {ACCOUNT_STATUSES}", name="ck_categories_status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, unique=True)
    code = db.Column(db.String(10), nullable=False, unique=True)
    description = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(16), nullable=False, default="active")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def to_summary(self) -> dict:
        return {"id": self.id, "name": self.name, "code": self.code}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "code": self.code,
            "description": self.description,
            "status": self.status,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }


class Asset(db.Model):
    """
    A trackable physical item.

    STATUS is owned by the lifecycle service (issue / return / scrap). The
    registry may only reset "Under Repair" back to "Available".

    version_id is an optimistic lock: two sessions that both read the same
    row version cannot both commit a status change.
    """
    __tablename__ = "assets"
    __table_args__ = (
        db.CheckConstraint(f"status IN {ASSET_STATUSES}", name="ck_assets_status"),
        db.CheckConstraint(f"condition IN {CONDITIONS}", name="ck_assets_condition"),
        db.Index("ix_assets_status", "status"),
        db.Index("ix_assets_branch", "branch"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    asset_tag = db.Column(db.String(64), nullable=False, unique=True)
    serial_number = db.Column(db.String(128), nullable=False, unique=True)

    # ON DELETE RESTRICT: categories in use cannot be deleted
    category_id = db.Column(
        db.Integer,
        db.ForeignKey("categories.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    make = db.Column(db.String(100), nullable=False)
    model = db.Column(db.String(100), nullable=False)
    specifications = db.Column(db.Text, nullable=True)

    purchase_date = db.Column(db.Date, nullable=True)
    purchase_price = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    warranty_expiry = db.Column(db.Date, nullable=True)

    vendor = db.Column(db.String(255), nullable=True)
    branch = db.Column(db.String(100), nullable=False, default="Head Office")
    location = db.Column(db.String(255), nullable=True)

    status = db.Column(db.String(16), nullable=False, default=ASSET_STATUS_AVAILABLE)
    condition = db.Column(db.String(16), nullable=False, default="Good")

    # Public path under /uploads, e.g. "/uploads/3f2a..._laptop.png"
    image_url = db.Column(db.String(500), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Asset id={self.id} tag={self.asset_tag!r} status={self.status!r}>"

    def to_summary(self) -> dict:
        return {
            "id": self.id,
            "assetTag": self.asset_tag,
            "serialNumber": self.serial_number,
            "make": self.make,
            "model": self.model,
        }

    def to_dict(self, category: "Category | None" = None) -> dict:
        data = {
            "id": self.id,
            "assetTag": self.asset_tag,
            "serialNumber": self.serial_number,
            "categoryId": self.category_id,
            "make": self.make,
            "model": self.model,
            "specifications": self.specifications,
            "purchaseDate": to_iso_date(self.purchase_date),
            "purchasePrice": _money(self.purchase_price),
            "warrantyExpiry": to_iso_date(self.warranty_expiry),
            "vendor": self.vendor,
            "branch": self.branch,
            "location": self.location,
            "status": self.status,
            "condition": self.condition,
            "imageUrl": self.image_url,
            "notes": self.notes,
            "versionId": self.version_id,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }
        if category is not None:
            data["category"] = category.to_summary()
        return data


class AssetHistory(db.Model):
    """
    Append-only lifecycle log.

    INVARIANTS:
    - One row per lifecycle transition, written in the same transaction as the
      asset status change it records.
    - Rows are never updated. They are removed only together with their asset.
    - performed_by is the acting user; employee_id is the holder (Issue/Return).
    """
    __tablename__ = "asset_history"
    __table_args__ = (
        db.CheckConstraint(f"action IN {HISTORY_ACTIONS}", name="ck_asset_history_action"),
        db.CheckConstraint(
            f"condition IS NULL OR condition IN {CONDITIONS}",
            name="ck_asset_history_condition",
        ),
        db.Index("ix_asset_history_asset_date", "asset_id", "action_date"),
        db.Index("ix_asset_history_employee", "employee_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    asset_id = db.Column(
        db.Integer,
        db.ForeignKey("assets.id", ondelete="CASCADE"),
        nullable=False,
    )
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=True)
    action = db.Column(db.String(16), nullable=False)
    action_date = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    condition = db.Column(db.String(16), nullable=True)
    reason = db.Column(db.Text, nullable=True)
    notes = db.Column(db.Text, nullable=True)
    performed_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self, *, asset=None, employee=None, performer=None) -> dict:
        """Serialize; related rows are passed in explicitly by the loader."""
        data = {
            "id": self.id,
            "assetId": self.asset_id,
            "employeeId": self.employee_id,
            "action": self.action,
            "actionDate": to_utc_z(self.action_date),
            "condition": self.condition,
            "reason": self.reason,
            "notes": self.notes,
            "performedBy": self.performed_by,
            "createdAt": to_utc_z(self.created_at),
        }
        if asset is not None:
            data["asset"] = asset
        data["employee"] = employee
        data["performer"] = performer
        return data
