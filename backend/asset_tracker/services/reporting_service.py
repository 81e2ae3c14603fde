# Overview: Service-layer operations for reporting; stock aggregates over the asset registry.

from __future__ import annotations

from sqlalchemy import func

from asset_tracker.extensions import db
from asset_tracker.models import Asset, Category
from asset_tracker.models.assets import ASSET_STATUS_ASSIGNED, ASSET_STATUS_AVAILABLE


def _money(value) -> float:
    return round(float(value or 0), 2)


def stock_summary() -> dict:
    """
    Counts and purchase-value sums over every asset (scrapped included).

    Sums are 0 on an empty registry. Percentages are left to the caller.
    """
    total_assets, total_value = db.session.query(
        func.count(Asset.id),
        func.coalesce(func.sum(Asset.purchase_price), 0),
    ).one()

    by_status_rows = (
        db.session.query(Asset.status, func.count(Asset.id))
        .group_by(Asset.status)
        .order_by(Asset.status.asc())
        .all()
    )
    by_status = [{"status": status, "count": count} for status, count in by_status_rows]
    status_counts = dict(by_status_rows)

    by_category = [
        {"categoryId": category_id, "categoryName": name, "count": count, "totalValue": _money(value)}
        for category_id, name, count, value in (
            db.session.query(
                Category.id,
                Category.name,
                func.count(Asset.id),
                func.coalesce(func.sum(Asset.purchase_price), 0),
            )
            .join(Asset, Asset.category_id == Category.id)
            .group_by(Category.id, Category.name)
            .order_by(Category.name.asc())
            .all()
        )
    ]

    by_branch = [
        {"branch": branch, "count": count, "totalValue": _money(value)}
        for branch, count, value in (
            db.session.query(
                Asset.branch,
                func.count(Asset.id),
                func.coalesce(func.sum(Asset.purchase_price), 0),
            )
            .group_by(Asset.branch)
            .order_by(Asset.branch.asc())
            .all()
        )
    ]

    return {
        "overview": {
            "totalAssets": total_assets,
            "totalValue": _money(total_value),
            "availableAssets": status_counts.get(ASSET_STATUS_AVAILABLE, 0),
            "assignedAssets": status_counts.get(ASSET_STATUS_ASSIGNED, 0),
        },
        "byStatus": by_status,
        "byCategory": by_category,
        "byBranch": by_branch,
    }
