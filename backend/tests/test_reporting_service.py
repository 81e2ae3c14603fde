"""
Stock summary tests.
"""

import pytest

from asset_tracker.models import Category
from asset_tracker.services import lifecycle_service, reporting_service


def test_empty_registry(db_session):
    summary = reporting_service.stock_summary()
    assert summary == {
        "overview": {"totalAssets": 0, "totalValue": 0.0, "availableAssets": 0, "assignedAssets": 0},
        "byStatus": [],
        "byCategory": [],
        "byBranch": [],
    }


def test_totals_are_consistent(db_session, make_asset, category, employee, admin_user):
    monitors = Category(name="Monitor", code="MON")
    db_session.add(monitors)
    db_session.commit()

    a = make_asset(purchasePrice="1000.10")
    make_asset(purchasePrice="250.25", branch="Branch A")
    c = make_asset(purchasePrice="199.99", categoryId=monitors.id, branch="Branch A")
    d = make_asset(purchasePrice="0")
    lifecycle_service.issue_asset(a["id"], employee.id, performed_by=admin_user.id)
    lifecycle_service.scrap_asset(c["id"], reason="dead pixels", performed_by=admin_user.id)
    lifecycle_service.issue_asset(d["id"], employee.id, performed_by=admin_user.id)
    lifecycle_service.return_asset(d["id"], performed_by=admin_user.id, condition="Poor")

    summary = reporting_service.stock_summary()
    overview = summary["overview"]

    assert overview["totalAssets"] == 4
    assert overview["totalValue"] == pytest.approx(1450.34)
    assert overview["availableAssets"] == 1
    assert overview["assignedAssets"] == 1

    assert sum(row["count"] for row in summary["byStatus"]) == overview["totalAssets"]
    assert {row["status"]: row["count"] for row in summary["byStatus"]} == {
        "Assigned": 1, "Available": 1, "Scrapped": 1, "Under Repair": 1,
    }

    assert sum(row["totalValue"] for row in summary["byCategory"]) == pytest.approx(overview["totalValue"], abs=0.01)
    by_category = {row["categoryName"]: row for row in summary["byCategory"]}
    assert by_category["Laptop"]["count"] == 3
    assert by_category["Monitor"]["totalValue"] == pytest.approx(199.99)

    by_branch = {row["branch"]: row for row in summary["byBranch"]}
    assert by_branch["Head Office"]["count"] == 2
    assert by_branch["Branch A"]["totalValue"] == pytest.approx(450.24)
