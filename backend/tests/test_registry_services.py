"""
Category and employee service tests.
"""

import pytest

from asset_tracker.extensions import db
from asset_tracker.errors import ConflictError, NotFoundError, ReferentialIntegrityError, ValidationError
from asset_tracker.models import AssetRequest, Category, Employee
from asset_tracker.services import category_service, employee_service, lifecycle_service
from asset_tracker.time_utils import utcnow


class TestCategories:

    def test_code_is_uppercased(self, db_session):
        cat = category_service.create_category({"name": "Router", "code": "rou"})
        db.session.commit()
        assert cat.code == "ROU"

    @pytest.mark.parametrize("code", ["X", "ABCDEFGHIJK"])
    def test_code_length(self, db_session, code):
        with pytest.raises(ValidationError):
            category_service.create_category({"name": "Bad", "code": code})

    def test_unique_name_and_code(self, db_session, category):
        with pytest.raises(ConflictError):
            category_service.create_category({"name": "Laptop", "code": "LP2"})
        with pytest.raises(ConflictError):
            category_service.create_category({"name": "Notebook", "code": "lap"})

    def test_delete_blocked_when_assets_exist(self, db_session, make_asset, category):
        asset = make_asset()
        lifecycle_service.scrap_asset(asset["id"], reason="eol", performed_by=None)

        with pytest.raises(ReferentialIntegrityError) as exc:
            category_service.delete_category(category.id)
        assert exc.value.message == "Cannot delete category. 1 asset(s) are associated with this category."

    def test_delete_unused(self, db_session, category):
        category_service.delete_category(category.id)
        db.session.commit()
        assert db_session.get(Category, category.id) is None

    def test_delete_unknown(self, db_session):
        with pytest.raises(NotFoundError):
            category_service.delete_category(55555)

    def test_list_carries_asset_count(self, db_session, make_asset, category):
        db_session.add(Category(name="Monitor", code="MON", status="inactive"))
        db_session.commit()
        make_asset()
        make_asset()

        rows = category_service.list_categories()
        assert [(r["name"], r["assetCount"]) for r in rows] == [("Laptop", 2), ("Monitor", 0)]

        assert [r["code"] for r in category_service.list_categories(status="inactive")] == ["MON"]
        assert [r["code"] for r in category_service.list_categories(search="lap")] == ["LAP"]
        assert category_service.list_categories(search="%") == []


class TestEmployees:

    def _payload(self, **overrides):
        payload = {
            "employeeId": "EMP010",
            "name": "Ada Lovelace",
            "email": "Ada@Company.com",
            "department": "Engineering",
        }
        payload.update(overrides)
        return payload

    def test_create_normalizes(self, db_session):
        emp = employee_service.create_employee(self._payload(joiningDate="2023-05-01"))
        db.session.commit()
        assert emp.email == "ada@company.com"
        assert emp.branch == "Head Office"
        assert emp.status == "active"
        assert emp.to_dict()["joiningDate"] == "2023-05-01"

    @pytest.mark.parametrize("overrides", [
        {"email": "not-an-email"},
        {"name": "A"},
        {"contact": "call me"},
        {"status": "retired"},
        {"department": ""},
    ])
    def test_invalid(self, db_session, overrides):
        with pytest.raises(ValidationError):
            employee_service.create_employee(self._payload(**overrides))

    def test_unique_employee_id_and_email(self, db_session, employee):
        with pytest.raises(ConflictError):
            employee_service.create_employee(self._payload(employeeId="EMP001"))
        with pytest.raises(ConflictError):
            employee_service.create_employee(self._payload(email="john.doe@company.com"))

    def test_list_search_and_pagination(self, db_session, employee):
        for i in range(11):
            employee_service.create_employee(self._payload(
                employeeId=f"E{i:03d}", email=f"e{i}@company.com", name=f"Person {i}",
                department="Sales" if i % 2 else "Support",
            ))
        db.session.commit()

        page = employee_service.list_employees()
        assert page["total"] == 12
        assert page["pages"] == 2
        assert len(page["employees"]) == 10

        assert employee_service.list_employees(search="JOHN")["total"] == 1
        assert employee_service.list_employees(search="emp001")["total"] == 1
        assert employee_service.list_employees(department="Sales")["total"] == 5
        assert employee_service.list_employees(search="_")["total"] == 0
        assert employee_service.list_employees(search="e1@")["total"] == 1

    def test_departments(self, db_session, employee, inactive_employee):
        assert employee_service.list_departments() == ["Finance", "IT"]

    def test_delete_unreferenced(self, db_session, employee):
        employee_service.delete_employee(employee.id)
        db.session.commit()
        assert db_session.get(Employee, employee.id) is None

    def test_delete_holder_blocked(self, db_session, make_asset, employee, admin_user):
        asset = make_asset()
        lifecycle_service.issue_asset(asset["id"], employee.id, performed_by=admin_user.id)

        with pytest.raises(ReferentialIntegrityError, match="returned first"):
            employee_service.delete_employee(employee.id)

    def test_delete_with_pending_request_blocked(self, db_session, employee, employee_user):
        db_session.add(AssetRequest(
            employee_id=employee.id,
            requested_by=employee_user.id,
            asset_type="Laptop",
            justification="new hire",
            request_date=utcnow(),
        ))
        db_session.commit()

        with pytest.raises(ReferentialIntegrityError, match="pending"):
            employee_service.delete_employee(employee.id)

    def test_delete_with_history_blocked(self, db_session, make_asset, employee, admin_user):
        asset = make_asset()
        lifecycle_service.issue_asset(asset["id"], employee.id, performed_by=admin_user.id)
        lifecycle_service.return_asset(asset["id"], performed_by=admin_user.id)

        with pytest.raises(ReferentialIntegrityError, match="inactive"):
            employee_service.delete_employee(employee.id)
