"""
Category and employee endpoints over HTTP.
"""


class TestCategories:

    def test_create_uppercases_code(self, client, manager_headers):
        resp = client.post("/api/categories", json={"name": "Monitor", "code": "mon"}, headers=manager_headers)
        assert resp.status_code == 201
        assert resp.json["code"] == "MON"
        assert resp.json["assetCount"] == 0

    def test_duplicate_code(self, client, admin_headers, category):
        resp = client.post("/api/categories", json={"name": "Other", "code": "lap"}, headers=admin_headers)
        assert resp.status_code == 400

    def test_list_includes_asset_count(self, client, employee_headers, make_asset):
        make_asset()
        body = client.get("/api/categories", headers=employee_headers).json
        assert [(c["code"], c["assetCount"]) for c in body] == [("LAP", 1)]

    def test_delete_in_use_is_400(self, client, admin_headers, category, make_asset):
        make_asset()
        resp = client.delete(f"/api/categories/{category.id}", headers=admin_headers)
        assert resp.status_code == 400
        assert "1 asset(s)" in resp.json["error"]

    def test_delete_unused(self, client, admin_headers, category):
        assert client.delete(f"/api/categories/{category.id}", headers=admin_headers).status_code == 200
        assert client.get(f"/api/categories/{category.id}", headers=admin_headers).status_code == 404


class TestEmployees:

    def test_create_and_fetch(self, client, manager_headers):
        resp = client.post("/api/employees", json={
            "employeeId": "EMP010",
            "name": "Ada Lovelace",
            "email": "Ada@Company.com",
            "department": "Engineering",
            "joiningDate": "2024-03-01",
        }, headers=manager_headers)

        assert resp.status_code == 201
        body = resp.json
        assert body["email"] == "ada@company.com"
        assert body["status"] == "active"
        assert body["joiningDate"] == "2024-03-01"

        fetched = client.get(f"/api/employees/{body['id']}", headers=manager_headers)
        assert fetched.json["employeeId"] == "EMP010"

    def test_missing_department(self, client, admin_headers):
        resp = client.post("/api/employees", json={
            "employeeId": "EMP011", "name": "No Dept", "email": "nodept@company.com",
        }, headers=admin_headers)
        assert resp.status_code == 400

    def test_list_pagination_shape(self, client, admin_headers, employee, inactive_employee):
        body = client.get("/api/employees?status=active", headers=admin_headers).json
        assert body["total"] == 1
        assert body["pages"] == 1
        assert body["employees"][0]["employeeId"] == "EMP001"

    def test_departments(self, client, admin_headers, employee, inactive_employee):
        resp = client.get("/api/employees/departments/list", headers=admin_headers)
        assert resp.json == ["Finance", "IT"]

    def test_delete_holder_blocked(self, client, admin_headers, employee, make_asset):
        asset = make_asset()
        client.post("/api/asset-history/issue",
                    json={"assetId": asset["id"], "employeeId": employee.id}, headers=admin_headers)

        resp = client.delete(f"/api/employees/{employee.id}", headers=admin_headers)
        assert resp.status_code == 400

    def test_delete_unreferenced(self, client, admin_headers, inactive_employee):
        resp = client.delete(f"/api/employees/{inactive_employee.id}", headers=admin_headers)
        assert resp.status_code == 200
