"""
Asset request workflow over HTTP.
"""

import pytest


@pytest.fixture
def filed_request(client, employee, employee_headers):
    resp = client.post("/api/asset-requests", json={
        "assetType": "Laptop",
        "justification": "Current laptop is failing",
        "priority": "High",
    }, headers=employee_headers)
    assert resp.status_code == 201
    return resp.json


class TestAssetRequests:

    def test_file_request(self, filed_request, employee):
        assert filed_request["status"] == "Pending"
        assert filed_request["employee"]["id"] == employee.id
        assert filed_request["reviewer"] is None

    def test_user_without_employee_record(self, client, employee_headers):
        resp = client.post("/api/asset-requests", json={
            "assetType": "Laptop", "justification": "Need one",
        }, headers=employee_headers)
        assert resp.status_code == 400
        assert resp.json["error"] == "No employee record found for this user"

    def test_review_once(self, client, manager_headers, filed_request, make_asset, manager_user):
        asset = make_asset()
        url = f"/api/asset-requests/{filed_request['id']}/review"

        resp = client.patch(url, json={
            "status": "Fulfilled", "reviewNotes": "Handed over", "assignedAssetId": asset["id"],
        }, headers=manager_headers)
        assert resp.status_code == 200
        assert resp.json["reviewer"]["name"] == manager_user.name
        assert resp.json["assignedAsset"]["assetTag"] == asset["assetTag"]

        # the request does not move the asset
        fetched = client.get(f"/api/assets/{asset['id']}", headers=manager_headers)
        assert fetched.json["status"] == "Available"

        again = client.patch(url, json={"status": "Rejected"}, headers=manager_headers)
        assert again.status_code == 400

    def test_review_rejects_bad_asset_id(self, client, manager_headers, filed_request):
        resp = client.patch(f"/api/asset-requests/{filed_request['id']}/review",
                            json={"status": "Approved", "assignedAssetId": "x1"}, headers=manager_headers)
        assert resp.status_code == 400

    def test_pending_count(self, client, manager_headers, filed_request):
        resp = client.get("/api/asset-requests/pending/count", headers=manager_headers)
        assert resp.json == {"count": 1}

    def test_employee_sees_own_and_withdraws(self, client, employee_headers, filed_request):
        listed = client.get("/api/asset-requests", headers=employee_headers).json
        assert [r["id"] for r in listed] == [filed_request["id"]]

        resp = client.delete(f"/api/asset-requests/{filed_request['id']}", headers=employee_headers)
        assert resp.status_code == 200
        assert client.get(f"/api/asset-requests/{filed_request['id']}",
                          headers=employee_headers).status_code == 404
