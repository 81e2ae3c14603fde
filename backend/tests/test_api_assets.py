"""
Asset registry and system HTTP tests: JSON and multipart create, image
lifecycle on disk, deletion rules, stock summary, health and error bodies.
"""

import io
import os


def _upload_path(app, image_url):
    return os.path.join(app.config["UPLOAD_FOLDER"], image_url.rsplit("/", 1)[-1])


def _form(category_id, **overrides):
    data = {
        "assetTag": "IMG-001",
        "serialNumber": "IMG-SN-001",
        "categoryId": str(category_id),
        "make": "Apple",
        "model": "MacBook Air",
        "purchasePrice": "999.99",
        "purchaseDate": "",
    }
    data.update(overrides)
    return data


class TestCreate:

    def test_create_json(self, client, admin_headers, category):
        resp = client.post("/api/assets", json={
            "assetTag": "JSON-1",
            "serialNumber": "JSON-SN-1",
            "categoryId": category.id,
            "make": "Dell",
            "model": "U2723QE",
            "branch": "Branch A",
        }, headers=admin_headers)

        assert resp.status_code == 201
        body = resp.json
        assert body["status"] == "Available"
        assert body["category"] == {"id": category.id, "name": "Laptop", "code": "LAP"}

        timeline = client.get(f"/api/asset-history/timeline/{body['id']}", headers=admin_headers).json
        assert [r["action"] for r in timeline] == ["Purchase"]

    def test_create_duplicate_is_400(self, client, admin_headers, make_asset, category):
        existing = make_asset()
        resp = client.post("/api/assets", json={
            "assetTag": existing["assetTag"],
            "serialNumber": "NEW-SN",
            "categoryId": category.id,
            "make": "Dell",
            "model": "X",
        }, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json["error"] == "Asset tag already exists"

    def test_create_with_image(self, app, client, admin_headers, category):
        data = _form(category.id)
        data["image"] = (io.BytesIO(b"\x89PNG fake"), "front view.png")

        resp = client.post("/api/assets", data=data, headers=admin_headers, content_type="multipart/form-data")

        assert resp.status_code == 201
        image_url = resp.json["imageUrl"]
        assert image_url.startswith("/uploads/") and image_url.endswith("front_view.png")
        assert os.path.exists(_upload_path(app, image_url))

        served = client.get(image_url)
        assert served.status_code == 200
        assert served.data == b"\x89PNG fake"

    def test_failed_create_removes_upload(self, app, client, admin_headers, category):
        before = set(os.listdir(app.config["UPLOAD_FOLDER"]))
        data = _form(category.id, make="")
        data["image"] = (io.BytesIO(b"img"), "orphan.png")

        resp = client.post("/api/assets", data=data, headers=admin_headers, content_type="multipart/form-data")

        assert resp.status_code == 400
        assert set(os.listdir(app.config["UPLOAD_FOLDER"])) == before

    def test_rejects_non_image(self, client, admin_headers, category):
        data = _form(category.id)
        data["image"] = (io.BytesIO(b"MZ"), "tool.exe")
        resp = client.post("/api/assets", data=data, headers=admin_headers, content_type="multipart/form-data")
        assert resp.status_code == 400

    def test_too_large_upload_is_413(self, app, client, admin_headers, category):
        data = _form(category.id)
        data["image"] = (io.BytesIO(b"0" * (app.config["MAX_CONTENT_LENGTH"] + 1)), "huge.png")
        resp = client.post("/api/assets", data=data, headers=admin_headers, content_type="multipart/form-data")
        assert resp.status_code == 413
        assert resp.json["error"] == "File size too large. Maximum allowed size is 5MB"


class TestUpdateDelete:

    def test_replacing_image_deletes_old_file(self, app, client, admin_headers, category):
        data = _form(category.id)
        data["image"] = (io.BytesIO(b"old"), "old.png")
        created = client.post("/api/assets", data=data, headers=admin_headers,
                              content_type="multipart/form-data").json
        old_path = _upload_path(app, created["imageUrl"])

        resp = client.put(
            f"/api/assets/{created['id']}",
            data={"location": "Rack 2", "image": (io.BytesIO(b"new"), "new.png")},
            headers=admin_headers,
            content_type="multipart/form-data",
        )

        assert resp.status_code == 200
        assert resp.json["location"] == "Rack 2"
        assert not os.path.exists(old_path)
        assert os.path.exists(_upload_path(app, resp.json["imageUrl"]))

    def test_direct_status_change_rejected(self, client, admin_headers, make_asset):
        asset = make_asset()
        resp = client.put(f"/api/assets/{asset['id']}", json={"status": "Scrapped"}, headers=admin_headers)
        assert resp.status_code == 400

    def test_delete_assigned_is_400_then_ok_after_return(self, client, admin_headers, make_asset, employee):
        asset = make_asset()
        client.post("/api/asset-history/issue",
                    json={"assetId": asset["id"], "employeeId": employee.id}, headers=admin_headers)

        assert client.delete(f"/api/assets/{asset['id']}", headers=admin_headers).status_code == 400

        client.post("/api/asset-history/return", json={"assetId": asset["id"]}, headers=admin_headers)
        assert client.delete(f"/api/assets/{asset['id']}", headers=admin_headers).status_code == 200
        assert client.get(f"/api/assets/{asset['id']}", headers=admin_headers).status_code == 404


class TestReads:

    def test_list_shape(self, client, employee_headers, make_asset):
        make_asset()
        body = client.get("/api/assets?limit=5", headers=employee_headers).json
        assert set(body) == {"assets", "total", "page", "pages"}
        assert body["total"] == 1

    def test_my_assets(self, client, admin_headers, employee_headers, make_asset, employee):
        asset = make_asset()
        client.post("/api/asset-history/issue",
                    json={"assetId": asset["id"], "employeeId": employee.id}, headers=admin_headers)

        mine = client.get("/api/assets/my-assets", headers=employee_headers)
        assert mine.status_code == 200
        assert [a["id"] for a in mine.json] == [asset["id"]]

    def test_stock_summary(self, client, employee_headers, make_asset):
        make_asset(purchasePrice="100")
        make_asset(purchasePrice="50.5")
        body = client.get("/api/assets/stock/summary", headers=employee_headers).json

        assert body["overview"] == {
            "totalAssets": 2, "totalValue": 150.5, "availableAssets": 2, "assignedAssets": 0,
        }
        assert body["byStatus"] == [{"status": "Available", "count": 2}]


class TestSystem:

    def test_health(self, client, db_session):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json["status"] == "healthy"
        assert resp.json["database"]["status"] == "healthy"

    def test_unknown_route_is_json_404(self, client, db_session):
        resp = client.get("/api/does-not-exist")
        assert resp.status_code == 404
        assert "error" in resp.json

    def test_cors_header_for_known_origin(self, client, db_session):
        resp = client.get("/api/health", headers={"Origin": "http://localhost:5173"})
        assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"
