"""
Concurrent issue attempts on one asset.

Runs against a temp-file SQLite database (the in-memory database shares one
connection across threads and cannot exercise row versioning).
"""

import threading

import pytest

from asset_tracker import create_app
from asset_tracker.extensions import db
from asset_tracker.errors import InvalidStateError
from asset_tracker.models import AssetHistory, Category, Employee, User, Asset
from asset_tracker.services import lifecycle_service


WORKERS = 5


@pytest.fixture
def file_app(tmp_path):
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'concurrency.db'}",
        'UPLOAD_FOLDER': str(tmp_path / 'uploads'),
    })
    with app.app_context():
        db.create_all()
        db.session.remove()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


def test_only_one_concurrent_issue_wins(file_app):
    with file_app.app_context():
        user = User(name="Admin", email="admin@example.com", password_hash="x", role="Admin")
        category = Category(name="Laptop", code="LAP")
        db.session.add_all([user, category])
        db.session.commit()

        employees = []
        for i in range(WORKERS):
            emp = Employee(employee_id=f"EMP{i:03d}", name=f"Worker {i}", email=f"w{i}@example.com", department="IT")
            db.session.add(emp)
            employees.append(emp)
        db.session.commit()

        asset = lifecycle_service.register_asset(
            {"assetTag": "RACE-1", "serialNumber": "RACE-SN-1", "categoryId": category.id,
             "make": "HP", "model": "EliteBook"},
            performed_by=user.id,
        )
        asset_id = asset["id"]
        user_id = user.id
        employee_ids = [e.id for e in employees]
        db.session.remove()

    results = []
    lock = threading.Lock()
    barrier = threading.Barrier(WORKERS)

    def worker(employee_id):
        with file_app.app_context():
            try:
                barrier.wait()
                lifecycle_service.issue_asset(asset_id, employee_id, performed_by=user_id)
                with lock:
                    results.append("issued")
            except Exception as exc:
                with lock:
                    results.append(exc)
            finally:
                db.session.remove()

    threads = [threading.Thread(target=worker, args=(eid,)) for eid in employee_ids]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    issued = [r for r in results if r == "issued"]
    failures = [r for r in results if r != "issued"]
    assert len(issued) == 1
    assert len(failures) == WORKERS - 1
    assert all(isinstance(f, InvalidStateError) for f in failures), failures

    with file_app.app_context():
        assert db.session.get(Asset, asset_id).status == "Assigned"
        issues = db.session.query(AssetHistory).filter_by(asset_id=asset_id, action="Issue").count()
        assert issues == 1
