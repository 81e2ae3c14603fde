# backend/asset_tracker/services/category_service.py
from __future__ import annotations

from sqlalchemy import func

from ..extensions import db
from ..errors import NotFoundError, ReferentialIntegrityError
from ..models import Asset, Category
from ..models.auth import ACCOUNT_STATUSES
from ..validation import (
    LIKE_ESCAPE,
    contains_pattern,
    ConflictError,
    ModelValidationPolicy,
    enforce_rules_category,
    validate_payload,
)

CATEGORY_POLICY = ModelValidationPolicy(
    fields={
        "name": "name",
        "code": "code",
        "description": "description",
        "status": "status",
    },
    required_on_create={"name", "code"},
    choices={"status": ACCOUNT_STATUSES},
)


def _asset_count(category_id: int) -> int:
    return db.session.query(func.count(Asset.id)).filter(Asset.category_id == category_id).scalar() or 0


def _check_unique(patch: dict, exclude_id: int | None = None) -> None:
    for key, label in (("name", "Category name"), ("code", "Category code")):
        if patch.get(key) is None:
            continue
        q = db.session.query(Category.id).filter(getattr(Category, key) == patch[key])
        if exclude_id is not None:
            q = q.filter(Category.id != exclude_id)
        if q.first():
            raise ConflictError(f"{label} already exists")


def get_category(category_id: int) -> Category:
    category = db.session.get(Category, category_id)
    if category is None:
        raise NotFoundError("Category not found")
    return category


def serialize_category(category: Category) -> dict:
    data = category.to_dict()
    data["assetCount"] = _asset_count(category.id)
    return data


def list_categories(*, status: str | None = None, search: str | None = None) -> list[dict]:
    """Categories by name, each with the number of assets filed under it."""
    counts = (
        db.session.query(Asset.category_id.label("category_id"), func.count(Asset.id).label("n"))
        .group_by(Asset.category_id)
        .subquery()
    )
    q = db.session.query(Category, func.coalesce(counts.c.n, 0)).outerjoin(
        counts, counts.c.category_id == Category.id
    )
    if status:
        q = q.filter(Category.status == status)
    if search:
        pattern = contains_pattern(search)
        q = q.filter(db.or_(
            Category.name.ilike(pattern, escape=LIKE_ESCAPE),
            Category.code.ilike(pattern, escape=LIKE_ESCAPE),
        ))

    result = []
    for category, asset_count in q.order_by(Category.name.asc()).all():
        data = category.to_dict()
        data["assetCount"] = asset_count
        result.append(data)
    return result


def create_category(payload: dict) -> Category:
    patch = validate_payload(model=Category, payload=payload, policy=CATEGORY_POLICY, partial=False)
    enforce_rules_category(patch)
    _check_unique(patch)

    category = Category(**patch)
    db.session.add(category)
    db.session.flush()
    return category


def update_category(category_id: int, payload: dict) -> Category:
    category = get_category(category_id)
    patch = validate_payload(model=Category, payload=payload, policy=CATEGORY_POLICY, partial=True)
    enforce_rules_category(patch)
    _check_unique(patch, exclude_id=category.id)

    for key, value in patch.items():
        setattr(category, key, value)
    db.session.flush()
    return category


def delete_category(category_id: int) -> None:
    """
    Raises:
        ReferentialIntegrityError: any asset (of any status) still uses the category
    """
    category = get_category(category_id)
    count = _asset_count(category.id)
    if count > 0:
        raise ReferentialIntegrityError(
            f"Cannot delete category. {count} asset(s) are associated with this category."
        )
    db.session.delete(category)
    db.session.flush()
