# backend/asset_tracker/services/storage_service.py
"""
Asset image storage on the local filesystem.

Files are written under UPLOAD_FOLDER with a uuid prefix and served from
/uploads/<name>. The database only keeps the public url. Deleting a file is
best-effort: a failure is logged and never changes the request outcome.
"""
from __future__ import annotations

import os
import uuid
from pathlib import Path

from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from ..validation import ValidationError

PUBLIC_PREFIX = "/uploads/"


def upload_folder() -> str:
    return current_app.config["UPLOAD_FOLDER"]


def is_allowed_image(filename: str | None) -> bool:
    if not filename:
        return False
    return Path(filename).suffix.lower() in current_app.config["ALLOWED_IMAGE_EXTENSIONS"]


def save_image(file: FileStorage | None) -> str | None:
    """
    Store an uploaded image and return its public url.

    Returns None when no file was sent (empty form field).

    Raises:
        ValidationError: extension not allowed
    """
    if file is None or not file.filename:
        return None

    if not is_allowed_image(file.filename):
        allowed = ", ".join(sorted(current_app.config["ALLOWED_IMAGE_EXTENSIONS"]))
        raise ValidationError(f"Only image files are allowed ({allowed})")

    safe_name = secure_filename(file.filename) or "image"
    stored_name = f"{uuid.uuid4().hex}_{safe_name}"

    os.makedirs(upload_folder(), exist_ok=True)
    file.save(os.path.join(upload_folder(), stored_name))
    return PUBLIC_PREFIX + stored_name


def path_for_url(image_url: str | None) -> str | None:
    """Map a public /uploads/ url back to a file inside UPLOAD_FOLDER."""
    if not image_url or not image_url.startswith(PUBLIC_PREFIX):
        return None
    name = secure_filename(image_url[len(PUBLIC_PREFIX):])
    if not name:
        return None
    return os.path.join(upload_folder(), name)


def release_image(image_url: str | None) -> bool:
    """Delete a stored image. Returns True if a file was removed."""
    path = path_for_url(image_url)
    if path is None:
        return False
    try:
        if os.path.exists(path):
            os.remove(path)
            return True
    except OSError:
        current_app.logger.warning("Failed to delete image %s", image_url, exc_info=True)
    return False
