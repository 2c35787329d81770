# fleet_repairs/services/storage.py
import os
import uuid

from flask import current_app, url_for
from werkzeug.utils import secure_filename


class StorageNotConfigured(RuntimeError):
    pass


def upload_folder():
    folder = current_app.config.get("UPLOAD_FOLDER")
    if not folder:
        raise StorageNotConfigured(
            "File storage is not configured. Please set UPLOAD_FOLDER to enable uploads."
        )
    return os.path.abspath(folder)


def unique_filename(original):
    name = secure_filename(original or "") or "upload"
    return f"{uuid.uuid4().hex}_{name}"


def save_upload(file_storage):
    """Write a werkzeug FileStorage into the upload folder; returns its public URL."""
    folder = upload_folder()
    os.makedirs(folder, exist_ok=True)
    filename = unique_filename(file_storage.filename)
    file_storage.save(os.path.join(folder, filename))
    return url_for("upload.uploaded_file", name=filename)


def file_size(file_storage):
    stream = file_storage.stream
    position = stream.tell()
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(position)
    return size
