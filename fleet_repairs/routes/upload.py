# fleet_repairs/routes/upload.py
from flask import Blueprint, current_app, jsonify, request, send_from_directory

from fleet_repairs.services import storage
from fleet_repairs.services.form_validation import ALLOWED_UPLOAD_TYPES, validate_file

upload_bp = Blueprint("upload", __name__)


# -----------------------------------------------------------------------------
# POST /api/upload
# multipart/form-data, one or more "files" parts. Every file is checked
# before any is written.
# -----------------------------------------------------------------------------
@upload_bp.post("/api/upload")
def upload_files():
    try:
        storage.upload_folder()
    except storage.StorageNotConfigured as e:
        return jsonify({"error": str(e)}), 503

    files = [f for f in request.files.getlist("files") if f and f.filename]
    if not files:
        return jsonify({"error": "At least one file is required"}), 400

    max_files = current_app.config.get("UPLOAD_MAX_FILES", 5)
    if len(files) > max_files:
        return jsonify({"error": f"Maximum {max_files} files allowed"}), 400

    max_size_mb = current_app.config.get("UPLOAD_MAX_SIZE_MB", 10)
    for f in files:
        problem = validate_file(storage.file_size(f), f.mimetype, max_size_mb, ALLOWED_UPLOAD_TYPES)
        if problem:
            return jsonify({"error": problem}), 400

    try:
        urls = [storage.save_upload(f) for f in files]
    except OSError as e:
        current_app.logger.exception("Failed to store upload: %s", e)
        return jsonify({"error": "Failed to upload files"}), 500

    current_app.logger.info("Files uploaded: %d", len(urls))
    return jsonify({"urls": urls}), 201


# -----------------------------------------------------------------------------
# GET /uploads/<name>
# -----------------------------------------------------------------------------
@upload_bp.get("/uploads/<path:name>")
def uploaded_file(name):
    try:
        folder = storage.upload_folder()
    except storage.StorageNotConfigured as e:
        return jsonify({"error": str(e)}), 503
    return send_from_directory(folder, name)
