import io


def _file(name="photo.jpg", content=b"\xff\xd8\xff fake jpeg", mimetype="image/jpeg"):
    return (io.BytesIO(content), name, mimetype)


def test_upload_and_serve(client, test_app):
    resp = client.post("/api/upload", data={"files": [_file(), _file("clip.mp4", b"mp4", "video/mp4")]},
                       content_type="multipart/form-data")
    assert resp.status_code == 201
    urls = resp.get_json()["urls"]
    assert len(urls) == 2
    assert urls[0].startswith("/uploads/") and urls[0].endswith("_photo.jpg")

    served = client.get(urls[0])
    assert served.status_code == 200
    assert served.data == b"\xff\xd8\xff fake jpeg"


def test_upload_requires_files(client):
    resp = client.post("/api/upload", data={}, content_type="multipart/form-data")
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "At least one file is required"}


def test_upload_rejects_bad_types_and_too_many_files(client, test_app):
    resp = client.post("/api/upload", data={"files": [_file("doc.pdf", b"%PDF", "application/pdf")]},
                       content_type="multipart/form-data")
    assert resp.status_code == 400
    assert "Invalid file type" in resp.get_json()["error"]

    test_app.config["UPLOAD_MAX_FILES"] = 1
    resp = client.post("/api/upload", data={"files": [_file(), _file("b.jpg")]},
                       content_type="multipart/form-data")
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Maximum 1 files allowed"}


def test_upload_rejects_oversized_files(client, test_app):
    test_app.config["UPLOAD_MAX_SIZE_MB"] = 0.001
    resp = client.post("/api/upload", data={"files": [_file(content=b"x" * 4096)]},
                       content_type="multipart/form-data")
    assert resp.status_code == 400
    assert "too large" in resp.get_json()["error"]


def test_upload_unconfigured_storage(client, test_app):
    test_app.config["UPLOAD_FOLDER"] = ""
    resp = client.post("/api/upload", data={"files": [_file()]}, content_type="multipart/form-data")
    assert resp.status_code == 503
    assert "not configured" in resp.get_json()["error"]
