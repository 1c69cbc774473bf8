from pathlib import Path

import pytest

from chatapp.services import upload


@pytest.mark.parametrize(
    "filename,mime_type,expected",
    [
        ("photo.png", "image/png", "image"),
        ("notes.txt", "text/plain", "text"),
        ("data.csv", "application/octet-stream", "text"),
        ("script.py", "text/x-python", "code"),
        ("app.js", "text/javascript", "code"),
        ("Main.java", "application/octet-stream", "code"),
        ("paper.pdf", "application/pdf", "document"),
    ],
)
def test_classify(filename, mime_type, expected):
    assert upload.classify(filename, mime_type) == expected


def test_allowed_by_mime_type_or_extension():
    assert upload.is_allowed("anything.bin", "image/jpeg")
    assert upload.is_allowed("script.py", "application/octet-stream")
    assert not upload.is_allowed("setup.exe", "application/x-msdownload")


def test_language_for():
    assert upload.language_for(".py") == "python"
    assert upload.language_for(".CPP") == "cpp"
    assert upload.language_for(".rb") == "text"


def test_analyze_code_file(tmp_path):
    path = tmp_path / "hello.py"
    path.write_text("print('hi')\nprint('bye')\n", encoding="utf-8")

    analysis = upload.analyze_file(path, "hello.py", "text/x-python")

    assert analysis.type == "code"
    assert analysis.content.startswith("print('hi')")
    assert analysis.metadata.lines == 3
    assert analysis.metadata.language == "python"
    assert analysis.metadata.size == path.stat().st_size


def test_analyze_image_skips_content(tmp_path):
    path = tmp_path / "pixel.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\n")

    analysis = upload.analyze_file(path, "pixel.png", "image/png")

    assert analysis.type == "image"
    assert analysis.content is None
    assert analysis.metadata.lines is None


def test_analyze_undecodable_text_has_no_content(tmp_path):
    path = tmp_path / "broken.txt"
    path.write_bytes(b"\xff\xfe\xfa")

    analysis = upload.analyze_file(path, "broken.txt", "text/plain")

    assert analysis.type == "text"
    assert analysis.content is None


def test_upload_endpoint_stores_and_analyzes(client, settings):
    resp = client.post(
        "/api/upload",
        files={"file": ("notes.md", b"# Title\nbody", "text/markdown")},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["originalName"] == "notes.md"
    assert body["filename"].endswith("-notes.md")
    assert body["url"] == f"/uploads/{body['filename']}"
    assert body["type"] == "text/markdown"
    assert body["size"] == 12
    assert body["analysis"]["type"] == "text"
    assert body["analysis"]["content"] == "# Title\nbody"
    assert body["analysis"]["metadata"]["lines"] == 2
    assert (Path(settings.upload_dir) / body["filename"]).exists()

    served = client.get(body["url"])
    assert served.status_code == 200
    assert served.content == b"# Title\nbody"


def test_upload_rejects_unsupported_type(client, settings):
    resp = client.post(
        "/api/upload",
        files={"file": ("setup.exe", b"MZ", "application/x-msdownload")},
    )

    assert resp.status_code == 400
    assert list(Path(settings.upload_dir).iterdir()) == []


def test_upload_rejects_oversized_file(tmp_path, store, llm):
    from fastapi.testclient import TestClient

    from chatapp.api.main import create_app
    from chatapp.config import Settings

    small = Settings(upload_dir=str(tmp_path / "small"), max_upload_bytes=4)
    with TestClient(create_app(settings=small, store=store, llm=llm)) as c:
        resp = c.post("/api/upload", files={"file": ("big.txt", b"0123456789", "text/plain")})

    assert resp.status_code == 413
    assert list((tmp_path / "small").iterdir()) == []


def test_upload_requires_a_file(client):
    assert client.post("/api/upload").status_code == 400


def test_upload_needs_no_session(client, store):
    resp = client.post("/api/upload", files={"file": ("a.txt", b"x", "text/plain")})
    assert resp.status_code == 200
    assert len(store) == 0
