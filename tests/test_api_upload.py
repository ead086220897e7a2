"""API tests for resume uploads."""
import io

import pytest

from app.models.resume import Resume
from app.services.text_extraction import IMAGE_PLACEHOLDER


@pytest.fixture(autouse=True)
def uploads_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("UPLOADS_DIR", str(tmp_path / "uploads"))
    return tmp_path / "uploads"


def upload(client, headers, filename="cv.png", content=b"\x89PNG fake image", content_type="image/png"):
    return client.post(
        "/api/upload",
        files={"file": (filename, io.BytesIO(content), content_type)},
        headers=headers,
    )


def test_upload_stores_resume(client, db_session, make_user, auth_headers, uploads_dir):
    user = make_user()
    response = upload(client, auth_headers(user))
    assert response.status_code == 200
    body = response.json()
    assert body["filename"] == "cv.png"

    resume = db_session.query(Resume).filter(Resume.id == body["resume_id"]).one()
    assert resume.user_id == user.id
    assert resume.content == IMAGE_PLACEHOLDER
    assert (uploads_dir / f"{body['resume_id']}.png").exists()


def test_unparseable_pdf_is_stored_with_empty_text(client, db_session, make_user, auth_headers):
    response = upload(client, auth_headers(make_user()), filename="cv.pdf", content=b"not a pdf", content_type="application/pdf")
    assert response.status_code == 200
    resume = db_session.query(Resume).filter(Resume.id == response.json()["resume_id"]).one()
    assert resume.content == ""


def test_rejects_unsupported_type(client, make_user, auth_headers):
    response = upload(client, auth_headers(make_user()), filename="cv.txt", content=b"hello", content_type="text/plain")
    assert response.status_code == 400


def test_rejects_oversized_file(client, make_user, auth_headers):
    content = b"0" * (10 * 1024 * 1024 + 1)
    response = upload(client, auth_headers(make_user()), content=content)
    assert response.status_code == 400


def test_requires_auth(client):
    assert upload(client, {}).status_code == 401
