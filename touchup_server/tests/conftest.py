import fitz
import pytest
from fastapi.testclient import TestClient

from touchup_server import storage
from touchup_server.main import app


@pytest.fixture(autouse=True)
def tmp_upload_dir(tmp_path, monkeypatch):
    """Redirect all storage reads/writes to a temporary directory."""
    upload_dir = tmp_path / "uploads"
    monkeypatch.setattr(storage, "UPLOAD_DIR", str(upload_dir))
    return upload_dir


@pytest.fixture()
def client():
    return TestClient(app)


@pytest.fixture()
def pdf_bytes():
    """A three-page US-letter PDF with a line of text on each page."""
    doc = fitz.open()
    for i in range(3):
        page = doc.new_page(width=612, height=792)
        page.insert_text((72, 72), f"Page {i + 1}", fontsize=14)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture()
def uploaded(client, pdf_bytes):
    """Upload *pdf_bytes* and return the generated filename."""
    resp = client.post("/upload", files={"pdf": ("doc.pdf", pdf_bytes, "application/pdf")})
    assert resp.status_code == 200
    return resp.json()["filename"]
