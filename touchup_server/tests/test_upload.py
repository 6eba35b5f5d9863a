def test_root_status(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_upload_stores_file(client, pdf_bytes, tmp_upload_dir):
    resp = client.post("/upload", files={"pdf": ("doc.pdf", pdf_bytes, "application/pdf")})
    assert resp.status_code == 200
    filename = resp.json()["filename"]
    assert filename != "doc.pdf"   # opaque server-generated name
    assert (tmp_upload_dir / filename).read_bytes() == pdf_bytes


def test_upload_names_are_unique(client, pdf_bytes):
    names = {
        client.post("/upload", files={"pdf": ("doc.pdf", pdf_bytes, "application/pdf")}).json()["filename"]
        for _ in range(3)
    }
    assert len(names) == 3


def test_upload_empty_file_rejected(client):
    resp = client.post("/upload", files={"pdf": ("empty.pdf", b"", "application/pdf")})
    assert resp.status_code == 400
    assert "empty" in resp.json()["detail"].lower()


def test_upload_missing_field(client):
    resp = client.post("/upload", files={"other": ("doc.pdf", b"%PDF", "application/pdf")})
    assert resp.status_code == 422
