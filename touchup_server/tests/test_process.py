import fitz
import pytest

from touchup import edit_applier
from touchup.models import EditKind
from touchup_server import storage


def _open(path):
    return fitz.open(str(path))


def test_process_empty_edits_is_byte_identical(client, uploaded, pdf_bytes, tmp_upload_dir):
    resp = client.post("/process", json={"filename": uploaded, "edits": []})
    assert resp.status_code == 200
    new_name = resp.json()["filename"]
    assert new_name == f"edited_{uploaded}"
    assert (tmp_upload_dir / new_name).read_bytes() == pdf_bytes


def test_process_erase_with_explicit_rect(client, uploaded, tmp_upload_dir):
    resp = client.post("/process", json={
        "filename": uploaded,
        "edits": [{"page": 0, "x": 100, "y": 200, "width": 50, "height": 20, "type": "erase"}],
    })
    assert resp.status_code == 200
    doc = _open(tmp_upload_dir / resp.json()["filename"])
    drawings = doc[0].get_drawings()
    assert len(drawings) == 1
    rect = drawings[0]["rect"]
    # lower-left corner (100, 200) in page space → top-left origin in PyMuPDF
    assert rect.x0 == pytest.approx(100, abs=0.01)
    assert rect.x1 == pytest.approx(150, abs=0.01)
    assert rect.y0 == pytest.approx(792 - 220, abs=0.01)
    assert rect.y1 == pytest.approx(792 - 200, abs=0.01)
    assert drawings[0]["fill"] == pytest.approx((1.0, 1.0, 1.0))
    assert doc[1].get_drawings() == []


def test_process_blur_without_size_uses_default_box(client, uploaded, tmp_upload_dir):
    resp = client.post("/process", json={
        "filename": uploaded,
        "edits": [{"page": 2, "x": 300, "y": 400, "type": "blur"}],
    })
    assert resp.status_code == 200
    doc = _open(tmp_upload_dir / resp.json()["filename"])
    drawings = doc[2].get_drawings()
    assert len(drawings) == 1
    rect = drawings[0]["rect"]
    assert rect.width == pytest.approx(200, abs=0.01)
    assert rect.height == pytest.approx(40, abs=0.01)
    assert drawings[0]["fill"] == pytest.approx((0.9, 0.9, 0.9))
    assert drawings[0]["fill_opacity"] == pytest.approx(0.5)


def test_process_text(client, uploaded, tmp_upload_dir):
    resp = client.post("/process", json={
        "filename": uploaded,
        "edits": [{"page": 1, "x": 72, "y": 300, "type": "text", "text": "Approved"}],
    })
    assert resp.status_code == 200
    doc = _open(tmp_upload_dir / resp.json()["filename"])
    assert "Approved" in doc[1].get_text()
    assert "Approved" not in doc[0].get_text()


def test_process_text_without_text_uses_placeholder(client, uploaded, tmp_upload_dir):
    resp = client.post("/process", json={
        "filename": uploaded,
        "edits": [{"page": 0, "x": 72, "y": 300, "type": "text"}],
    })
    assert resp.status_code == 200
    doc = _open(tmp_upload_dir / resp.json()["filename"])
    assert "Sample Text" in doc[0].get_text()


def test_process_multiple_edits_applied_in_order(client, uploaded, tmp_upload_dir):
    resp = client.post("/process", json={
        "filename": uploaded,
        "edits": [
            {"page": 0, "x": 100, "y": 100, "type": "erase"},
            {"page": 0, "x": 100, "y": 300, "type": "blur"},
            {"page": 1, "x": 72, "y": 500, "type": "text", "text": "Hello"},
        ],
    })
    assert resp.status_code == 200
    doc = _open(tmp_upload_dir / resp.json()["filename"])
    assert len(doc[0].get_drawings()) == 2
    assert "Hello" in doc[1].get_text()


def test_process_page_out_of_range(client, uploaded, tmp_upload_dir):
    resp = client.post("/process", json={
        "filename": uploaded,
        "edits": [{"page": 3, "x": 10, "y": 10, "type": "erase"}],
    })
    assert resp.status_code == 400
    assert not (tmp_upload_dir / f"edited_{uploaded}").exists()


def test_process_negative_page(client, uploaded):
    resp = client.post("/process", json={
        "filename": uploaded,
        "edits": [{"page": -1, "x": 10, "y": 10, "type": "blur"}],
    })
    assert resp.status_code == 400


def test_process_out_of_range_leaves_nothing_partial(client, uploaded, pdf_bytes, tmp_upload_dir):
    resp = client.post("/process", json={
        "filename": uploaded,
        "edits": [
            {"page": 0, "x": 10, "y": 10, "type": "erase"},
            {"page": 9, "x": 10, "y": 10, "type": "erase"},
        ],
    })
    assert resp.status_code == 400
    assert (tmp_upload_dir / uploaded).read_bytes() == pdf_bytes
    assert not (tmp_upload_dir / f"edited_{uploaded}").exists()


def test_process_unknown_file(client):
    resp = client.post("/process", json={"filename": "deadbeef", "edits": []})
    assert resp.status_code == 404


def test_process_invalid_filename(client):
    resp = client.post("/process", json={"filename": "../secret", "edits": []})
    assert resp.status_code == 400


def test_process_missing_filename(client):
    resp = client.post("/process", json={"edits": []})
    assert resp.status_code == 422


def test_process_unknown_edit_type(client, uploaded):
    resp = client.post("/process", json={
        "filename": uploaded,
        "edits": [{"page": 0, "x": 10, "y": 10, "type": "smudge"}],
    })
    assert resp.status_code == 422


def test_process_unparseable_upload(client):
    name = client.post("/upload", files={"pdf": ("junk.pdf", b"not a pdf at all", "application/pdf")}).json()["filename"]
    resp = client.post("/process", json={
        "filename": name,
        "edits": [{"page": 0, "x": 10, "y": 10, "type": "erase"}],
    })
    assert resp.status_code == 422


@pytest.mark.parametrize("raw", ["NaN", "Infinity", "1e309"])
def test_process_rejects_non_finite_coordinates(client, uploaded, tmp_upload_dir, raw):
    body = (
        '{"filename": "%s", "edits": [{"page": 0, "x": %s, "y": 10, "type": "erase"}]}'
        % (uploaded, raw)
    )
    resp = client.post("/process", content=body, headers={"Content-Type": "application/json"})
    assert resp.status_code == 422
    assert not (tmp_upload_dir / f"edited_{uploaded}").exists()


def test_process_rejects_non_finite_size(client, uploaded):
    body = (
        '{"filename": "%s", "edits": [{"page": 0, "x": 10, "y": 10, "width": NaN,'
        ' "height": 20, "type": "blur"}]}' % uploaded
    )
    resp = client.post("/process", content=body, headers={"Content-Type": "application/json"})
    assert resp.status_code == 422


def test_process_directory_name_is_not_found(client, tmp_upload_dir):
    (tmp_upload_dir / "subdir").mkdir(parents=True)
    resp = client.post("/process", json={"filename": "subdir", "edits": []})
    assert resp.status_code == 404


def test_process_drawing_failure_is_500(client, uploaded, pdf_bytes, tmp_upload_dir, monkeypatch):
    def boom(page, ins, fontsize):
        raise RuntimeError("drawing exploded")

    monkeypatch.setitem(edit_applier._DRAWERS, EditKind.ERASE, boom)
    resp = client.post("/process", json={
        "filename": uploaded,
        "edits": [{"page": 0, "x": 10, "y": 10, "type": "erase"}],
    })
    assert resp.status_code == 500
    assert "drawing exploded" in resp.json()["detail"]
    assert not (tmp_upload_dir / f"edited_{uploaded}").exists()
    assert (tmp_upload_dir / uploaded).read_bytes() == pdf_bytes


def test_process_write_failure_is_500(client, uploaded, tmp_upload_dir, monkeypatch):
    def failing_save(filename, data):
        raise OSError("disk full")

    monkeypatch.setattr(storage, "save_file", failing_save)
    resp = client.post("/process", json={"filename": uploaded, "edits": []})
    assert resp.status_code == 500
    assert not (tmp_upload_dir / f"edited_{uploaded}").exists()
