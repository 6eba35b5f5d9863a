import pytest

from touchup.tests.pdf_factory import make_pdf


@pytest.fixture()
def pdf_bytes():
    """Three US-letter pages, each with a 'Page N' label."""
    return make_pdf()


@pytest.fixture()
def pdf_path(tmp_path, pdf_bytes):
    path = tmp_path / "input.pdf"
    path.write_bytes(pdf_bytes)
    return path
