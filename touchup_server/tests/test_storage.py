import os

import pytest

from touchup_server import storage


def test_save_and_load(tmp_upload_dir):
    storage.save_file("abc", b"data")
    assert storage.load_file("abc") == b"data"
    assert storage.exists("abc")
    assert sorted(os.listdir(tmp_upload_dir)) == ["abc"]


def test_failed_write_leaves_no_partial_file(tmp_upload_dir, monkeypatch):
    def failing_replace(src, dst):
        raise OSError("rename failed")

    monkeypatch.setattr(storage.os, "replace", failing_replace)
    with pytest.raises(OSError):
        storage.save_file("abc", b"data")
    assert os.listdir(tmp_upload_dir) == []


def test_exists_is_false_for_directories(tmp_upload_dir):
    (tmp_upload_dir / "subdir").mkdir(parents=True)
    assert not storage.exists("subdir")


@pytest.mark.parametrize("name", ["../x", "a/b", "..", "", "with space"])
def test_invalid_names_rejected(name):
    assert not storage.is_valid_name(name)
    with pytest.raises(ValueError):
        storage.file_path(name)
