import os
import re
import uuid

UPLOAD_DIR = os.environ.get("TOUCHUP_UPLOAD_DIR", "./uploads")

OUTPUT_PREFIX = "edited_"
_NAME_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


def _ensure_upload_dir():
    os.makedirs(UPLOAD_DIR, exist_ok=True)


def is_valid_name(filename: str) -> bool:
    """True for names this service could have generated (no paths, no dot-dirs)."""
    return bool(_NAME_RE.match(filename)) and filename not in (".", "..")


def file_path(filename: str) -> str:
    if not is_valid_name(filename):
        raise ValueError(f"Invalid filename: {filename!r}")
    return os.path.join(UPLOAD_DIR, filename)


def output_name(filename: str) -> str:
    return f"{OUTPUT_PREFIX}{filename}"


def save_upload(data: bytes) -> str:
    """Store an uploaded file under a fresh opaque name and return that name."""
    filename = uuid.uuid4().hex
    save_file(filename, data)
    return filename


def save_file(filename: str, data: bytes):
    _ensure_upload_dir()
    path = file_path(filename)
    tmp = f"{path}.part"
    try:
        with open(tmp, "wb") as f:
            f.write(data)
        os.replace(tmp, path)
    except OSError:
        if os.path.exists(tmp):
            os.remove(tmp)
        raise


def load_file(filename: str) -> bytes:
    """Read a stored file; raises FileNotFoundError if it does not exist."""
    with open(file_path(filename), "rb") as f:
        return f.read()


def exists(filename: str) -> bool:
    return is_valid_name(filename) and os.path.isfile(file_path(filename))
