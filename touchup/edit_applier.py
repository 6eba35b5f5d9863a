"""Apply edits to PDF bytes by compositing shapes and text with PyMuPDF.

Coordinate notes
----------------
Edits arrive in page space: PDF points relative to the *visible* page, origin
bottom-left.  PyMuPDF draws in its own space: origin top-left, and for pages
with ``/Rotate`` the **native** (pre-rotation) orientation.  ``to_draw`` flips
the y axis against the rotation-aware ``page.rect`` and then applies
``page.derotation_matrix``.

Nothing here touches the source buffer: every call opens a fresh document
from the bytes and returns newly serialised bytes.  Erase and blur only
cover content; the underlying page content is left in place.
"""
import logging
import os
import tempfile
from typing import Callable, Dict, Iterable

import fitz

from touchup.errors import ApplyError, LoadError, PageIndexOutOfRange
from touchup.models import (
    DEFAULT_TEXT, RECT_HEIGHT, RECT_WIDTH, TEXT_FONTSIZE,
    EditInstruction, EditKind, PendingEdit,
)

logger = logging.getLogger(__name__)

DOWNLOAD_FILENAME = "edited.pdf"

# ── Colour constants ──────────────────────────────────────────────────────────
_TEXT_COLOR  = (0.0, 0.0, 0.0)
_ERASE_COLOR = (1.0, 1.0, 1.0)   # page background, fully opaque
_BLUR_COLOR  = (0.9, 0.9, 0.9)   # neutral gray, half transparent
_BLUR_OPACITY = 0.5
_FONTNAME = "helv"


def apply_pending_edit(source: bytes, edit: PendingEdit,
                       fontsize: float = TEXT_FONTSIZE) -> bytes:
    """Composite the one client-side *edit* onto *source* and return new bytes."""
    return apply_instructions(source, [edit.to_instruction()], fontsize=fontsize)


def apply_instructions(source: bytes, instructions: Iterable[EditInstruction],
                       fontsize: float = TEXT_FONTSIZE) -> bytes:
    """Apply *instructions* in order and return the re-serialised document.

    Raises :class:`LoadError` if *source* cannot be parsed,
    :class:`PageIndexOutOfRange` if any instruction names a missing page (no
    drawing happens in that case) and :class:`ApplyError` for failures while
    drawing or saving.  An empty list returns *source* unchanged.
    """
    instructions = list(instructions)
    doc = _open(source)
    try:
        for ins in instructions:
            if not 0 <= ins.page < doc.page_count:
                logger.warning("Rejecting %s edit: page %d of %d",
                               ins.kind.value, ins.page + 1, doc.page_count)
                raise PageIndexOutOfRange(ins.page, doc.page_count)
        if not instructions:
            return source

        for i, ins in enumerate(instructions):
            page = doc[ins.page]
            logger.debug("edit[%d] %s page=%d x=%.2f y=%.2f w=%s h=%s",
                         i, ins.kind.value, ins.page, ins.x, ins.y, ins.width, ins.height)
            try:
                _DRAWERS[ins.kind](page, ins, fontsize)
            except Exception as exc:
                raise ApplyError(f"Failed to edit PDF: {exc}") from exc
        return _serialise(doc)
    finally:
        doc.close()


def save_download(data: bytes, directory: str, filename: str = DOWNLOAD_FILENAME) -> str:
    """Write *data* to *directory*/*filename* and return the path.

    The file only appears once fully written, so a failed save never leaves a
    truncated PDF behind.
    """
    os.makedirs(directory, exist_ok=True)
    dst = os.path.join(directory, filename)
    fd, tmp = tempfile.mkstemp(dir=directory, suffix=".part")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp, dst)
    except OSError as exc:
        if os.path.exists(tmp):
            os.remove(tmp)
        raise ApplyError(f"Could not save {filename}: {exc}") from exc
    logger.info("Saved edited PDF to %s (%d bytes)", dst, len(data))
    return dst


# ── Helpers ───────────────────────────────────────────────────────────────────

def _open(source: bytes) -> fitz.Document:
    try:
        doc = fitz.open(stream=source, filetype="pdf")
    except Exception as exc:
        raise LoadError("The file could not be read as a PDF.") from exc
    if doc.page_count == 0:
        doc.close()
        raise LoadError("The PDF has no pages.")
    return doc


def _serialise(doc: fitz.Document) -> bytes:
    # garbage=0 keeps the object layout as-is; fall back to a full cleanup
    # pass when MuPDF rejects the plain save.
    last_exc = None
    for garbage_level in (0, 4):
        try:
            data = doc.tobytes(garbage=garbage_level, deflate=True)
            logger.debug("save OK (garbage=%d, %d bytes)", garbage_level, len(data))
            return data
        except Exception as exc:
            logger.warning("save failed (garbage=%d): %s", garbage_level, exc)
            last_exc = exc
    raise ApplyError("Failed to edit PDF: the document could not be saved.") from last_exc


def to_draw(page: fitz.Page, x: float, y: float) -> fitz.Point:
    """Convert a page-space point to PyMuPDF draw coordinates."""
    return fitz.Point(x, page.rect.height - y) * page.derotation_matrix


def edit_rect(page: fitz.Page, ins: EditInstruction) -> fitz.Rect:
    """Draw-space rectangle covered by an erase / blur instruction."""
    if ins.has_explicit_size():
        x0, y0 = ins.x, ins.y
        x1, y1 = ins.x + ins.width, ins.y + ins.height
    else:
        x0, y0 = ins.x - RECT_WIDTH / 2, ins.y - RECT_HEIGHT / 2
        x1, y1 = ins.x + RECT_WIDTH / 2, ins.y + RECT_HEIGHT / 2
    rect = fitz.Rect(to_draw(page, x0, y0), to_draw(page, x1, y1))
    rect.normalize()
    return rect


def _draw_text(page: fitz.Page, ins: EditInstruction, fontsize: float):
    text = ins.text or DEFAULT_TEXT
    page.insert_text(to_draw(page, ins.x, ins.y), text, fontsize=fontsize,
                     fontname=_FONTNAME, color=_TEXT_COLOR, rotate=page.rotation)


def _draw_erase(page: fitz.Page, ins: EditInstruction, fontsize: float):
    page.draw_rect(edit_rect(page, ins), color=None, fill=_ERASE_COLOR,
                   width=0, fill_opacity=1.0, overlay=True)


def _draw_blur(page: fitz.Page, ins: EditInstruction, fontsize: float):
    page.draw_rect(edit_rect(page, ins), color=None, fill=_BLUR_COLOR,
                   width=0, fill_opacity=_BLUR_OPACITY, overlay=True)


_DRAWERS: Dict[EditKind, Callable[[fitz.Page, EditInstruction, float], None]] = {
    EditKind.ADD_TEXT: _draw_text,
    EditKind.ERASE:    _draw_erase,
    EditKind.BLUR:     _draw_blur,
}
