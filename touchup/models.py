"""Data models for the PDF touch-up editor."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class EditKind(str, Enum):
    ADD_TEXT = "text"
    ERASE    = "erase"
    BLUR     = "blur"


# Box drawn by erase / blur, in page-space points (PDF points at zoom 1).
RECT_WIDTH: float = 200.0
RECT_HEIGHT: float = 40.0

DEFAULT_TEXT = "Sample Text"
TEXT_FONTSIZE = 20          # client-side text edits
SERVER_TEXT_FONTSIZE = 12   # text instructions received by the server
TEXT_MARKER_SIZE = 10       # px, on-screen dot for a pending text edit

DEFAULT_ZOOM = 1.2
MIN_ZOOM = 0.5
MAX_ZOOM = 3.0


@dataclass(frozen=True)
class PointerEvent:
    """A click on the rendered page element, in screen pixels."""
    client_x: float
    client_y: float
    element_height: float
    offset_x: float = 0.0   # element's top-left corner
    offset_y: float = 0.0


@dataclass(frozen=True)
class EditInstruction:
    page: int                       # 0-based page index
    kind: EditKind
    x: float                        # page-space, origin bottom-left
    y: float
    width: Optional[float] = None   # given: (x, y) is the lower-left corner
    height: Optional[float] = None  # absent: fixed box centred on (x, y)
    text: Optional[str] = None      # only for kind ADD_TEXT

    def has_explicit_size(self) -> bool:
        return self.width is not None and self.height is not None


@dataclass(frozen=True)
class PendingEdit:
    page_index: int
    x: float
    y: float
    kind: EditKind
    payload: Optional[str] = None   # only for kind ADD_TEXT

    def to_instruction(self) -> EditInstruction:
        return EditInstruction(
            page=self.page_index,
            kind=self.kind,
            x=self.x,
            y=self.y,
            text=self.payload if self.kind == EditKind.ADD_TEXT else None,
        )


@dataclass
class ViewState:
    zoom_factor: float = DEFAULT_ZOOM
    displayed_page_index: int = 0
    page_raster_size: Tuple[int, int] = (0, 0)  # (0, 0) until a render completes

    def raster_ready(self) -> bool:
        w, h = self.page_raster_size
        return w > 0 and h > 0


@dataclass(frozen=True)
class MarkerRect:
    """On-screen feedback box for a pending edit, in logical pixels."""
    left: float
    top: float
    width: float
    height: float
    kind: EditKind
