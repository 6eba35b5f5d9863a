"""Coordinate/edit model: click-to-page mapping and the single pending edit.

Screen space is the rendered page element: pixels, origin top-left, y grows
downward.  Page space is PDF points, origin bottom-left, y grows upward.  Each
page is rendered as its own element, so the vertical flip always uses the
*element* height, never the height of any surrounding scroll area.
"""
import logging
from typing import Optional, Tuple

from touchup.errors import NoPendingEditError
from touchup.models import (
    DEFAULT_ZOOM, MAX_ZOOM, MIN_ZOOM, RECT_HEIGHT, RECT_WIDTH, TEXT_MARKER_SIZE,
    EditKind, MarkerRect, PendingEdit, PointerEvent, ViewState,
)

logger = logging.getLogger(__name__)


# ── Transform ─────────────────────────────────────────────────────────────────

def to_page_space(event: PointerEvent, zoom: float) -> Tuple[float, float]:
    """Map a pointer position on the page element to page-space points."""
    x = (event.client_x - event.offset_x) / zoom
    y = (event.element_height - (event.client_y - event.offset_y)) / zoom
    return x, y


def to_screen_space(x: float, y: float, zoom: float,
                    element_height: float) -> Tuple[float, float]:
    """Inverse of :func:`to_page_space`, relative to the element's top-left."""
    return x * zoom, element_height - y * zoom


def clamp_zoom(zoom: float) -> float:
    return max(MIN_ZOOM, min(MAX_ZOOM, zoom))


# ── Model ─────────────────────────────────────────────────────────────────────

class EditModel:
    """Owns the edit mode, the one pending edit, the draft text and the view.

    Consumers read the state through properties and never mutate it directly,
    so marker rendering and apply logic see the same value.
    """

    def __init__(self, zoom: float = DEFAULT_ZOOM):
        self._mode: Optional[EditKind] = None
        self._pending: Optional[PendingEdit] = None
        self._draft_text: str = ""
        self._page_count: int = 0
        self._error: Optional[str] = None
        self._view = ViewState(zoom_factor=clamp_zoom(zoom))

    # ── Read-only state ───────────────────────────────────────────────────────

    @property
    def mode(self) -> Optional[EditKind]:
        return self._mode

    @property
    def pending(self) -> Optional[PendingEdit]:
        return self._pending

    @property
    def draft_text(self) -> str:
        return self._draft_text

    @property
    def view(self) -> ViewState:
        return self._view

    @property
    def page_count(self) -> int:
        return self._page_count

    @property
    def error(self) -> Optional[str]:
        return self._error

    def is_interactive(self) -> bool:
        """False while no document is loaded or loading failed."""
        return self._error is None and self._page_count > 0

    # ── Render adapter callbacks ──────────────────────────────────────────────

    def reset(self):
        """Forget everything about the previous document."""
        zoom = self._view.zoom_factor
        self._mode = None
        self._pending = None
        self._draft_text = ""
        self._page_count = 0
        self._error = None
        self._view = ViewState(zoom_factor=zoom)

    def document_loaded(self, page_count: int):
        if self._page_count and page_count != self._page_count:
            logger.warning("Ignoring page count %d: document already reported %d pages",
                           page_count, self._page_count)
            return
        self._page_count = page_count
        self._error = None
        logger.debug("Document loaded with %d page(s)", page_count)

    def document_failed(self, message: str):
        self._error = message
        self._pending = None
        self._view.page_raster_size = (0, 0)
        logger.debug("Document entered error state: %s", message)

    def render_complete(self, width: int, height: int):
        self._view.page_raster_size = (int(width), int(height))

    # ── Edit operations ───────────────────────────────────────────────────────

    def set_edit_mode(self, kind: Optional[EditKind]):
        if kind != self._mode:
            logger.debug("Edit mode changed: %r → %r", self._mode, kind)
        self._mode = kind
        self._pending = None
        self._draft_text = ""

    def on_page_click(self, event: PointerEvent) -> Optional[PendingEdit]:
        if self._mode is None or not self.is_interactive():
            return None
        x, y = to_page_space(event, self._view.zoom_factor)
        self._pending = PendingEdit(
            page_index=self._view.displayed_page_index,
            x=x,
            y=y,
            kind=self._mode,
            payload=self._draft_text if self._mode == EditKind.ADD_TEXT else None,
        )
        logger.debug("Pending %s edit on page %d at (%.2f, %.2f)",
                     self._mode.value, self._pending.page_index + 1, x, y)
        return self._pending

    def set_draft_text(self, value: str):
        if self._mode != EditKind.ADD_TEXT:
            return
        self._draft_text = value
        if self._pending is not None:
            self._pending = PendingEdit(
                page_index=self._pending.page_index,
                x=self._pending.x,
                y=self._pending.y,
                kind=self._pending.kind,
                payload=value,
            )

    def change_page(self, delta: int) -> bool:
        """Move by *delta* pages (clamped).  Always drops the pending edit."""
        self._pending = None
        if self._page_count <= 0:
            return False
        new_idx = max(0, min(self._page_count - 1,
                             self._view.displayed_page_index + delta))
        if new_idx == self._view.displayed_page_index:
            return False
        self._view.displayed_page_index = new_idx
        self._view.page_raster_size = (0, 0)
        logger.debug("Navigating to page %d", new_idx + 1)
        return True

    def set_zoom(self, zoom: float) -> bool:
        zoom = clamp_zoom(zoom)
        if abs(zoom - self._view.zoom_factor) <= 0.005:
            return False
        self._view.zoom_factor = zoom
        self._view.page_raster_size = (0, 0)
        return True

    def is_applyable(self) -> bool:
        return (
            self._mode is not None
            and self.is_interactive()
            and self._pending is not None
            and self._pending.page_index == self._view.displayed_page_index
        )

    def take_pending(self) -> PendingEdit:
        """Return the actionable edit or raise :class:`NoPendingEditError`."""
        if not self.is_applyable():
            raise NoPendingEditError("Click on the page to select where to edit.")
        return self._pending

    def edit_applied(self):
        self._pending = None
        self._draft_text = ""

    # ── Overlay geometry ──────────────────────────────────────────────────────

    def marker_geometry(self) -> Optional[MarkerRect]:
        """Screen rectangle for the pending edit, or *None* if nothing to show."""
        pending = self._pending
        view = self._view
        if (pending is None
                or pending.page_index != view.displayed_page_index
                or not view.raster_ready()):
            return None
        zoom = view.zoom_factor
        left, top = to_screen_space(pending.x, pending.y, zoom, view.page_raster_size[1])
        if pending.kind == EditKind.ADD_TEXT:
            w = h = TEXT_MARKER_SIZE
        else:
            w, h = RECT_WIDTH * zoom, RECT_HEIGHT * zoom
        return MarkerRect(left=left - w / 2, top=top - h / 2, width=w, height=h,
                          kind=pending.kind)
