"""Center panel: PDF page view with click-to-place edits.

The widget is a thin shell around three Qt-free parts:

* :class:`touchup.edit_model.EditModel` holds the edit mode, the single
  pending edit and the view state;
* :class:`touchup.render_adapter.PageRenderer` rasterises pages and reports
  their geometry when rendering completes;
* :mod:`touchup.edit_applier` turns the pending edit into new PDF bytes.
"""
import logging
import os
from typing import Optional

from PySide6.QtCore import Qt, QTimer, Signal
from PySide6.QtGui import QImage, QPixmap
from PySide6.QtWidgets import (
    QComboBox, QFileDialog, QHBoxLayout, QLabel, QLineEdit, QPushButton,
    QScrollArea, QSizePolicy, QVBoxLayout, QWidget,
)

from touchup import edit_applier, edit_overlay
from touchup.edit_model import EditModel
from touchup.errors import NoPendingEditError, SourceError, TouchupError
from touchup.models import EditKind, PointerEvent
from touchup.render_adapter import PageRenderer, RenderedPage
from touchup.settings import ViewerSettings

logger = logging.getLogger(__name__)

_MODE_CHOICES = [
    ("Select Edit Mode", None),
    ("Blur Section",     EditKind.BLUR),
    ("Erase Section",    EditKind.ERASE),
    ("Add Text",         EditKind.ADD_TEXT),
]
_MODE_HINTS = {
    EditKind.ADD_TEXT: "where to add text",
    EditKind.ERASE:    "where to erase",
    EditKind.BLUR:     "where to blur",
}
_ZOOM_STEP = 0.2


def _to_pixmap(rendered: RenderedPage) -> QPixmap:
    img = QImage(rendered.samples, rendered.width, rendered.height,
                 rendered.stride, QImage.Format.Format_RGB888)
    raw = QPixmap.fromImage(img)
    raw.setDevicePixelRatio(rendered.dpr)
    return raw


class ClickableLabel(QLabel):
    """QLabel that reports left clicks in logical pixels.

    The label is always resized to the page pixmap, so positions are relative
    to the page element's top-left corner and ``height()`` is the element
    height used for the vertical flip.
    """

    clicked = Signal(float, float, float)   # x, y, element height

    def mousePressEvent(self, event):
        if event.button() == Qt.MouseButton.LeftButton:
            pos = event.position()
            self.clicked.emit(pos.x(), pos.y(), float(self.height()))
        super().mousePressEvent(event)


class PDFEditorPanel(QWidget):
    status_message = Signal(str)

    def __init__(self, settings: Optional[ViewerSettings] = None, parent=None):
        super().__init__(parent)
        self._settings = settings or ViewerSettings()
        self._pdf_path: Optional[str] = None
        self._source: Optional[bytes] = None          # original bytes, never replaced by edits
        self._raw_pixmap: Optional[QPixmap] = None    # page raster without marker
        self._model = EditModel(zoom=self._settings.zoom)
        self._renderer = PageRenderer(
            on_loaded=self._model.document_loaded,
            on_rendered=self._on_rendered,
        )

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        # ── Toolbar ──────────────────────────────────────────────────────────
        toolbar = QWidget()
        tb = QHBoxLayout(toolbar)
        tb.setContentsMargins(4, 4, 4, 4)
        tb.setSpacing(4)

        self._prev_btn = QPushButton("Previous")
        self._prev_btn.clicked.connect(self.prev_page)
        tb.addWidget(self._prev_btn)

        self._page_counter = QLabel("Page — / —")
        self._page_counter.setFixedWidth(90)
        self._page_counter.setAlignment(Qt.AlignmentFlag.AlignCenter)
        tb.addWidget(self._page_counter)

        self._next_btn = QPushButton("Next")
        self._next_btn.clicked.connect(self.next_page)
        tb.addWidget(self._next_btn)

        tb.addSpacing(12)
        zoom_out = QPushButton("−")
        zoom_out.setFixedWidth(32)
        zoom_out.setToolTip("Zoom out")
        zoom_out.clicked.connect(self._zoom_out)
        tb.addWidget(zoom_out)
        self._zoom_label = QLabel()
        self._zoom_label.setFixedWidth(50)
        self._zoom_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        tb.addWidget(self._zoom_label)
        zoom_in = QPushButton("+")
        zoom_in.setFixedWidth(32)
        zoom_in.setToolTip("Zoom in")
        zoom_in.clicked.connect(self._zoom_in)
        tb.addWidget(zoom_in)

        tb.addSpacing(12)
        self._mode_combo = QComboBox()
        for label, kind in _MODE_CHOICES:
            self._mode_combo.addItem(label, kind)
        self._mode_combo.currentIndexChanged.connect(self._on_mode_changed)
        tb.addWidget(self._mode_combo)

        self._text_edit = QLineEdit()
        self._text_edit.setPlaceholderText("Enter text")
        self._text_edit.textChanged.connect(self._model.set_draft_text)
        tb.addWidget(self._text_edit)

        self._apply_btn = QPushButton("Apply && Save")
        self._apply_btn.clicked.connect(self.apply_edit)
        tb.addWidget(self._apply_btn)
        tb.addStretch(1)
        toolbar.setSizePolicy(QSizePolicy.Policy.Preferred, QSizePolicy.Policy.Fixed)
        layout.addWidget(toolbar)

        self._hint_label = QLabel("")
        self._hint_label.setStyleSheet("color: #555;")
        layout.addWidget(self._hint_label)
        self._error_label = QLabel("")
        self._error_label.setStyleSheet("color: red;")
        layout.addWidget(self._error_label)

        # ── Scroll area ───────────────────────────────────────────────────────
        self._scroll = QScrollArea()
        self._scroll.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._scroll.setWidgetResizable(False)
        self._page_label = ClickableLabel()
        self._page_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._page_label.clicked.connect(self._on_page_clicked)
        self._scroll.setWidget(self._page_label)
        layout.addWidget(self._scroll, stretch=1)

        self._show_placeholder()

    # ── Public API ────────────────────────────────────────────────────────────

    @property
    def model(self) -> EditModel:
        return self._model

    @property
    def zoom(self) -> float:
        return self._model.view.zoom_factor

    def load_pdf(self, pdf_path: str):
        """Replace the current document with *pdf_path*."""
        self._renderer.close()
        self._model.reset()
        self._source = None
        self._pdf_path = pdf_path
        self._set_message("")
        self._reset_mode_widgets()
        try:
            with open(pdf_path, "rb") as f:
                data = f.read()
            if not data:
                raise SourceError("Invalid PDF source.")
            self._renderer.load(data)
        except OSError as exc:
            logger.warning("Cannot read %s: %s", pdf_path, exc)
            self._model.document_failed("Invalid PDF source.")
            self._show_placeholder(f"Cannot open {os.path.basename(pdf_path)}.")
            return
        except TouchupError as exc:
            logger.warning("Failed to load %s: %s", pdf_path, exc.message)
            self._model.document_failed(exc.message)
            self._show_placeholder(f"Cannot display this PDF.\n({os.path.basename(pdf_path)})")
            return
        self._source = data
        logger.info("Opened %s (%d page(s))", pdf_path, self._renderer.page_count)
        self._render_page()

    def prev_page(self):
        self._change_page(-1)

    def next_page(self):
        self._change_page(1)

    def apply_edit(self):
        """Apply the pending edit and let the user save the result."""
        try:
            edit = self._model.take_pending()
            data = edit_applier.apply_pending_edit(self._source, edit)
        except NoPendingEditError as exc:
            self._set_message(exc.message, error=True)
            return
        except TouchupError as exc:
            logger.error("Edit failed: %s", exc.message)
            self._set_message("Failed to edit PDF.", error=True)
            return

        start_dir = self._settings.last_dir or os.path.dirname(self._pdf_path or "")
        path, _ = QFileDialog.getSaveFileName(
            self, "Save edited PDF",
            os.path.join(start_dir, edit_applier.DOWNLOAD_FILENAME),
            "PDF files (*.pdf)",
        )
        if not path:
            return  # cancelled: keep the pending edit so the user can retry
        try:
            saved = edit_applier.save_download(data, os.path.dirname(path),
                                               os.path.basename(path))
        except TouchupError as exc:
            logger.error("Save failed: %s", exc.message)
            self._set_message(exc.message, error=True)
            return
        self._settings.last_dir = os.path.dirname(saved)
        self._model.edit_applied()
        self._text_edit.blockSignals(True)
        self._text_edit.clear()
        self._text_edit.blockSignals(False)
        self._set_message("")
        self.status_message.emit(f"Saved {saved}")
        self._update_display()

    # ── Rendering ─────────────────────────────────────────────────────────────

    def _show_placeholder(self, message: str = "No PDF loaded.\nUse File → Open PDF…"):
        self._raw_pixmap = None
        self._page_label.setPixmap(QPixmap())
        self._page_label.setText(message)
        self._page_label.resize(400, 300)
        self._update_controls()

    def _render_page(self):
        if not self._renderer.is_loaded():
            self._show_placeholder()
            return
        idx = self._model.view.displayed_page_index
        dpr = self.devicePixelRatio() if self._settings.hi_dpr else 1.0
        try:
            rendered = self._renderer.render(idx, self.zoom, dpr)
        except TouchupError as exc:
            self._model.document_failed(exc.message)
            self._show_placeholder(exc.message)
            return
        self._raw_pixmap = _to_pixmap(rendered)
        self._update_display()
        QTimer.singleShot(0, lambda: self._renderer.prerender_adjacent(idx))

    def _on_rendered(self, page_index: int, width: int, height: int):
        if page_index == self._model.view.displayed_page_index:
            self._model.render_complete(width, height)

    def _update_display(self):
        """Compose page raster + marker, push to screen."""
        if self._raw_pixmap is not None:
            display = edit_overlay.draw_marker(self._raw_pixmap, self._model.marker_geometry())
            self._page_label.setPixmap(display)
            dpr = display.devicePixelRatio()
            self._page_label.resize(int(display.width() / dpr), int(display.height() / dpr))
        self._update_controls()

    def _update_controls(self):
        model = self._model
        interactive = model.is_interactive()
        n = model.page_count
        idx = model.view.displayed_page_index
        self._page_counter.setText(f"Page {idx + 1} / {n}" if interactive else "Page — / —")
        self._prev_btn.setEnabled(interactive and idx > 0)
        self._next_btn.setEnabled(interactive and idx < n - 1)
        self._zoom_label.setText(f"{int(round(self.zoom * 100))}%")
        self._mode_combo.setEnabled(interactive)
        self._text_edit.setVisible(model.mode == EditKind.ADD_TEXT)
        self._text_edit.setEnabled(interactive)
        self._apply_btn.setEnabled(model.is_applyable())
        if model.mode is not None and interactive:
            self._hint_label.setText(f"Click on the PDF page to choose <b>{_MODE_HINTS[model.mode]}</b>.")
        else:
            self._hint_label.setText("")
        if model.error:
            self._error_label.setText(model.error)
        self._page_label.setCursor(
            Qt.CursorShape.CrossCursor if model.mode is not None else Qt.CursorShape.ArrowCursor
        )

    def _set_message(self, text: str, error: bool = False):
        self._error_label.setText(text if error else "")
        if text and not error:
            self.status_message.emit(text)

    # ── Interaction ───────────────────────────────────────────────────────────

    def _on_page_clicked(self, x: float, y: float, element_height: float):
        if self._model.on_page_click(PointerEvent(client_x=x, client_y=y,
                                                  element_height=element_height)):
            self._set_message("")
            self._update_display()

    def _on_mode_changed(self, index: int):
        self._model.set_edit_mode(self._mode_combo.itemData(index))
        self._text_edit.blockSignals(True)
        self._text_edit.clear()
        self._text_edit.blockSignals(False)
        self._update_display()

    def _reset_mode_widgets(self):
        self._mode_combo.blockSignals(True)
        self._mode_combo.setCurrentIndex(0)
        self._mode_combo.blockSignals(False)
        self._text_edit.blockSignals(True)
        self._text_edit.clear()
        self._text_edit.blockSignals(False)

    def _change_page(self, delta: int):
        if self._model.change_page(delta):
            self._render_page()
        else:
            self._update_display()

    def _apply_zoom(self, new_zoom: float):
        if self._model.set_zoom(new_zoom):
            self._settings.zoom = self.zoom
            self._render_page()

    def _zoom_in(self):
        self._apply_zoom(self.zoom + _ZOOM_STEP)

    def _zoom_out(self):
        self._apply_zoom(self.zoom - _ZOOM_STEP)

    def keyPressEvent(self, event):
        alt = Qt.KeyboardModifier.AltModifier
        if event.key() == Qt.Key.Key_Escape:
            self._mode_combo.setCurrentIndex(0)
            return
        if event.modifiers() & alt and event.key() == Qt.Key.Key_Left:
            self.prev_page()
            return
        if event.modifiers() & alt and event.key() == Qt.Key.Key_Right:
            self.next_page()
            return
        super().keyPressEvent(event)
