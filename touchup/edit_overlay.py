"""Edit overlay: draw the pending-edit marker on top of the page image.

Marker geometry comes from :meth:`EditModel.marker_geometry` in logical
pixels; this module only paints it.  The marker is visual feedback and is
never written into the PDF.
"""
from typing import Dict, Optional, Tuple

from PySide6.QtCore import QRectF, Qt
from PySide6.QtGui import QBrush, QColor, QPainter, QPen, QPixmap

from touchup.models import EditKind, MarkerRect

# (fill, outline, outline style) per edit kind
_STYLES: Dict[EditKind, Tuple[QColor, QColor, Qt.PenStyle]] = {
    EditKind.ADD_TEXT: (QColor(0, 0, 255),          QColor("white"),  Qt.PenStyle.SolidLine),
    EditKind.ERASE:    (QColor(255, 0, 0, 38),      QColor("red"),    Qt.PenStyle.SolidLine),
    EditKind.BLUR:     (QColor(150, 150, 150, 77),  QColor("#333"),   Qt.PenStyle.DashLine),
}
_OUTLINE_WIDTH = 2


def draw_marker(pixmap: QPixmap, marker: Optional[MarkerRect]) -> QPixmap:
    """Return a *copy* of *pixmap* with *marker* painted on it."""
    result = pixmap.copy()
    if marker is None:
        return result
    fill, outline, style = _STYLES[marker.kind]
    painter = QPainter(result)
    painter.setRenderHint(QPainter.RenderHint.Antialiasing)
    painter.setPen(QPen(outline, _OUTLINE_WIDTH, style))
    painter.setBrush(QBrush(fill))
    # The painter works in logical pixels because the pixmap carries its DPR.
    rect = QRectF(marker.left, marker.top, marker.width, marker.height)
    if marker.kind == EditKind.ADD_TEXT:
        painter.drawEllipse(rect)
    else:
        painter.drawRect(rect)
    painter.end()
    return result
