"""Main entry point for the PDF touch-up desktop app."""
import logging
import os
import sys

from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import QApplication, QFileDialog, QMainWindow

from touchup import settings as settings_store
from touchup.logging_utils import configure_logging
from touchup.pdf_viewer import PDFEditorPanel

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(self, settings: settings_store.ViewerSettings):
        super().__init__()
        self._settings = settings
        self.setWindowTitle("PDF Touch-up")
        self.resize(1000, 900)

        self._viewer = PDFEditorPanel(settings, self)
        self._viewer.status_message.connect(lambda msg: self.statusBar().showMessage(msg, 5000))
        self.setCentralWidget(self._viewer)

        file_menu = self.menuBar().addMenu("&File")
        open_action = QAction("&Open PDF…", self)
        open_action.setShortcut(QKeySequence.StandardKey.Open)
        open_action.triggered.connect(self._open_pdf)
        file_menu.addAction(open_action)
        file_menu.addSeparator()
        quit_action = QAction("&Quit", self)
        quit_action.setShortcut(QKeySequence.StandardKey.Quit)
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

    def open_path(self, path: str):
        self._settings.last_dir = os.path.dirname(os.path.abspath(path))
        self.setWindowTitle(f"PDF Touch-up — {os.path.basename(path)}")
        self._viewer.load_pdf(path)

    def _open_pdf(self):
        path, _ = QFileDialog.getOpenFileName(
            self, "Open PDF", self._settings.last_dir, "PDF files (*.pdf)"
        )
        if path:
            self.open_path(path)

    def closeEvent(self, event):
        try:
            settings_store.save_settings(self._settings)
        except OSError as exc:
            logger.warning("Could not save settings: %s", exc)
        super().closeEvent(event)


def main():
    settings = settings_store.load_settings()
    log_path = None
    if settings.debug_mode:
        os.makedirs(settings_store.data_dir(), exist_ok=True)
        log_path = os.path.join(settings_store.data_dir(), "touchup.log")
    configure_logging(debug=settings.debug_mode, log_path=log_path)

    app = QApplication(sys.argv)
    app.setApplicationName("PDF Touch-up")
    window = MainWindow(settings)
    window.show()
    if len(sys.argv) > 1:
        window.open_path(sys.argv[1])
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
