"""PDF touch-up desktop editor: click a page, place text, whiteout or blur."""
