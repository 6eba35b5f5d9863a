"""Render adapter: rasterise PDF pages and report their on-screen geometry.

PDF rendering backend
---------------------
Uses **PyMuPDF (fitz)**.  ``page.rect`` is rotation-aware, so the raster of a
``/Rotate 90`` page already has landscape dimensions and the click transform
in :mod:`touchup.edit_model` works on what the user actually sees.

The adapter signals completion through callbacks instead of letting the view
poll the widget size after a delay: ``on_rendered`` fires once the raster
exists, with its logical pixel size.
"""
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

import fitz  # pymupdf

from touchup.errors import LoadError, SourceError, TouchupError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderedPage:
    page_index: int
    samples: bytes   # RGB888, no alpha
    width: int       # device pixels
    height: int
    stride: int
    dpr: float

    @property
    def logical_size(self) -> Tuple[int, int]:
        return int(self.width / self.dpr), int(self.height / self.dpr)


class PageRenderer:
    def __init__(
        self,
        on_loaded: Optional[Callable[[int], None]] = None,
        on_rendered: Optional[Callable[[int, int, int], None]] = None,
        on_error: Optional[Callable[[TouchupError], None]] = None,
    ):
        self._on_loaded = on_loaded
        self._on_rendered = on_rendered
        self._on_error = on_error
        self._doc: Optional[fitz.Document] = None
        # Pre-render cache: { page_index: RenderedPage }
        self._page_cache: Dict[int, RenderedPage] = {}
        self._cache_key: Tuple[float, float] = (0.0, 0.0)  # (zoom, dpr)

    # ── Document lifecycle ────────────────────────────────────────────────────

    @property
    def page_count(self) -> int:
        return self._doc.page_count if self._doc else 0

    def is_loaded(self) -> bool:
        return self._doc is not None

    def load(self, data: Optional[bytes]) -> int:
        """Open *data* as a PDF and report its page count.

        Raises :class:`SourceError` for missing or empty data and
        :class:`LoadError` when PyMuPDF cannot open it.
        """
        self.close()
        if not data:
            raise self._report(SourceError("Invalid PDF source."))
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as exc:
            logger.debug("Failed to open PDF (%d bytes): %s", len(data), exc)
            raise self._report(
                LoadError("Failed to load PDF. Please check the file and try again.")
            ) from exc
        if doc.page_count == 0:
            doc.close()
            raise self._report(LoadError("Failed to load PDF. The document has no pages."))
        self._doc = doc
        logger.debug("PDF loaded (%d bytes, %d page(s))", len(data), doc.page_count)
        if self._on_loaded:
            self._on_loaded(doc.page_count)
        return doc.page_count

    def close(self):
        if self._doc:
            self._doc.close()
            self._doc = None
        self._invalidate_cache()

    def page_size(self, page_index: int) -> Tuple[float, float]:
        """Return *(width, height)* of the page in points (rotation-aware)."""
        page = self._page(page_index)
        return page.rect.width, page.rect.height

    # ── Rendering ─────────────────────────────────────────────────────────────

    def render(self, page_index: int, zoom: float, dpr: float = 1.0) -> RenderedPage:
        """Rasterise *page_index* at *zoom* and signal the resulting geometry."""
        if (zoom, dpr) != self._cache_key:
            self._invalidate_cache()
            self._cache_key = (zoom, dpr)
        rendered = self._page_cache.get(page_index)
        if rendered is None:
            t0 = time.perf_counter()
            try:
                rendered = self._rasterise(page_index, zoom, dpr)
            except TouchupError as exc:
                raise self._report(exc)
            self._page_cache[page_index] = rendered
            logger.debug("Page %d rendered in %.3fs", page_index + 1,
                         time.perf_counter() - t0)
        if self._on_rendered:
            w, h = rendered.logical_size
            self._on_rendered(page_index, w, h)
        return rendered

    def prerender_adjacent(self, page_index: int):
        """Fill the cache with the neighbours of *page_index* at the cached zoom."""
        if not self._doc:
            return
        zoom, dpr = self._cache_key
        if zoom <= 0:
            return
        for idx in (page_index - 1, page_index + 1):
            if 0 <= idx < self._doc.page_count and idx not in self._page_cache:
                try:
                    self._page_cache[idx] = self._rasterise(idx, zoom, dpr)
                except LoadError as exc:
                    logger.debug("Skipping pre-render of page %d: %s", idx + 1, exc)

    def _rasterise(self, page_index: int, zoom: float, dpr: float) -> RenderedPage:
        page = self._page(page_index)
        logger.debug("Rendering page %d/%d at zoom %.2f dpr %.1f (page size: %.0f×%.0f pt)",
                     page_index + 1, self._doc.page_count, zoom, dpr,
                     page.rect.width, page.rect.height)
        try:
            pix = page.get_pixmap(matrix=fitz.Matrix(zoom * dpr, zoom * dpr), alpha=False)
        except Exception as exc:
            raise LoadError(
                f"Cannot render page {page_index + 1}. The PDF may be corrupted."
            ) from exc
        return RenderedPage(
            page_index=page_index,
            samples=bytes(pix.samples),
            width=pix.width,
            height=pix.height,
            stride=pix.stride,
            dpr=dpr,
        )

    def _invalidate_cache(self):
        self._page_cache.clear()

    def _page(self, page_index: int) -> fitz.Page:
        if not self._doc:
            raise SourceError("No PDF loaded.")
        if not 0 <= page_index < self._doc.page_count:
            raise SourceError(f"Page {page_index + 1} does not exist.")
        return self._doc[page_index]

    def _report(self, error: TouchupError) -> TouchupError:
        if self._on_error:
            self._on_error(error)
        return error
