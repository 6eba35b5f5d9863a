import fitz


def make_pdf(pages: int = 3, width: float = 612, height: float = 792, rotate: int = 0) -> bytes:
    """Build a small PDF in memory; each page carries a 'Page N' label."""
    doc = fitz.open()
    for i in range(pages):
        page = doc.new_page(width=width, height=height)
        page.insert_text((72, 72), f"Page {i + 1}", fontsize=14)
        if rotate:
            page.set_rotation(rotate)
    data = doc.tobytes()
    doc.close()
    return data
