from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse
from touchup_server import storage
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/download/{filename}")
def download(filename: str):
    logger.info("GET /download/%s — fetching file", filename)
    if not storage.is_valid_name(filename):
        logger.warning("GET /download/%s — invalid filename", filename)
        raise HTTPException(status_code=400, detail=f"Invalid filename: {filename}")
    if not storage.exists(filename):
        logger.warning("GET /download/%s — not found", filename)
        raise HTTPException(status_code=404, detail=f"File not found: {filename}")

    download_name = filename if filename.lower().endswith(".pdf") else f"{filename}.pdf"
    logger.info("GET /download/%s — serving as %s", filename, download_name)
    return FileResponse(storage.file_path(filename), media_type="application/pdf",
                        filename=download_name)
