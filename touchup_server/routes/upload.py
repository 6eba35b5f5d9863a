from fastapi import APIRouter, File, HTTPException, UploadFile
from touchup_server.models import UploadResponse
from touchup_server.storage import save_upload
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/upload", response_model=UploadResponse)
async def upload(pdf: UploadFile = File(...)):
    data = await pdf.read()
    logger.info("POST /upload — received %r (%d bytes)", pdf.filename, len(data))
    if not data:
        logger.warning("POST /upload — empty upload rejected")
        raise HTTPException(status_code=400, detail="Uploaded file is empty")
    filename = save_upload(data)
    logger.info("POST /upload — stored as %s", filename)
    return UploadResponse(filename=filename)
