from fastapi import APIRouter, HTTPException
from touchup import edit_applier
from touchup.errors import ApplyError, LoadError, PageIndexOutOfRange
from touchup.models import SERVER_TEXT_FONTSIZE
from touchup_server import storage
from touchup_server.models import ProcessRequest, ProcessResponse
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/process", response_model=ProcessResponse)
def process(req: ProcessRequest):
    logger.info("POST /process — filename: %s, edits: %d", req.filename, len(req.edits))
    if not storage.is_valid_name(req.filename):
        logger.warning("POST /process — invalid filename: %r", req.filename)
        raise HTTPException(status_code=400, detail=f"Invalid filename: {req.filename}")
    if not storage.exists(req.filename):
        logger.warning("POST /process — file not found: %s", req.filename)
        raise HTTPException(status_code=404, detail=f"File not found: {req.filename}")
    try:
        source = storage.load_file(req.filename)
    except OSError as e:
        logger.error("POST /process — could not read %s: %s", req.filename, e)
        raise HTTPException(status_code=500, detail=f"Could not read {req.filename}")

    try:
        edited = edit_applier.apply_instructions(
            source, [e.to_draw() for e in req.edits], fontsize=SERVER_TEXT_FONTSIZE,
        )
    except PageIndexOutOfRange as e:
        logger.warning("POST /process — %s", e.message)
        raise HTTPException(status_code=400, detail=e.message)
    except LoadError as e:
        logger.warning("POST /process — cannot parse %s: %s", req.filename, e.message)
        raise HTTPException(status_code=422, detail=e.message)
    except ApplyError as e:
        logger.error("POST /process — edit failed for %s: %s", req.filename, e.message)
        raise HTTPException(status_code=500, detail=e.message)

    new_filename = storage.output_name(req.filename)
    try:
        storage.save_file(new_filename, edited)
    except OSError as e:
        logger.error("POST /process — could not write %s: %s", new_filename, e)
        raise HTTPException(status_code=500, detail=f"Could not save {new_filename}")
    logger.info("POST /process — wrote %s (%d bytes)", new_filename, len(edited))
    return ProcessResponse(filename=new_filename)
