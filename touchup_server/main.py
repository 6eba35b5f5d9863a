from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
import os
import time
import logging

from touchup_server.routes import download, process, upload

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

CORS_ORIGINS = [o.strip() for o in os.environ.get("TOUCHUP_CORS_ORIGINS", "*").split(",") if o.strip()]

app = FastAPI(title="PDF Touch-up API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.middleware("http")
async def log_requests(request: Request, call_next):
    t0 = time.perf_counter()
    logger.info("REQUEST  %s %s", request.method, request.url.path)
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - t0) * 1000
    logger.info("RESPONSE %s %s — status: %d, time: %.1fms", request.method, request.url.path, response.status_code, elapsed_ms)
    return response

app.include_router(upload.router)
app.include_router(process.router)
app.include_router(download.router)


@app.get("/")
def root():
    return {"status": "ok", "message": "PDF Touch-up API"}


def run():
    import uvicorn

    uvicorn.run(
        app,
        host=os.environ.get("TOUCHUP_HOST", "127.0.0.1"),
        port=int(os.environ.get("TOUCHUP_PORT", "5000")),
    )
