from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from pathlib import PurePath
import os
import time
import logging

from models import Retailer
from shared_utils.auth import get_current_retailer
from shared_utils.errors import InputValidationError
from shared_utils.responses import envelope
from .storage import LocalObjectStorage

router = APIRouter(
    prefix="/api/uploads",
    tags=["uploads"]
)
logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))


def get_storage(request: Request) -> LocalObjectStorage:
    return request.app.state.storage


def object_key(retailer_id: str, kind: str, filename: str = None) -> str:
    """retailer-uploads/<retailer>/<kind>-<epoch ms><ext>"""
    ext = PurePath(filename or "").suffix.lower() or ".png"
    return f"retailer-uploads/{retailer_id}/{kind}-{int(time.time() * 1000)}{ext}"


async def _store_image(kind: str, file: UploadFile, retailer: Retailer, storage: LocalObjectStorage) -> dict:
    if not (file.content_type or "").startswith("image/"):
        raise InputValidationError(
            "Only image uploads are allowed",
            errors=[{"field": "file", "message": f"Unsupported content type: {file.content_type}"}],
        )

    content = await file.read()
    if not content:
        raise InputValidationError("No file uploaded", errors=[{"field": "file", "message": "File is empty"}])
    if len(content) > MAX_UPLOAD_BYTES:
        raise InputValidationError(
            "File too large",
            errors=[{"field": "file", "message": f"Maximum size is {MAX_UPLOAD_BYTES} bytes"}],
        )

    key = object_key(retailer.id, kind, file.filename)
    # Disk write stays off the event loop
    await run_in_threadpool(storage.upload, key, content, content_type=file.content_type, upsert=True)
    logger.info(f"Uploaded {kind} for retailer {retailer.id}", extra={"retailer_id": retailer.id})
    return {"url": storage.public_url(key), "path": key}


@router.post("/logo")
async def upload_logo(
    file: UploadFile = File(...),
    retailer: Retailer = Depends(get_current_retailer),
    storage: LocalObjectStorage = Depends(get_storage)
):
    return envelope(await _store_image("logo", file, retailer, storage), message="Logo uploaded successfully")


@router.post("/banner")
async def upload_banner(
    file: UploadFile = File(...),
    retailer: Retailer = Depends(get_current_retailer),
    storage: LocalObjectStorage = Depends(get_storage)
):
    return envelope(await _store_image("banner", file, retailer, storage), message="Banner uploaded successfully")
