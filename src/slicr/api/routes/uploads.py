"""Pre-signed upload URL endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from slicr.api.auth import verify_client
from slicr.api.deps import get_object_store, get_settings
from slicr.api.schemas import UploadUrlRequest, UploadUrlResponse
from slicr.config import Settings
from slicr.errors import SlicrError
from slicr.services.storage import LocalObjectStore, S3ObjectStore, unique_upload_key

logger = logging.getLogger(__name__)

router = APIRouter(tags=["uploads"], dependencies=[Depends(verify_client)])


@router.post("/api/generate-upload-url", response_model=UploadUrlResponse)
async def generate_upload_url(
    req: UploadUrlRequest,
    store: S3ObjectStore | LocalObjectStore = Depends(get_object_store),
    settings: Settings = Depends(get_settings),
) -> UploadUrlResponse:
    """Issue a time-limited PUT URL for uploading large inputs directly to S3.

    The returned ``downloadUrl`` can be passed as ``audioUrl`` to the
    processing endpoint.
    """
    if not isinstance(store, S3ObjectStore):
        raise SlicrError("Direct uploads require S3 storage")

    key = unique_upload_key(req.file_name)
    upload_url = store.presign_upload(key, req.content_type, settings.upload_url_expires)
    download_url = store.presign_download(key, settings.upload_url_expires)

    logger.info("Generated pre-signed URL for %s of type %s", key, req.content_type)
    return UploadUrlResponse(upload_url=upload_url, s3_key=key, download_url=download_url)
