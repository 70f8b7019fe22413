"""Serves artifacts published to the local object store."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from slicr.api.deps import get_object_store
from slicr.errors import NotFoundError
from slicr.services.storage import LocalObjectStore, S3ObjectStore, content_type_for

router = APIRouter(tags=["files"])


@router.get("/files/{key:path}")
async def get_file(
    key: str,
    store: S3ObjectStore | LocalObjectStore = Depends(get_object_store),
) -> FileResponse:
    if not isinstance(store, LocalObjectStore):
        raise NotFoundError("Local file serving is disabled")

    path = store.resolve(key)
    if path is None or not path.is_file():
        raise NotFoundError(f"File not found: {key}")

    return FileResponse(path, media_type=content_type_for(path), filename=path.name)
