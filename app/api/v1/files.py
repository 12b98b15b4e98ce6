"""Signed file downloads."""

import mimetypes
import posixpath

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from app.api.deps import get_blob_store
from app.services.blob_storage import LocalBlobStore

router = APIRouter()


@router.get("/{token}")
async def download_file(token: str, blob_store: LocalBlobStore = Depends(get_blob_store)):
    """Serve a file named by a signed download token."""
    path = blob_store.resolve_signed(token)
    content = await blob_store.read(path)
    media_type = mimetypes.guess_type(path)[0] or "application/octet-stream"
    filename = posixpath.basename(path)
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
