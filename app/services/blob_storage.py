"""
Local filesystem blob storage for resumes and verification documents.

Files are addressed by relative paths such as ``resumes/<uid>/<name>.pdf``.
Downloads go through short-lived signed URLs: a JWT naming the path, served
by the files endpoint.
"""

import asyncio
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

from jose import JWTError, jwt

from app.config import settings
from app.core.exceptions import InvalidArgument, InvalidToken, NotFound
from app.utils.helpers import new_id, sanitize_filename

logger = logging.getLogger(__name__)

BLOB_TOKEN_TYPE = "blob"


@dataclass(frozen=True)
class StoredBlob:
    path: str
    size: int


class LocalBlobStore:
    """Store uploaded files on the local filesystem."""

    def __init__(self, base_dir: Optional[str] = None, base_url: Optional[str] = None):
        self.base_dir = Path(base_dir or settings.BLOB_STORAGE_DIR).resolve()
        self.base_url = (base_url or settings.APP_URL).rstrip("/")
        self.base_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"Blob storage initialized at: {self.base_dir}")

    def _resolve(self, path: str) -> Path:
        """Absolute location of ``path``; refuses paths escaping the base dir."""
        full_path = (self.base_dir / path).resolve()
        if self.base_dir != full_path and self.base_dir not in full_path.parents:
            raise InvalidArgument("Invalid file path", field="path")
        return full_path

    def _write(self, full_path: Path, content: bytes) -> None:
        full_path.parent.mkdir(parents=True, exist_ok=True)
        with open(full_path, "wb") as f:
            f.write(content)

    async def put(self, prefix: str, filename: str, content: bytes) -> StoredBlob:
        """
        Save a file under ``prefix`` with a unique name.

        Args:
            prefix: Folder such as ``resumes/<uid>``
            filename: Client-supplied name (sanitized, extension kept)
            content: File bytes

        Returns:
            StoredBlob with the relative path to keep on the record
        """
        safe_name = sanitize_filename(filename)
        path = f"{prefix.strip('/')}/{new_id()[:12]}_{safe_name}"
        full_path = self._resolve(path)

        await asyncio.to_thread(self._write, full_path, content)
        logger.info(f"Stored blob: {path} ({len(content)} bytes)")
        return StoredBlob(path=path, size=len(content))

    async def read(self, path: str) -> bytes:
        full_path = self._resolve(path)
        if not full_path.is_file():
            raise NotFound("File not found")
        return await asyncio.to_thread(full_path.read_bytes)

    def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    async def delete(self, path: str) -> bool:
        """Delete a file. Returns False when it did not exist."""
        full_path = self._resolve(path)
        if not full_path.is_file():
            logger.warning(f"Blob not found for deletion: {path}")
            return False
        await asyncio.to_thread(os.remove, full_path)
        logger.info(f"Deleted blob: {path}")
        return True

    def signed_url(self, path: str, expires_in: Optional[int] = None) -> str:
        """URL granting read access to ``path`` for ``expires_in`` seconds."""
        expires_in = expires_in or settings.SIGNED_URL_EXPIRE_SECONDS
        token = jwt.encode(
            {
                "path": path,
                "type": BLOB_TOKEN_TYPE,
                "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
            },
            settings.SECRET_KEY,
            algorithm=settings.ALGORITHM,
        )
        return f"{self.base_url}/api/v1/files/{token}"

    def resolve_signed(self, token: str) -> str:
        """Return the path a signed URL token grants access to."""
        try:
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        except JWTError as exc:
            raise InvalidToken("Download link is invalid or has expired") from exc
        if payload.get("type") != BLOB_TOKEN_TYPE or not payload.get("path"):
            raise InvalidToken("Download link is invalid or has expired")
        return payload["path"]
