"""Tests for local blob storage and signed URLs."""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from app.config import settings
from app.core.exceptions import InvalidArgument, InvalidToken, NotFound
from app.core.security import create_access_token


async def test_put_and_read(blob_store):
    blob = await blob_store.put("resumes/seeker-1", "My CV (final).pdf", b"resume-bytes")

    assert blob.path.startswith("resumes/seeker-1/")
    assert blob.path.endswith("My_CV_final.pdf")
    assert blob.size == len(b"resume-bytes")
    assert await blob_store.read(blob.path) == b"resume-bytes"


async def test_client_directories_are_stripped(blob_store):
    blob = await blob_store.put("resumes/seeker-1", "../../etc/passwd.pdf", b"x")
    assert blob.path.startswith("resumes/seeker-1/")
    assert ".." not in blob.path


async def test_paths_cannot_escape_base_dir(blob_store):
    with pytest.raises(InvalidArgument):
        await blob_store.read("../outside.pdf")
    with pytest.raises(InvalidArgument):
        await blob_store.put("../../tmp", "cv.pdf", b"x")


async def test_delete(blob_store):
    blob = await blob_store.put("proofs/c-1", "proof.pdf", b"x")
    assert await blob_store.delete(blob.path) is True
    assert await blob_store.delete(blob.path) is False
    with pytest.raises(NotFound):
        await blob_store.read(blob.path)


async def test_signed_url_round_trip(blob_store):
    blob = await blob_store.put("resumes/seeker-1", "cv.pdf", b"x")
    url = blob_store.signed_url(blob.path, expires_in=60)

    assert url.startswith("http://testserver/api/v1/files/")
    assert blob_store.resolve_signed(url.rsplit("/", 1)[-1]) == blob.path


def test_expired_link_is_refused(blob_store):
    token = jwt.encode(
        {"path": "resumes/x/cv.pdf", "type": "blob", "exp": datetime.now(timezone.utc) - timedelta(seconds=1)},
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )
    with pytest.raises(InvalidToken):
        blob_store.resolve_signed(token)


def test_access_token_is_not_a_download_link(blob_store):
    with pytest.raises(InvalidToken):
        blob_store.resolve_signed(create_access_token("u-1", "u@example.com"))
