"""File Upload Adapter.

Accepts at most one file per write request under the configured field,
enforces the size ceiling and stores the bytes verbatim under a generated
filename in the upload directory.
"""

import logging
import os
import shutil
import uuid
from typing import BinaryIO, List, Optional

from starlette.concurrency import run_in_threadpool
from starlette.datastructures import FormData, UploadFile

from ..config import Settings

logger = logging.getLogger(__name__)


class UploadError(Exception):
    """Base exception for upload failures."""

    status_code = 400


class PayloadTooLargeError(UploadError):
    """Exception raised when an uploaded file exceeds the size ceiling."""

    status_code = 413


class UnexpectedFileError(UploadError):
    """Exception raised for files outside the accepted upload field."""

    status_code = 400


def _file_size(upload: UploadFile) -> int:
    if upload.size is not None:
        return upload.size
    upload.file.seek(0, os.SEEK_END)
    size = upload.file.tell()
    upload.file.seek(0)
    return size


def _copy_to_disk(source: BinaryIO, destination: str) -> None:
    source.seek(0)
    with open(destination, "wb") as buffer:
        shutil.copyfileobj(source, buffer)


def _is_empty_part(upload: UploadFile) -> bool:
    # Browsers send an empty, unnamed part when no file was chosen
    return not upload.filename and _file_size(upload) == 0


async def accept_upload(form: FormData, settings: Settings) -> Optional[str]:
    """Store the single file submitted under ``settings.upload_field``.

    Args:
        form: Parsed request form
        settings: Upload directory, field name and size ceiling

    Returns:
        Optional[str]: Generated filename of the stored file, None when no
        file was submitted

    Raises:
        UnexpectedFileError: If a file arrives under another field, or more
            than one file arrives
        PayloadTooLargeError: If the file exceeds ``max_upload_bytes``
    """
    files: List[UploadFile] = []
    for key, value in form.multi_items():
        if not isinstance(value, UploadFile) or _is_empty_part(value):
            continue
        if key != settings.upload_field or files:
            raise UnexpectedFileError(f"Unexpected field: {key}")
        files.append(value)

    if not files:
        return None

    upload = files[0]
    size = _file_size(upload)
    if size > settings.max_upload_bytes:
        logger.warning(
            f"Rejected upload {upload.filename!r}: {size} bytes exceeds {settings.max_upload_bytes}"
        )
        raise PayloadTooLargeError("File too large")

    os.makedirs(settings.upload_dir, exist_ok=True)
    filename = uuid.uuid4().hex
    await run_in_threadpool(
        _copy_to_disk, upload.file, os.path.join(settings.upload_dir, filename)
    )
    logger.info(f"Stored upload {upload.filename!r} as {filename} ({size} bytes)")
    return filename


def discard_upload(filename: Optional[str], upload_dir: str) -> None:
    """Remove a stored upload whose write was rejected."""
    if not filename:
        return
    try:
        os.remove(os.path.join(upload_dir, filename))
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.error(f"Could not remove upload {filename}: {e}")
