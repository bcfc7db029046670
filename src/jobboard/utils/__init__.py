"""Helpers shared by the job board services."""

from .uploads import (
    PayloadTooLargeError,
    UnexpectedFileError,
    UploadError,
    accept_upload,
    discard_upload,
)

__all__ = [
    "PayloadTooLargeError",
    "UnexpectedFileError",
    "UploadError",
    "accept_upload",
    "discard_upload",
]
