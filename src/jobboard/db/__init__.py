"""Storage layer for job postings."""

from .repository import InvalidJobIdError, JobRepository, StorageError

__all__ = ["InvalidJobIdError", "JobRepository", "StorageError"]
