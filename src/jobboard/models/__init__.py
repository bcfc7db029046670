"""
Data models and schemas for the job board.
"""

from .job import JobFields, JobRecord, JobValidationError, parse_job_fields

__all__ = [
    "JobFields",
    "JobRecord",
    "JobValidationError",
    "parse_job_fields",
]
