"""
Job Board Service

CRUD endpoints for job postings.
"""

from .main import create_app

__all__ = ["create_app"]
