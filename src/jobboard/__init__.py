"""
Job board backend: CRUD API for job postings with optional logo uploads.
"""

__version__ = "0.1.0"
