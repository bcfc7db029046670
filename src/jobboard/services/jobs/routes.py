"""Job resource handlers for ``/api/jobs``."""

import logging
from typing import Any, Dict, Optional, Tuple

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ...config import Settings
from ...db.repository import InvalidJobIdError, JobRepository
from ...models.job import JobValidationError, parse_job_fields
from ...utils.uploads import accept_upload, discard_upload

logger = logging.getLogger(__name__)

JOB_NOT_FOUND = "Job not found"

router = APIRouter(prefix="/api/jobs", tags=["jobs"])


def get_repository(request: Request) -> JobRepository:
    return request.app.state.repository


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def read_job_body(
    request: Request, settings: Settings
) -> Tuple[Dict[str, Any], Optional[str]]:
    """Read the submitted job fields and store the optional logo file.

    JSON bodies carry no file. Form bodies (multipart or urlencoded) go
    through the upload adapter first.

    Returns:
        Tuple of the text fields and the stored logo filename (or None)
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError as e:
            raise JobValidationError([{"field": "body", "message": f"Invalid JSON: {e}"}]) from e
        if not isinstance(body, dict):
            raise JobValidationError([{"field": "body", "message": "Expected an object"}])
        return body, None

    form = await request.form()
    filename = await accept_upload(form, settings)
    fields = {
        key: value for key, value in form.multi_items() if isinstance(value, str)
    }
    return fields, filename


@router.get("")
async def list_jobs(
    category: Optional[str] = None,
    repository: JobRepository = Depends(get_repository),
):
    """List jobs, optionally only those whose jobCategory equals ``category``."""
    filters = {"jobCategory": category} if category else {}
    try:
        jobs = await repository.find(filters)
    except Exception as e:
        logger.error(f"Error listing jobs: {e}")
        return error_response(500, str(e))
    return JSONResponse(status_code=200, content=[job.to_json() for job in jobs])


@router.get("/{job_id}")
async def get_job(job_id: str, repository: JobRepository = Depends(get_repository)):
    try:
        job = await repository.find_by_id(job_id)
    except InvalidJobIdError:
        logger.warning(f"Malformed job id {job_id!r}")
        return error_response(404, JOB_NOT_FOUND)
    except Exception as e:
        logger.error(f"Error fetching job {job_id}: {e}")
        return error_response(500, str(e))
    if job is None:
        return error_response(404, JOB_NOT_FOUND)
    return JSONResponse(status_code=200, content=job.to_json())


@router.post("")
async def create_job(
    request: Request,
    repository: JobRepository = Depends(get_repository),
    settings: Settings = Depends(get_app_settings),
):
    data, logo = await read_job_body(request, settings)
    try:
        data["logo"] = logo or ""
        fields = parse_job_fields(data)
        job = await repository.save(fields)
    except Exception as e:
        logger.error(f"Error creating job: {e}")
        discard_upload(logo, settings.upload_dir)
        return error_response(400, str(e))

    logger.info(
        f"Created job {job.id}", extra={"job_id": job.id, "job_category": job.job_category}
    )
    return JSONResponse(
        status_code=201,
        content={"message": "Job posted successfully", "job": job.to_json()},
    )


@router.put("/{job_id}")
async def update_job(
    job_id: str,
    request: Request,
    repository: JobRepository = Depends(get_repository),
    settings: Settings = Depends(get_app_settings),
):
    """Overwrite a job with the submitted field set.

    A newly uploaded logo replaces the stored one; otherwise the submitted
    ``logo`` text is stored as-is.
    """
    data, logo = await read_job_body(request, settings)
    try:
        if logo:
            data["logo"] = logo
        fields = parse_job_fields(data, for_update=True)
        job = await repository.find_by_id_and_update(job_id, fields)
    except InvalidJobIdError:
        logger.warning(f"Malformed job id {job_id!r}")
        discard_upload(logo, settings.upload_dir)
        return error_response(404, JOB_NOT_FOUND)
    except Exception as e:
        logger.error(f"Error updating job {job_id}: {e}")
        discard_upload(logo, settings.upload_dir)
        return error_response(400, str(e))

    if job is None:
        discard_upload(logo, settings.upload_dir)
        return error_response(404, JOB_NOT_FOUND)
    logger.info(f"Updated job {job.id}", extra={"job_id": job.id})
    return JSONResponse(
        status_code=200,
        content={"message": "Job updated successfully", "job": job.to_json()},
    )


@router.delete("/{job_id}")
async def delete_job(job_id: str, repository: JobRepository = Depends(get_repository)):
    try:
        job = await repository.find_by_id_and_delete(job_id)
    except InvalidJobIdError:
        logger.warning(f"Malformed job id {job_id!r}")
        return error_response(404, JOB_NOT_FOUND)
    except Exception as e:
        logger.error(f"Error deleting job {job_id}: {e}")
        return error_response(500, str(e))
    if job is None:
        return error_response(404, JOB_NOT_FOUND)

    logger.info(f"Deleted job {job.id}", extra={"job_id": job.id})
    return JSONResponse(
        status_code=200,
        content={"message": "Job deleted successfully", "job": job.to_json()},
    )
