"""Job Record schema.

The pydantic models here are the schema of the storage layer: every write
goes through ``parse_job_fields`` before it reaches the repository.
"""

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

REQUIRED_FIELDS = (
    "jobTitle",
    "location",
    "employmentType",
    "description",
    "applicationEmail",
    "companyName",
    "jobCategory",
)
OPTIONAL_TEXT_FIELDS = ("salary", "tagline", "logo")


class JobValidationError(ValueError):
    """Raised when a write presents missing or malformed fields."""

    def __init__(self, errors: List[Dict[str, str]]):
        self.errors = errors
        details = ", ".join(f"{e['field']}: {e['message']}" for e in errors)
        super().__init__(f"Job validation failed: {details}")


class JobFields(BaseModel):
    """Writable fields of a job posting."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        extra="ignore",
        coerce_numbers_to_str=True,
    )

    job_title: str = Field(min_length=1)
    location: str = Field(min_length=1)
    remote: bool = False
    employment_type: str = Field(min_length=1)
    description: str = Field(min_length=1)
    application_email: str = Field(min_length=1)
    salary: Optional[str] = "Not specified"
    company_name: str = Field(min_length=1)
    tagline: Optional[str] = ""
    logo: Optional[str] = ""
    job_category: str = Field(min_length=1)


class JobRecord(JobFields):
    """A stored job posting."""

    id: str
    posted_at: datetime

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


def _describe(error: Dict[str, Any]) -> Dict[str, str]:
    field = ".".join(str(part) for part in error["loc"]) or "body"
    blank = error["type"] in ("missing", "string_too_short") or error.get("input", "") is None
    if blank and field in REQUIRED_FIELDS:
        message = f"Path `{field}` is required."
    else:
        message = f"Cast to {field} failed: {error['msg']}"
    return {"field": field, "message": message}


def parse_job_fields(data: Mapping[str, Any], for_update: bool = False) -> JobFields:
    """Build a validated field set from a request body.

    ``remote`` is true only when the submitted value is the literal text
    "true". On update, omitted optional fields are overwritten with ``None``
    instead of taking their defaults.

    Raises:
        JobValidationError: If a required field is missing or a value has the
            wrong type
    """
    payload = dict(data)
    payload["remote"] = payload.get("remote") == "true"
    if for_update:
        for name in OPTIONAL_TEXT_FIELDS:
            payload.setdefault(name, None)
    try:
        return JobFields.model_validate(payload)
    except PydanticValidationError as e:
        raise JobValidationError([_describe(err) for err in e.errors()]) from e
