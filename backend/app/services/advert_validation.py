"""
Field-level validation for advert submissions.

Each check appends a ``FieldError``; callers decide what to do with the
list. ``AdvertValidationError`` carries the list out of the service layer.
"""
import re
from typing import NamedTuple

from email_validator import EmailNotValidError, validate_email

from app.models.advert import JOB_TYPES

EMBEDDED_EMAIL_REGEX = re.compile(r"([^@\s]+)@((?:[-a-z0-9]+\.)+[a-z]{2,})", re.IGNORECASE)
MIN_PASSWORD_LENGTH = 6

REQUIRED_FIELDS = [
    ("job_title", "Please specify a job title for this advert"),
    ("job_type", "Please choose a job type for this advert"),
    ("description", "Please ensure you give this advert a description"),
    ("telephone", "Please enter a telephone number"),
    ("submitters_forename", "Please enter your first name"),
    ("submitters_surname", "Please enter your surname"),
    ("reference", "Please supply a reference number of your choice to identify this advert"),
]


class FieldError(NamedTuple):
    field: str
    message: str


class AdvertValidationError(ValueError):
    def __init__(self, errors: list[FieldError]):
        self.errors = errors
        super().__init__("; ".join(f"{e.field}: {e.message}" for e in errors))


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def check_required(data: dict) -> list[FieldError]:
    return [FieldError(field, message) for field, message in REQUIRED_FIELDS if _blank(data.get(field))]


def check_job_type(data: dict) -> list[FieldError]:
    job_type = data.get("job_type")
    if _blank(job_type) or job_type in JOB_TYPES:
        return []
    return [FieldError("job_type", f"Job type must be one of: {', '.join(JOB_TYPES)}")]


def check_password(data: dict) -> list[FieldError]:
    password = data.get("password")
    if _blank(password):
        return [FieldError("password", "Please enter a password")]
    errors = []
    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(FieldError(
            "password",
            f"Please ensure your password is at least {MIN_PASSWORD_LENGTH} characters long",
        ))
    retype = data.get("password_retype")
    if retype is not None and retype != password:
        errors.append(FieldError(
            "password_retype", "Please ensure your password matches the confirmation field"
        ))
    return errors


def _valid_email(email) -> bool:
    if not isinstance(email, str):
        return False
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def check_email(data: dict) -> list[FieldError]:
    email = data.get("email")
    errors = []
    if not _valid_email(email):
        errors.append(FieldError(
            "email",
            "Your e-mail looks to be invalid to us. Please use an e-mail with the "
            "following format: name@name.co.uk",
        ))
    confirmation = data.get("email_confirmation")
    if confirmation is not None and confirmation != email:
        errors.append(FieldError(
            "email_confirmation",
            "Please ensure your e-mail address matches the confirmation field",
        ))
    return errors


def check_description(data: dict) -> list[FieldError]:
    description = data.get("description") or ""
    if EMBEDDED_EMAIL_REGEX.search(description):
        return [FieldError("description", "Email addresses are not allowed in job description field.")]
    return []


def validate_advert(data: dict, on_create: bool = True) -> list[FieldError]:
    """Validate a full advert payload.

    ``data`` holds the advert's field values after any update has been
    applied. Password and e-mail checks only run on create.
    """
    errors = check_required(data)
    errors += check_job_type(data)
    if on_create:
        errors += check_password(data)
        errors += check_email(data)
    errors += check_description(data)
    return errors
