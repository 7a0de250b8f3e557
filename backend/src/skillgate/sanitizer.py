"""
Sanitization of free-form submission and worker-profile fields.

Every function here is total: bad input is clamped or dropped, never rejected.
"""
import re
from typing import Any, Dict

SUBMISSION_FIELD_MAX_LENGTH = 1000
NAME_MAX_LENGTH = 50
PHONE_MAX_DIGITS = 10
EMAIL_MAX_LENGTH = 100
PREVIOUS_WORK_MAX_LENGTH = 500

EDUCATION_LEVELS = ('10th', '12th', 'diploma', 'graduate', 'postgraduate', 'other')
DEFAULT_AVAILABLE_HOURS = 3

_MARKUP_CHARS = re.compile(r'[<>]')


def clean_text(value: str, max_length: int) -> str:
    """Trim, strip markup brackets and truncate a single string."""
    return _MARKUP_CHARS.sub('', value.strip())[:max_length]


def sanitize_submitted_work(submitted_work: Any) -> Dict[str, Any]:
    """
    Sanitize a submission payload.

    String values are trimmed, stripped of '<' and '>' and truncated to
    SUBMISSION_FIELD_MAX_LENGTH. Nested mappings are sanitized recursively;
    any other value passes through unchanged.
    """
    if not isinstance(submitted_work, dict):
        return {}

    sanitized = {}
    for key, value in submitted_work.items():
        if isinstance(value, str):
            sanitized[key] = clean_text(value, SUBMISSION_FIELD_MAX_LENGTH)
        elif isinstance(value, dict):
            sanitized[key] = sanitize_submitted_work(value)
        else:
            sanitized[key] = value
    return sanitized


def sanitize_worker_data(worker_data: Any) -> Dict[str, Any]:
    """Clean the optional worker profile sent along with a trial submission."""
    if not isinstance(worker_data, dict):
        return {}

    sanitized = {}

    name = worker_data.get('name')
    if isinstance(name, str) and name:
        sanitized['name'] = clean_text(name, NAME_MAX_LENGTH)

    phone = worker_data.get('phone')
    if isinstance(phone, (str, int)) and phone:
        sanitized['phone'] = re.sub(r'\D', '', str(phone))[:PHONE_MAX_DIGITS]

    email = worker_data.get('email')
    if isinstance(email, str) and email:
        sanitized['email'] = clean_text(email, EMAIL_MAX_LENGTH).lower()

    education = worker_data.get('educationLevel')
    if education:
        sanitized['educationLevel'] = education if education in EDUCATION_LEVELS else 'other'

    hours = worker_data.get('availableHours')
    if hours:
        try:
            hours = int(hours)
        except (TypeError, ValueError):
            hours = DEFAULT_AVAILABLE_HOURS
        sanitized['availableHours'] = hours if 1 <= hours <= 12 else DEFAULT_AVAILABLE_HOURS

    previous_work = worker_data.get('previousWork')
    if isinstance(previous_work, str) and previous_work:
        sanitized['previousWork'] = clean_text(previous_work, PREVIOUS_WORK_MAX_LENGTH)

    return sanitized
