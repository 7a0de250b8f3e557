"""
Category Validators - per-category checks on a sanitized trial submission.

Each validator returns a ValidationOutcome. Messy but present data degrades to
warnings; only a submission with nothing in it at all is a blocking error
(research and communication keep a plain minimum-length rule).
"""
import re
from typing import Any, Dict, List

from .logging import logger
from .models import TaskCategory, ValidationOutcome
from .records import IndexedRecord, extract_records

# Record-style thresholds
COMPLETE_RECORD_MIN_FIELDS = 2
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
PHONE_DIGITS = 10

# Free-text content thresholds
CONTENT_MIN_CHARS = 30
CONTENT_MIN_WORDS = 10
CONTENT_SUGGESTED_WORDS = 30
CONTENT_MAX_CHARS = 10000
CASE_CHECK_MIN_CHARS = 20
REPETITION_MIN_RATIO = 0.5
REPETITION_MIN_WORDS = 20
SENTENCE_CHECK_MIN_WORDS = 15

RESEARCH_MIN_CHARS = 100
COMMUNICATION_MIN_CHARS = 30

_INDIAN_MOBILE_PREFIX = re.compile(r'^[6-9]')


def normalize_category(value: Any) -> str:
    """
    Normalize a category from various formats to the TaskCategory constant.

    Handles:
        - 'DATA_ENTRY' / 'data entry' / 'data-entry' -> 'DATA_ENTRY'
        - 'Content Writing' / 'writing' -> 'CONTENT'
        - 'contact organization' -> 'ORGANIZATION'
    Unknown values are returned upper-cased so the generic fallback applies.
    """
    normalized = str(value or '').strip().lower().replace('-', ' ').replace('_', ' ')

    category_map = {
        'data entry': TaskCategory.DATA_ENTRY,
        'data validation': TaskCategory.DATA_ENTRY,
        'content': TaskCategory.CONTENT,
        'content writing': TaskCategory.CONTENT,
        'content creation': TaskCategory.CONTENT,
        'writing': TaskCategory.CONTENT,
        'organization': TaskCategory.ORGANIZATION,
        'contact organization': TaskCategory.ORGANIZATION,
        'research': TaskCategory.RESEARCH,
        'web research': TaskCategory.RESEARCH,
        'communication': TaskCategory.COMMUNICATION,
        'customer communication': TaskCategory.COMMUNICATION,
    }

    return category_map.get(normalized, normalized.upper().replace(' ', '_'))


# =============================================================================
# FIELD ADVISORIES (never blocking)
# =============================================================================

def check_name(label: str, name: str, what: str = 'Name') -> List[str]:
    warnings = []
    if len(name) < NAME_MIN_LENGTH:
        warnings.append(f'{label}: {what} "{name}" seems very short - please double-check')
    elif len(name) > NAME_MAX_LENGTH:
        warnings.append(f'{label}: {what} seems unusually long - please verify')
    if name.islower():
        warnings.append(f'{label}: Consider proper capitalization for {what.lower()} "{name}"')
    return warnings


def check_phone(label: str, phone: str) -> List[str]:
    digits = re.sub(r'\D', '', phone)
    if not digits:
        return [f'{label}: Phone field contains no digits']
    if len(digits) < PHONE_DIGITS:
        return [f'{label}: Phone "{phone}" seems incomplete (found {len(digits)} digits)']
    if len(digits) > PHONE_DIGITS:
        return [f'{label}: Phone "{phone}" seems too long (found {len(digits)} digits)']
    if not _INDIAN_MOBILE_PREFIX.match(digits):
        return [f'{label}: Phone "{phone}" doesn\'t start with 6-9 (are you sure it\'s a mobile number?)']
    return []


def check_email(label: str, email: str) -> List[str]:
    if '@' not in email:
        return [f'{label}: Email "{email}" missing @ symbol']
    if '.' not in email:
        return [f'{label}: Email "{email}" missing domain extension']
    return []


def check_city(label: str, city: str) -> List[str]:
    if len(city) < 2:
        return [f'{label}: City "{city}" seems very short']
    if re.search(r'\d', city):
        return [f'{label}: City "{city}" contains numbers - please verify']
    return []


# =============================================================================
# RECORD-STYLE CATEGORIES
# =============================================================================

def _grade_records(records: List[IndexedRecord], label: str, outcome: ValidationOutcome) -> int:
    """Add partial-entry warnings and return the number of complete records."""
    complete = 0
    for record in records:
        if record.fields_with_content >= COMPLETE_RECORD_MIN_FIELDS:
            complete += 1
        else:
            outcome.add_warning(
                f'{label} {record.position}: Only one field filled - '
                'try to complete more fields when data is available'
            )
    return complete


def validate_data_entry(submitted_work: Dict[str, Any]) -> ValidationOutcome:
    """Data entry: ``entry_<i>_{name,phone,email,city}`` records."""
    outcome = ValidationOutcome()
    records = extract_records(submitted_work, 'entry')

    if not records:
        outcome.add_error('Please attempt at least one data entry to demonstrate your skills')
        return outcome

    complete = _grade_records(records, 'Entry', outcome)

    for record in records:
        label = f'Entry {record.position}'
        name = record.text('name')
        phone = record.text('phone')
        email = record.text('email')
        city = record.text('city')
        if name:
            for warning in check_name(label, name):
                outcome.add_warning(warning)
        if phone:
            for warning in check_phone(label, phone):
                outcome.add_warning(warning)
        if email:
            for warning in check_email(label, email):
                outcome.add_warning(warning)
        if city:
            for warning in check_city(label, city):
                outcome.add_warning(warning)

    logger.info(f"Data entry: {complete} complete and {len(records) - complete} partial entries")
    return outcome


def validate_organization(submitted_work: Dict[str, Any]) -> ValidationOutcome:
    """Contact organization: ``org_<i>_{name,phone,email,company}`` records."""
    outcome = ValidationOutcome()
    records = extract_records(submitted_work, 'org')

    if not records:
        outcome.add_error('Please organize at least one contact with some information')
        return outcome

    complete = _grade_records(records, 'Contact', outcome)

    for record in records:
        label = f'Contact {record.position}'
        name = record.text('name')
        phone = record.text('phone')
        email = record.text('email')
        company = record.text('company')
        if name:
            for warning in check_name(label, name):
                outcome.add_warning(warning)
            if '  ' in name:
                outcome.add_warning(
                    f'{label}: Extra spaces in name "{name}" - clients appreciate clean formatting'
                )
        if phone:
            for warning in check_phone(label, phone):
                outcome.add_warning(warning)
        if email:
            for warning in check_email(label, email):
                outcome.add_warning(warning)
        if company:
            for warning in check_name(label, company, what='Company'):
                outcome.add_warning(warning)

    logger.info(f"Organization: {complete} complete and {len(records) - complete} partial contacts")
    return outcome


# =============================================================================
# FREE-TEXT CATEGORIES
# =============================================================================

def validate_content(submitted_work: Dict[str, Any]) -> ValidationOutcome:
    """Content writing: a single ``content`` field, judged on effort not polish."""
    outcome = ValidationOutcome()
    raw = submitted_work.get('content')
    content = raw.strip() if isinstance(raw, str) else ''

    if not content:
        outcome.add_error('Please write some content to showcase your writing skills')
        return outcome

    if len(content) < CONTENT_MIN_CHARS:
        outcome.add_error(
            'Please write at least a few sentences to show your writing style '
            f'(minimum {CONTENT_MIN_CHARS} characters)'
        )
        return outcome

    words = content.split()
    word_count = len(words)

    if word_count < CONTENT_MIN_WORDS:
        outcome.add_error(f'Please write at least {CONTENT_MIN_WORDS} words to demonstrate your writing ability')
        return outcome

    if len(content) > CONTENT_MAX_CHARS:
        outcome.add_warning('Content is quite long - for most client tasks, concise writing is preferred')

    if word_count < CONTENT_SUGGESTED_WORDS:
        outcome.add_warning(
            f'Consider writing a bit more to fully showcase your skills (currently {word_count} words)'
        )

    if len(content) > CASE_CHECK_MIN_CHARS:
        if content.isupper():
            outcome.add_warning('Consider using normal capitalization for better readability')
        elif content.islower():
            outcome.add_warning('Try using proper capitalization to make your content more professional')

    unique_words = {w.lower() for w in words}
    if word_count > REPETITION_MIN_WORDS and len(unique_words) / word_count < REPETITION_MIN_RATIO:
        outcome.add_warning('Try using more varied vocabulary to make your content more engaging')

    sentences = [s for s in re.split(r'[.!?]+', content) if s.strip()]
    if word_count > SENTENCE_CHECK_MIN_WORDS and len(sentences) < 2:
        outcome.add_warning('Consider breaking your content into multiple sentences for better flow')

    return outcome


def _validate_min_length(submitted_work: Dict[str, Any], field: str, min_chars: int,
                         missing_message: str, short_message: str) -> ValidationOutcome:
    outcome = ValidationOutcome()
    raw = submitted_work.get(field)
    text = raw.strip() if isinstance(raw, str) else ''

    if not text:
        outcome.add_error(missing_message)
    elif len(text) < min_chars:
        outcome.add_error(short_message)
    return outcome


def validate_research(submitted_work: Dict[str, Any]) -> ValidationOutcome:
    return _validate_min_length(
        submitted_work, 'research', RESEARCH_MIN_CHARS,
        'Research findings are required',
        f'Research findings must be at least {RESEARCH_MIN_CHARS} characters long',
    )


def validate_communication(submitted_work: Dict[str, Any]) -> ValidationOutcome:
    return _validate_min_length(
        submitted_work, 'communication', COMMUNICATION_MIN_CHARS,
        'Communication content is required',
        f'Communication content must be at least {COMMUNICATION_MIN_CHARS} characters long',
    )


def validate_generic(submitted_work: Dict[str, Any]) -> ValidationOutcome:
    """Fallback for categories without specific rules."""
    outcome = ValidationOutcome()
    if not submitted_work:
        outcome.add_error('Submitted work cannot be empty')
    return outcome


VALIDATORS = {
    TaskCategory.DATA_ENTRY: validate_data_entry,
    TaskCategory.CONTENT: validate_content,
    TaskCategory.ORGANIZATION: validate_organization,
    TaskCategory.RESEARCH: validate_research,
    TaskCategory.COMMUNICATION: validate_communication,
}


def validate_category(category: Any, submitted_work: Dict[str, Any]) -> ValidationOutcome:
    """Dispatch to the validator for a category, falling back to the generic check."""
    validator = VALIDATORS.get(normalize_category(category), validate_generic)
    outcome = validator(submitted_work)

    if outcome.warnings:
        logger.info(f"Category {category} feedback: {outcome.warnings}")
    return outcome
