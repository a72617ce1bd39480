"""
Validation rules for job application payloads.

Validation Rules Documentation:
===============================

1. PERSONAL INFO (step 1)
   - firstName / lastName: required, at least 2 characters after trimming
   - email: required, local@domain.tld with no whitespace and a dot in the domain
   - phone: required, 7-20 characters of digits, spaces, '-', '+', '(' and ')'

2. WORK ELIGIBILITY (step 2)
   - workAuth: required, exactly 'yes' or 'no'
   - sponsorshipNeeded: required only when workAuth is 'no', 'yes' or 'no'
   - explanation: required only when workAuth is 'no', at least 20 characters after trimming

3. EXPERIENCE (step 3)
   - yearsExperience: required, whole number >= 0
   - portfolioUrl / resumeUrl: optional, http(s)://<host>.<tld> when not blank

Entry points:
=============
- validate_personal_info / validate_work_eligibility / validate_experience
  return errors keyed by bare field name (step gating).
- validate_application returns a ValidationResult keyed by
  'section.field' (server acceptance).
- validate_field checks one raw input value (live feedback).

All three read the same FIELD_RULES table. None of them raise for
malformed input; a wrong type is reported as a validation error.
"""

import re
from typing import Any, Callable, Dict, Mapping, Optional
from dataclasses import dataclass, field


@dataclass
class ValidationResult:
    """Container for whole-record validation results."""
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def valid(self) -> bool:
        return not self.errors

    def add_error(self, field: str, message: str):
        """Add a validation error."""
        self.errors[field] = message

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON response."""
        return {
            'valid': self.valid,
            'errors': dict(self.errors)
        }


class ValidationFailure(Exception):
    """Raised when an application is rejected for failing validation."""

    def __init__(self, errors: Dict[str, str], message: str = 'Validation failed'):
        super().__init__(message)
        self.errors = dict(errors)


# Constants for validation
MIN_NAME_LENGTH = 2
MIN_EXPLANATION_LENGTH = 20
YES_NO = ('yes', 'no')

# Regex patterns
EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
PHONE_PATTERN = re.compile(r'^[0-9\s\-+()]{7,20}$')
URL_PATTERN = re.compile(r'^https?://.+\..+')

MESSAGES = {
    'first_name': 'First name is required (minimum 2 characters)',
    'last_name': 'Last name is required (minimum 2 characters)',
    'email_required': 'Email is required',
    'email_format': 'Please enter a valid email address',
    'phone_required': 'Phone number is required',
    'phone_format': 'Please enter a valid phone number',
    'work_auth': 'Work authorization status is required',
    'sponsorship': 'Please indicate if you need sponsorship',
    'explanation': 'Please provide an explanation (minimum 20 characters)',
    'years_required': 'Years of experience is required',
    'years_format': 'Years of experience must be a non-negative integer',
    'url_format': 'Please enter a valid URL',
}

# Section keys and the fields each section always checks
PERSONAL_INFO = 'personalInfo'
WORK_ELIGIBILITY = 'workEligibility'
EXPERIENCE = 'experience'

SECTION_FIELDS = {
    PERSONAL_INFO: ('firstName', 'lastName', 'email', 'phone'),
    WORK_ELIGIBILITY: ('workAuth',),
    EXPERIENCE: ('yearsExperience', 'portfolioUrl', 'resumeUrl'),
}

# Only required when workAuth == 'no'
CONDITIONAL_FIELDS = ('sponsorshipNeeded', 'explanation')

_NO_CONTEXT = object()


def _as_text(value: Any) -> Optional[str]:
    """Return the value if it is a string, otherwise None."""
    return value if isinstance(value, str) else None


def coerce_years(value: Any) -> Any:
    """
    Coerce a raw years-of-experience input into a number.

    Blank text becomes None (unset). Integral text becomes an int, other
    numeric text a float, and anything unparseable is returned unchanged
    so that validation reports it.
    """
    if not isinstance(value, str):
        return value

    text = value.strip()
    if text == '':
        return None

    try:
        return int(text)
    except ValueError:
        pass

    try:
        number = float(text)
    except ValueError:
        return value

    if number.is_integer():
        return int(number)
    return number


def check_min_length(value: Any, min_length: int, message: str) -> Optional[str]:
    """Require a string whose trimmed length is at least min_length."""
    text = _as_text(value)
    if not text or len(text.strip()) < min_length:
        return message
    return None


def check_pattern(value: Any, pattern: re.Pattern, required_message: str,
                  format_message: str) -> Optional[str]:
    """Require a non-empty string that fully matches pattern."""
    text = _as_text(value)
    if not text:
        return required_message
    if not pattern.fullmatch(text):
        return format_message
    return None


def check_yes_no(value: Any, message: str) -> Optional[str]:
    if value not in YES_NO:
        return message
    return None


def check_years(value: Any) -> Optional[str]:
    """Require a whole number >= 0. Booleans and strings are not numbers."""
    if value is None or value == '':
        return MESSAGES['years_required']
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return MESSAGES['years_format']
    if isinstance(value, float) and not value.is_integer():
        return MESSAGES['years_format']
    if value < 0:
        return MESSAGES['years_format']
    return None


def check_optional_url(value: Any) -> Optional[str]:
    """Blank is fine; anything else must look like http(s)://host.tld."""
    if value is None:
        return None
    text = _as_text(value)
    if text is None:
        return MESSAGES['url_format']
    if text.strip() == '':
        return None
    if not URL_PATTERN.match(text):
        return MESSAGES['url_format']
    return None


FIELD_RULES: Dict[str, Callable[[Any], Optional[str]]] = {
    'firstName': lambda v: check_min_length(v, MIN_NAME_LENGTH, MESSAGES['first_name']),
    'lastName': lambda v: check_min_length(v, MIN_NAME_LENGTH, MESSAGES['last_name']),
    'email': lambda v: check_pattern(v, EMAIL_PATTERN, MESSAGES['email_required'],
                                     MESSAGES['email_format']),
    'phone': lambda v: check_pattern(v, PHONE_PATTERN, MESSAGES['phone_required'],
                                     MESSAGES['phone_format']),
    'workAuth': lambda v: check_yes_no(v, MESSAGES['work_auth']),
    'sponsorshipNeeded': lambda v: check_yes_no(v, MESSAGES['sponsorship']),
    'explanation': lambda v: check_min_length(v, MIN_EXPLANATION_LENGTH, MESSAGES['explanation']),
    'yearsExperience': check_years,
    'portfolioUrl': check_optional_url,
    'resumeUrl': check_optional_url,
}


def _section_data(section: Any) -> Mapping[str, Any]:
    """Treat anything that is not a mapping as an empty section."""
    if isinstance(section, Mapping):
        return section
    return {}


def _apply_rules(data: Mapping[str, Any], field_names, errors: Dict[str, str]):
    for name in field_names:
        message = FIELD_RULES[name](data.get(name))
        if message:
            errors[name] = message


def validate_personal_info(section: Any) -> Dict[str, str]:
    """Validate the personal info section. Keys are bare field names."""
    errors: Dict[str, str] = {}
    _apply_rules(_section_data(section), SECTION_FIELDS[PERSONAL_INFO], errors)
    return errors


def validate_work_eligibility(section: Any) -> Dict[str, str]:
    """
    Validate the work eligibility section.

    sponsorshipNeeded and explanation are only checked when workAuth is 'no';
    otherwise whatever they hold is ignored.
    """
    data = _section_data(section)
    errors: Dict[str, str] = {}
    _apply_rules(data, SECTION_FIELDS[WORK_ELIGIBILITY], errors)

    if data.get('workAuth') == 'no':
        _apply_rules(data, CONDITIONAL_FIELDS, errors)

    return errors


def validate_experience(section: Any) -> Dict[str, str]:
    """Validate the experience section. Keys are bare field names."""
    errors: Dict[str, str] = {}
    _apply_rules(_section_data(section), SECTION_FIELDS[EXPERIENCE], errors)
    return errors


SECTION_VALIDATORS = {
    PERSONAL_INFO: validate_personal_info,
    WORK_ELIGIBILITY: validate_work_eligibility,
    EXPERIENCE: validate_experience,
}


def validate_section(section_name: str, section: Any) -> Dict[str, str]:
    """
    Validate a single section by name.

    Args:
        section_name: One of 'personalInfo', 'workEligibility', 'experience'
        section: The section's data

    Returns:
        Errors keyed by bare field name
    """
    return SECTION_VALIDATORS[section_name](section)


def validate_application(payload: Any) -> ValidationResult:
    """
    Main validation entry point. Validates the entire application.

    Args:
        payload: The application record as a dict of its three sections

    Returns:
        ValidationResult with errors keyed by 'section.field'
    """
    result = ValidationResult()
    data = _section_data(payload)

    for section_name, validator in SECTION_VALIDATORS.items():
        for field_name, message in validator(data.get(section_name)).items():
            result.add_error(f'{section_name}.{field_name}', message)

    return result


def validate_field(name: str, value: Any, work_auth: Any = _NO_CONTEXT) -> Optional[str]:
    """
    Validate one raw input value in isolation.

    Values usually arrive as text straight from the form, so
    yearsExperience is parsed before it is checked.

    sponsorshipNeeded and explanation need the current workAuth value to
    know whether they are required at all, so callers must pass it for
    those two fields. They are never checked unless work_auth is 'no'.

    Args:
        name: Field name, e.g. 'email'
        value: Raw value
        work_auth: Current workAuth value, required for conditional fields

    Returns:
        The error message, or None if the value is valid
    """
    if name in CONDITIONAL_FIELDS:
        if work_auth is _NO_CONTEXT:
            raise ValueError(f'{name} can only be validated with the current workAuth value')
        if work_auth != 'no':
            return None

    rule = FIELD_RULES.get(name)
    if rule is None:
        return None

    if name == 'yearsExperience':
        value = coerce_years(value)

    return rule(value)
