# app/utils/validators.py
import re
import math
import logging
from datetime import date, datetime
from typing import Tuple, Optional, Dict, Any, List, Iterable

from app.schemas.form_schema import FormField, FieldType

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
PHONE_PATTERN = re.compile(r"[\+]?[1-9][\d]{0,15}")
PHONE_STRIP = re.compile(r"[\s\-\(\)]")

ACADEMIC_LEVELS = ["high_school", "undergraduate", "graduate", "other"]

GPA_MIN = 0.0
GPA_MAX = 4.0
GRADUATION_YEAR_WINDOW = 10


def is_empty(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, dict, tuple)):
        return len(value) == 0
    return False


class ApplicationValidator:
    """Format and range checks shared by the wizard and the CSV importer"""

    @staticmethod
    def is_valid_email(email: str) -> bool:
        if not email or not isinstance(email, str):
            return False
        return EMAIL_PATTERN.fullmatch(email) is not None

    @staticmethod
    def is_valid_phone(phone: str) -> bool:
        if not phone or not isinstance(phone, str):
            return False
        return PHONE_PATTERN.fullmatch(PHONE_STRIP.sub("", phone)) is not None

    @staticmethod
    def validate_graduation_year(value: Any, today: Optional[date] = None) -> Tuple[bool, Optional[int]]:
        """
        Accepts the current year plus or minus ten, inclusive.
        Returns: (is_valid, parsed_year)
        """
        current_year = (today or date.today()).year
        try:
            year = int(str(value).strip())
        except (TypeError, ValueError):
            return False, None
        if year < current_year - GRADUATION_YEAR_WINDOW or year > current_year + GRADUATION_YEAR_WINDOW:
            return False, year
        return True, year

    @staticmethod
    def validate_gpa(value: Any) -> Tuple[bool, Optional[float]]:
        """
        GPA on a 0.0 to 4.0 scale, inclusive.
        Returns: (is_valid, parsed_gpa)
        """
        try:
            gpa = float(str(value).strip())
        except (TypeError, ValueError):
            return False, None
        if not math.isfinite(gpa) or gpa < GPA_MIN or gpa > GPA_MAX:
            return False, gpa
        return True, gpa

    @staticmethod
    def is_valid_academic_level(value: str) -> bool:
        return value in ACADEMIC_LEVELS

    @staticmethod
    def is_valid_date(value: Any) -> bool:
        if isinstance(value, (date, datetime)):
            return True
        if not isinstance(value, str):
            return False
        text = value.strip()
        try:
            date.fromisoformat(text[:10])
            return True
        except ValueError:
            pass
        try:
            datetime.fromisoformat(text)
            return True
        except ValueError:
            return False


# ---------------------------------------------------------------------------
# Hardcoded per-field rules for the built-in wizard steps
# ---------------------------------------------------------------------------

_MIN_TWO_CHARS = {"first_name", "last_name"}
_REQUIRED_TEXT = {"address", "city", "state", "zip", "school", "major"}
_ESSAY_MINIMUMS = {
    "career_goals": 50,
    "financial_need": 25,
    "community_involvement": 25,
    "why_deserve_scholarship": 25,
}


def validate_standard_field(name: str, value: Any, today: Optional[date] = None) -> Optional[str]:
    """Return an error message for a built-in field, or None when it passes."""
    text = value.strip() if isinstance(value, str) else value

    if name in _MIN_TWO_CHARS:
        if not text or len(str(text)) < 2:
            return "Must be at least 2 characters"
    elif name == "email":
        if not text or not ApplicationValidator.is_valid_email(str(text)):
            return "Valid email address is required"
    elif name == "phone":
        if not text or not ApplicationValidator.is_valid_phone(str(text)):
            return "Valid phone number is required"
    elif name in _REQUIRED_TEXT:
        if is_empty(text):
            return "This field is required"
    elif name == "graduation_year":
        if is_empty(value) or not ApplicationValidator.validate_graduation_year(value, today)[0]:
            return "Please enter a valid graduation year"
    elif name == "gpa":
        if not is_empty(value):
            ok, _ = ApplicationValidator.validate_gpa(value)
            if not ok:
                return "GPA must be between 0.0 and 4.0"
    elif name in _ESSAY_MINIMUMS:
        minimum = _ESSAY_MINIMUMS[name]
        if not text or len(str(text)) < minimum:
            return f"Please provide at least {minimum} characters"
    return None


def validate_standard_fields(names: Iterable[str], data: Dict[str, Any], today: Optional[date] = None) -> Dict[str, str]:
    errors = {}
    for name in names:
        message = validate_standard_field(name, data.get(name), today)
        if message:
            errors[name] = message
    return errors


# ---------------------------------------------------------------------------
# Generic rules driven by each field's own validation metadata
# ---------------------------------------------------------------------------

def _format_size(size: int) -> str:
    return f"{size / (1024 * 1024):g}MB"


def validate_custom_field(field: FormField, value: Any) -> Optional[str]:
    if is_empty(value):
        if field.required:
            return f"{field.label} is required"
        return None

    rules = field.validation
    field_type = field.type

    if field_type in (FieldType.TEXT, FieldType.TEXTAREA):
        text = str(value)
        if rules is not None:
            if rules.min_length is not None and len(text.strip()) < rules.min_length:
                return f"Minimum {rules.min_length} characters"
            if rules.max_length is not None and len(text) > rules.max_length:
                return f"Maximum {rules.max_length} characters"
            if rules.pattern:
                try:
                    if re.search(rules.pattern, text) is None:
                        return "Invalid format"
                except re.error as e:
                    logger.warning(f"Ignoring invalid pattern on field {field.id}: {e}")

    elif field_type == FieldType.NUMBER:
        try:
            number = float(value)
        except (TypeError, ValueError):
            return "Please enter a valid number"
        if not math.isfinite(number):
            return "Please enter a valid number"
        if rules is not None:
            if rules.min is not None and number < rules.min:
                return f"Value must be at least {rules.min:g}"
            if rules.max is not None and number > rules.max:
                return f"Value must be at most {rules.max:g}"

    elif field_type == FieldType.EMAIL:
        if not ApplicationValidator.is_valid_email(str(value).strip()):
            return "Valid email address is required"

    elif field_type == FieldType.PHONE:
        if not ApplicationValidator.is_valid_phone(str(value).strip()):
            return "Valid phone number is required"

    elif field_type == FieldType.DATE:
        if not ApplicationValidator.is_valid_date(value):
            return "Please enter a valid date"

    elif field_type == FieldType.SELECT:
        if field.options and value not in field.options:
            return "Please select a valid option"

    elif field_type == FieldType.FILE:
        if isinstance(value, dict):
            size = value.get("size") or value.get("file_size")
            if field.max_size and size and size > field.max_size:
                return f"File must be smaller than {_format_size(field.max_size)}"
            name = value.get("name") or value.get("file_name") or ""
            if field.accepted_formats and name:
                extension = "." + name.rsplit(".", 1)[-1].lower() if "." in name else ""
                if extension not in [fmt.lower() for fmt in field.accepted_formats]:
                    return f"Accepted formats: {', '.join(field.accepted_formats)}"

    elif field_type == FieldType.CHECKBOX:
        pass

    else:
        raise ValueError(f"Unhandled field type: {field_type}")

    return None


def validate_custom_fields(fields: List[FormField], responses: Dict[str, Any]) -> Dict[str, str]:
    """Validate answers keyed by field id. Returns {field_id: message} for failures."""
    errors = {}
    for field in fields:
        message = validate_custom_field(field, (responses or {}).get(field.id))
        if message:
            errors[field.id] = message
    return errors
