# app/utils/field_library.py
import random
import string
import time
from datetime import date
from typing import List, Optional, Dict, Any

from app.schemas.form_schema import FieldTemplate, FormField, FormSection, FormSchema


def _template(id, type, label, category, description, default_label=None, **default_props) -> FieldTemplate:
    return FieldTemplate(
        id=id,
        type=type,
        label=label,
        category=category,
        default_label=default_label or label,
        description=description,
        default_props=default_props,
    )


_current_year = date.today().year

FIELD_LIBRARY: List[FieldTemplate] = [
    # Personal
    _template("first_name", "text", "First Name", "personal", "Applicant's first name", required=True),
    _template("last_name", "text", "Last Name", "personal", "Applicant's last name", required=True),
    _template("date_of_birth", "date", "Date of Birth", "personal", "Applicant's birth date", required=False),

    # Contact
    _template("email", "email", "Email Address", "contact", "Primary email address", required=True),
    _template("phone", "phone", "Phone Number", "contact", "Primary phone number", required=False),
    _template("address", "text", "Street Address", "contact", "Full street address", required=False),
    _template("city", "text", "City", "contact", "City of residence", required=False),
    _template("state", "text", "State/Province", "contact", "State or province", required=False),
    _template("zip", "text", "ZIP/Postal Code", "contact", "ZIP or postal code", required=False),

    # Academic
    _template("school", "text", "School/University", "academic", "Name of educational institution", required=True),
    _template(
        "graduation_year", "number", "Graduation Year", "academic", "Expected or actual graduation year",
        required=True, validation={"min": _current_year - 10, "max": _current_year + 10},
    ),
    _template("major", "text", "Major/Field of Study", "academic", "Primary area of study", required=True),
    _template(
        "gpa", "number", "GPA", "academic", "Grade Point Average (0.0-4.0)",
        required=False, validation={"min": 0, "max": 4},
    ),
    _template(
        "academic_level", "select", "Academic Level", "academic", "Current level of education",
        required=True, options=["High School", "Undergraduate", "Graduate", "Doctoral", "Other"],
    ),

    # Essays
    _template(
        "career_goals", "textarea", "Career Goals", "essay", "Describe your career aspirations",
        required=False, validation={"minLength": 50},
    ),
    _template(
        "financial_need", "textarea", "Financial Need", "essay", "Explain your financial circumstances",
        required=False, validation={"minLength": 25},
    ),
    _template(
        "community_involvement", "textarea", "Community Involvement", "essay",
        "Describe your community service and involvement",
        required=False, validation={"minLength": 25},
    ),
    _template(
        "why_deserve_scholarship", "textarea", "Why do you deserve this scholarship?", "essay",
        "Explain why you should receive this scholarship",
        required=False, validation={"minLength": 25},
    ),
    _template("work_experience", "textarea", "Work Experience", "essay", "Describe your work and internship experience", required=False),
    _template("extracurricular_activities", "textarea", "Extracurricular Activities", "essay", "List your clubs, sports, and activities", required=False),
    _template("awards_and_honors", "textarea", "Awards and Honors", "essay", "List any awards, honors, or recognition received", required=False),

    # Custom building blocks
    _template("custom_text", "text", "Text Input", "custom", "Single-line text input", default_label="Text Field", required=False),
    _template("custom_textarea", "textarea", "Text Area", "custom", "Multi-line text input", default_label="Long Text", required=False),
    _template("custom_number", "number", "Number Input", "custom", "Numeric input field", default_label="Number Field", required=False),
    _template("custom_date", "date", "Date Picker", "custom", "Date selection field", default_label="Date Field", required=False),
    _template(
        "custom_select", "select", "Dropdown", "custom", "Dropdown selection field", default_label="Select Option",
        required=False, options=["Option 1", "Option 2", "Option 3"],
    ),
    _template("custom_checkbox", "checkbox", "Checkbox", "custom", "Single checkbox field", required=False),
    _template(
        "custom_file", "file", "File Upload", "custom", "File upload field", default_label="Upload File",
        required=False, acceptedFormats=[".pdf", ".doc", ".docx"], maxSize=5 * 1024 * 1024,
    ),
    _template("custom_email", "email", "Email Field", "custom", "Email input with validation", default_label="Email Address", required=False),
    _template("custom_phone", "phone", "Phone Field", "custom", "Phone number input with formatting", default_label="Phone Number", required=False),
]

_LIBRARY_BY_ID: Dict[str, FieldTemplate] = {t.id: t for t in FIELD_LIBRARY}


def get_field_template(template_id: str) -> Optional[FieldTemplate]:
    return _LIBRARY_BY_ID.get(template_id)


def get_fields_by_category(category: str) -> List[FieldTemplate]:
    return [t for t in FIELD_LIBRARY if t.category == category]


def random_suffix(length: int = 9) -> str:
    return "".join(random.choices(string.ascii_lowercase + string.digits, k=length))


def timestamp_ms() -> int:
    return int(time.time() * 1000)


def create_field_from_template(template: FieldTemplate, custom_id: Optional[str] = None) -> FormField:
    """
    Instantiate a FormField from a catalog entry.
    Without custom_id the id is type_timestamp_random.
    """
    field_id = custom_id or f"{template.type}_{timestamp_ms()}_{random_suffix()}"
    data: Dict[str, Any] = {
        "id": field_id,
        "type": template.type,
        "label": template.default_label,
        "required": bool(template.default_props.get("required", False)),
        "order": 1,
    }
    data.update(template.default_props)
    return FormField.model_validate(data)


def _section(section_id: str, title: str, description: str, order: int, field_ids: List[str]) -> FormSection:
    fields = []
    for index, field_id in enumerate(field_ids):
        field = create_field_from_template(_LIBRARY_BY_ID[field_id], field_id)
        fields.append(field.model_copy(update={"order": index + 1}))
    return FormSection(id=section_id, title=title, description=description, order=order, fields=fields)


STANDARD_SECTIONS = [
    ("personal", "Personal Information", "Tell us about yourself",
     ["first_name", "last_name", "email", "phone", "address", "city", "state", "zip", "date_of_birth"]),
    ("academic", "Academic Background", "Share your educational journey",
     ["school", "graduation_year", "major", "gpa", "academic_level"]),
    ("essays", "Essay Questions", "Help us understand your goals and motivations",
     ["career_goals", "financial_need", "community_involvement", "why_deserve_scholarship"]),
    ("additional", "Additional Information", "Share more about your experiences",
     ["work_experience", "extracurricular_activities", "awards_and_honors"]),
]

_TEMPLATE_DEFINITIONS = {
    "standard": {
        "name": "Standard Application",
        "description": "Complete application form with all standard fields",
        "sections": STANDARD_SECTIONS,
    },
    "minimal": {
        "name": "Minimal Application",
        "description": "Basic application with essential fields only",
        "sections": [
            ("basic", "Basic Information", "Essential information about you",
             ["first_name", "last_name", "email", "school", "major"]),
            ("essay", "Personal Statement", "Tell us about yourself",
             ["why_deserve_scholarship"]),
        ],
    },
    "academic": {
        "name": "Academic Focus",
        "description": "Emphasis on academic achievements and goals",
        "sections": [
            ("contact", "Contact Information", "How to reach you",
             ["first_name", "last_name", "email"]),
            ("academic", "Academic Information", "Your educational background and achievements",
             ["school", "graduation_year", "major", "gpa", "academic_level"]),
            ("achievements", "Academic Achievements", "Your accomplishments and future goals",
             ["awards_and_honors", "career_goals"]),
        ],
    },
}


def _build_templates() -> Dict[str, Dict[str, Any]]:
    templates = {}
    for key, definition in _TEMPLATE_DEFINITIONS.items():
        sections = [
            _section(section_id, title, description, order, field_ids)
            for order, (section_id, title, description, field_ids) in enumerate(definition["sections"], start=1)
        ]
        templates[key] = {
            "name": definition["name"],
            "description": definition["description"],
            "schema": FormSchema(sections=sections),
        }
    return templates


# Built once at import; callers get deep copies through get_template_schema
DEFAULT_FORM_TEMPLATES = _build_templates()


def get_template_schema(key: str) -> FormSchema:
    if key not in DEFAULT_FORM_TEMPLATES:
        raise KeyError(f"Unknown form template: {key}")
    return DEFAULT_FORM_TEMPLATES[key]["schema"].model_copy(deep=True)
