# app/schemas/form_schema.py
from enum import Enum
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class FieldType(str, Enum):
    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    DATE = "date"
    SELECT = "select"
    CHECKBOX = "checkbox"
    FILE = "file"
    EMAIL = "email"
    PHONE = "phone"


class FieldCategory(str, Enum):
    PERSONAL = "personal"
    CONTACT = "contact"
    ACADEMIC = "academic"
    ESSAY = "essay"
    CUSTOM = "custom"


class FieldValidation(BaseModel):
    min_length: Optional[int] = Field(default=None, alias="minLength")
    max_length: Optional[int] = Field(default=None, alias="maxLength")
    min: Optional[float] = None
    max: Optional[float] = None
    pattern: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, title="FieldValidation")


class FormField(BaseModel):
    """A single typed input. Legacy flat custom fields share this shape."""
    id: str
    type: FieldType
    label: str
    required: bool = False
    order: int = 1
    placeholder: Optional[str] = None
    options: Optional[List[str]] = None
    validation: Optional[FieldValidation] = None
    accepted_formats: Optional[List[str]] = Field(default=None, alias="acceptedFormats")
    max_size: Optional[int] = Field(default=None, alias="maxSize")

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True, title="FormField")

    @model_validator(mode="after")
    def select_needs_options(self):
        if self.type == FieldType.SELECT and not self.options:
            raise ValueError(f"Select field {self.id} must define at least one option")
        return self


# Legacy name used by scholarships that predate sectioned schemas
CustomField = FormField


class FormSection(BaseModel):
    id: str
    title: str
    description: str = ""
    order: int = 1
    fields: List[FormField] = []

    model_config = ConfigDict(title="FormSection")


class FormSchema(BaseModel):
    sections: List[FormSection] = []

    model_config = ConfigDict(title="FormSchema")

    def to_json(self) -> Dict[str, Any]:
        """Shape stored in the scholarships.form_schema column."""
        return self.model_dump(by_alias=True, exclude_none=True)


class FieldTemplate(BaseModel):
    id: str
    type: FieldType
    label: str
    category: FieldCategory
    default_label: str = Field(alias="defaultLabel")
    description: str
    default_props: Dict[str, Any] = Field(default_factory=dict, alias="defaultProps")

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True, title="FieldTemplate")


class FormTemplateInfo(BaseModel):
    key: str
    name: str
    description: str
    sections: List[FormSection]


# SECTION: builder operations accepted over HTTP

class BuilderOperation(BaseModel):
    op: str  # add_section | update_section | remove_section | move_section | add_field | update_field | remove_field | move_field | load_template
    section_index: Optional[int] = None
    field_index: Optional[int] = None
    from_index: Optional[int] = None
    to_index: Optional[int] = None
    from_section: Optional[int] = None
    from_field: Optional[int] = None
    to_section: Optional[int] = None
    to_field: Optional[int] = None
    template_id: Optional[str] = None
    template_key: Optional[str] = None
    changes: Optional[Dict[str, Any]] = None


class BuilderOperationsRequest(BaseModel):
    operations: List[BuilderOperation]
