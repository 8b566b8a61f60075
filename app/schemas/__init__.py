# app/schemas/__init__.py
from .common import ServiceResult, MessageResponse
from .form_schema import (
    FieldType,
    FieldCategory,
    FieldValidation,
    FormField,
    CustomField,
    FormSection,
    FormSchema,
    FieldTemplate,
)
from .application import (
    ApplicationStatus,
    ApplicationData,
    ApplicationResponse,
    WizardStep,
    WizardState,
)
from .csv_import import ParsedApplication, RowError, ImportResult, ImportPreview

__all__ = [
    "ServiceResult",
    "MessageResponse",
    "FieldType",
    "FieldCategory",
    "FieldValidation",
    "FormField",
    "CustomField",
    "FormSection",
    "FormSchema",
    "FieldTemplate",
    "ApplicationStatus",
    "ApplicationData",
    "ApplicationResponse",
    "WizardStep",
    "WizardState",
    "ParsedApplication",
    "RowError",
    "ImportResult",
    "ImportPreview",
]
