# app/services/form_builder.py
"""
Form schema editing for the admin form builder.

Every editor operation copies the current schema, applies one change,
re-normalises section/field order and hands the new schema to the
optional on_change callback. The schema passed in is never mutated.
"""
import logging
from typing import Callable, Optional, List, Dict, Any, Union

from app.schemas.form_schema import FormSchema, FormSection, FormField, FieldTemplate
from app.utils.field_library import (
    DEFAULT_FORM_TEMPLATES,
    STANDARD_SECTIONS,
    create_field_from_template,
    get_field_template,
    get_template_schema,
    random_suffix,
    timestamp_ms,
)

logger = logging.getLogger(__name__)

LEGACY_SECTION_ID = "custom"
LEGACY_SECTION_TITLE = "Scholarship Questions"
LEGACY_SECTION_DESCRIPTION = "Answer questions specific to this scholarship"


def _renumber_sections(sections: List[FormSection]) -> None:
    for index, section in enumerate(sections):
        section.order = index + 1


def _renumber_fields(fields: List[FormField]) -> None:
    for index, field in enumerate(fields):
        field.order = index + 1


def _without_order(partial: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in partial.items() if key != "order"}


def field_ids(schema: FormSchema) -> List[str]:
    return [field.id for section in schema.sections for field in section.fields]


def find_field(schema: FormSchema, field_id: str) -> Optional[FormField]:
    for section in schema.sections:
        for field in section.fields:
            if field.id == field_id:
                return field
    return None


def normalize_schema(schema: FormSchema) -> FormSchema:
    """Copy with orders rewritten from list position. Duplicate field ids raise ValueError."""
    ids = field_ids(schema)
    duplicates = sorted({field_id for field_id in ids if ids.count(field_id) > 1})
    if duplicates:
        raise ValueError(f"Duplicate field ids: {', '.join(duplicates)}")
    normalized = schema.model_copy(deep=True)
    _renumber_sections(normalized.sections)
    for section in normalized.sections:
        _renumber_fields(section.fields)
    return normalized


def coerce_schema(value: Union[FormSchema, Dict[str, Any], None]) -> FormSchema:
    if value is None:
        return FormSchema()
    if isinstance(value, FormSchema):
        return value
    return FormSchema.model_validate(value)


class FormSchemaEditor:
    def __init__(self, schema: Union[FormSchema, Dict[str, Any], None] = None,
                 on_change: Optional[Callable[[FormSchema], None]] = None):
        self.schema = coerce_schema(schema).model_copy(deep=True)
        self.on_change = on_change

    def _commit(self, schema: FormSchema) -> FormSchema:
        self.schema = schema
        if self.on_change is not None:
            self.on_change(schema.model_copy(deep=True))
        return schema

    def _working_copy(self) -> FormSchema:
        return self.schema.model_copy(deep=True)

    # SECTION operations

    def add_section(self) -> FormSchema:
        schema = self._working_copy()
        existing = {s.id for s in schema.sections}
        section_id = f"section_{timestamp_ms()}"
        while section_id in existing:
            section_id = f"section_{timestamp_ms()}_{random_suffix(4)}"
        schema.sections.append(FormSection(
            id=section_id,
            title="New Section",
            description="Section description",
            order=len(schema.sections) + 1,
            fields=[],
        ))
        return self._commit(schema)

    def update_section(self, index: int, partial: Dict[str, Any]) -> FormSchema:
        """Merge partial into the section. Order follows list position; an order key is ignored."""
        schema = self._working_copy()
        partial = _without_order(partial)
        new_id = partial.get("id")
        if new_id is not None and new_id in {s.id for i, s in enumerate(schema.sections) if i != index}:
            raise ValueError(f"Duplicate section id: {new_id}")
        current = schema.sections[index].model_dump(by_alias=True)
        current.update(partial)
        schema.sections[index] = FormSection.model_validate(current)
        return self._commit(schema)

    def remove_section(self, index: int) -> FormSchema:
        schema = self._working_copy()
        schema.sections.pop(index)
        _renumber_sections(schema.sections)
        return self._commit(schema)

    def move_section(self, from_index: int, to_index: int) -> FormSchema:
        schema = self._working_copy()
        section = schema.sections.pop(from_index)
        schema.sections.insert(to_index, section)
        _renumber_sections(schema.sections)
        return self._commit(schema)

    # FIELD operations

    def _unique_field_id(self, schema: FormSchema, field_type: str, section_index: int) -> str:
        taken = set(field_ids(schema))
        while True:
            candidate = f"{field_type}_{section_index}_{timestamp_ms()}_{random_suffix()}"
            if candidate not in taken:
                return candidate
            logger.warning(f"Field id collision on {candidate}, regenerating")

    def add_field_to_section(self, section_index: int, template: Union[FieldTemplate, str]) -> FormSchema:
        if isinstance(template, str):
            found = get_field_template(template)
            if found is None:
                raise KeyError(f"Unknown field template: {template}")
            template = found

        schema = self._working_copy()
        section = schema.sections[section_index]
        new_id = self._unique_field_id(schema, template.type, section_index)
        field = create_field_from_template(template, new_id)
        field.order = len(section.fields) + 1
        section.fields.append(field)
        return self._commit(schema)

    def update_field(self, section_index: int, field_index: int, partial: Dict[str, Any]) -> FormSchema:
        schema = self._working_copy()
        fields = schema.sections[section_index].fields
        partial = _without_order(partial)
        new_id = partial.get("id")
        if new_id is not None and new_id != fields[field_index].id and new_id in field_ids(schema):
            raise ValueError(f"Duplicate field id: {new_id}")
        current = fields[field_index].model_dump(by_alias=True, exclude_none=True)
        current.update(partial)
        fields[field_index] = FormField.model_validate(current)
        return self._commit(schema)

    def remove_field(self, section_index: int, field_index: int) -> FormSchema:
        schema = self._working_copy()
        fields = schema.sections[section_index].fields
        fields.pop(field_index)
        _renumber_fields(fields)
        return self._commit(schema)

    def move_field(self, from_section: int, from_field: int, to_section: int, to_field: int) -> FormSchema:
        schema = self._working_copy()
        source = schema.sections[from_section].fields
        field = source.pop(from_field)
        target = schema.sections[to_section].fields
        target.insert(to_field, field)
        _renumber_fields(source)
        if to_section != from_section:
            _renumber_fields(target)
        return self._commit(schema)

    # TEMPLATE loading (replaces the whole schema)

    def load_template(self, key: str) -> FormSchema:
        return self._commit(get_template_schema(key))


def migrate_legacy_custom_fields(custom_fields: Optional[List[Any]]) -> FormSchema:
    """
    Convert a flat legacy custom_fields list into a sectioned schema:
    the four standard sections followed by a "Scholarship Questions"
    section holding the legacy fields, renumbered from 1.
    """
    schema = get_template_schema("standard")
    legacy = [f if isinstance(f, FormField) else FormField.model_validate(f) for f in (custom_fields or [])]
    legacy = [f.model_copy(deep=True) for f in legacy]
    _renumber_fields(legacy)
    schema.sections.append(FormSection(
        id=LEGACY_SECTION_ID,
        title=LEGACY_SECTION_TITLE,
        description=LEGACY_SECTION_DESCRIPTION,
        order=len(STANDARD_SECTIONS) + 1,
        fields=legacy,
    ))
    return schema


def resolve_form_schema(form_schema: Optional[Dict[str, Any]], custom_fields: Optional[List[Any]]) -> FormSchema:
    """Schema an admin edits: stored schema, else migrated legacy fields, else the standard template."""
    if form_schema and form_schema.get("sections") is not None:
        return FormSchema.model_validate(form_schema)
    if custom_fields:
        logger.info(f"Migrating {len(custom_fields)} legacy custom field(s) into a sectioned schema")
        return migrate_legacy_custom_fields(custom_fields)
    return get_template_schema("standard")


def apply_operation(editor: FormSchemaEditor, op: Dict[str, Any]) -> FormSchema:
    """Dispatch one builder operation described as a dict (HTTP payload)."""
    name = op.get("op")
    if name == "add_section":
        return editor.add_section()
    if name == "update_section":
        return editor.update_section(op["section_index"], op.get("changes") or {})
    if name == "remove_section":
        return editor.remove_section(op["section_index"])
    if name == "move_section":
        return editor.move_section(op["from_index"], op["to_index"])
    if name == "add_field":
        return editor.add_field_to_section(op["section_index"], op["template_id"])
    if name == "update_field":
        return editor.update_field(op["section_index"], op["field_index"], op.get("changes") or {})
    if name == "remove_field":
        return editor.remove_field(op["section_index"], op["field_index"])
    if name == "move_field":
        return editor.move_field(op["from_section"], op["from_field"], op["to_section"], op["to_field"])
    if name == "load_template":
        return editor.load_template(op["template_key"])
    raise ValueError(f"Unknown builder operation: {name}")


def check_operation_bounds(schema: FormSchema, op: Dict[str, Any]) -> Optional[str]:
    """Return an error message when an operation's indices fall outside the schema."""
    sections = schema.sections
    n_sections = len(sections)

    def section_ok(i):
        return i is not None and 0 <= i < n_sections

    def field_ok(si, fi, inclusive=False):
        limit = len(sections[si].fields) + (1 if inclusive else 0)
        return fi is not None and 0 <= fi < limit

    name = op.get("op")
    if name in ("update_section", "remove_section", "add_field"):
        if not section_ok(op.get("section_index")):
            return f"Section index out of range: {op.get('section_index')}"
    elif name == "move_section":
        if not section_ok(op.get("from_index")) or not section_ok(op.get("to_index")):
            return "Section move indices out of range"
    elif name in ("update_field", "remove_field"):
        si = op.get("section_index")
        if not section_ok(si) or not field_ok(si, op.get("field_index")):
            return "Field index out of range"
    elif name == "move_field":
        fs, ts = op.get("from_section"), op.get("to_section")
        if not section_ok(fs) or not section_ok(ts):
            return "Section index out of range"
        if not field_ok(fs, op.get("from_field")):
            return "Field index out of range"
        # Moving within a section removes first, so the target length is unchanged
        if not field_ok(ts, op.get("to_field"), inclusive=(fs != ts)):
            return "Target field index out of range"
    if name == "add_field" and get_field_template(op.get("template_id") or "") is None:
        return f"Unknown field template: {op.get('template_id')}"
    if name == "load_template" and op.get("template_key") not in DEFAULT_FORM_TEMPLATES:
        return f"Unknown form template: {op.get('template_key')}"
    return None
