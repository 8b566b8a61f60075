import re

import pytest

from app.schemas.form_schema import FormSchema, FormField
from app.services import form_builder
from app.services.form_builder import (
    FormSchemaEditor,
    apply_operation,
    check_operation_bounds,
    field_ids,
    migrate_legacy_custom_fields,
    normalize_schema,
    resolve_form_schema,
)
from app.utils.field_library import (
    FIELD_LIBRARY,
    DEFAULT_FORM_TEMPLATES,
    create_field_from_template,
    get_field_template,
    get_fields_by_category,
    get_template_schema,
)

LEGACY_FIELDS = [
    {"id": "essay_1", "type": "textarea", "label": "Tell us about a logging operation you visited", "required": True, "order": 4},
    {"id": "ffa_member", "type": "checkbox", "label": "FFA member", "order": 9},
]


def assert_orders_contiguous(schema: FormSchema):
    assert [s.order for s in schema.sections] == list(range(1, len(schema.sections) + 1))
    for section in schema.sections:
        assert [f.order for f in section.fields] == list(range(1, len(section.fields) + 1))


# --- field library ---

def test_field_library_has_thirty_templates_with_unique_ids():
    """Test the catalog size and id uniqueness"""
    ids = [t.id for t in FIELD_LIBRARY]
    assert len(ids) == 30
    assert len(set(ids)) == 30


def test_fields_by_category():
    assert [t.id for t in get_fields_by_category("personal")] == ["first_name", "last_name", "date_of_birth"]
    assert len(get_fields_by_category("custom")) == 9
    assert get_fields_by_category("nonexistent") == []


def test_create_field_from_template_generates_typed_id():
    template = get_field_template("custom_select")
    field = create_field_from_template(template)
    assert re.fullmatch(r"select_\d+_[a-z0-9]{9}", field.id)
    assert field.label == "Select Option"
    assert field.options == ["Option 1", "Option 2", "Option 3"]
    assert field.required is False


def test_create_field_from_template_with_custom_id():
    field = create_field_from_template(get_field_template("email"), "email")
    assert field.id == "email"
    assert field.type == "email"
    assert field.required is True


def test_template_schemas_are_independent_copies():
    first = get_template_schema("standard")
    first.sections[0].title = "Changed"
    assert get_template_schema("standard").sections[0].title == "Personal Information"


def test_unknown_template_key_raises():
    with pytest.raises(KeyError):
        get_template_schema("does-not-exist")


def test_default_templates_shape():
    assert set(DEFAULT_FORM_TEMPLATES) == {"standard", "minimal", "academic"}
    standard = get_template_schema("standard")
    assert [s.id for s in standard.sections] == ["personal", "academic", "essays", "additional"]
    assert len(standard.sections[0].fields) == 9
    assert len(get_template_schema("minimal").sections) == 2
    assert_orders_contiguous(get_template_schema("academic"))


# --- editor: sections ---

def test_add_section_appends_and_leaves_input_untouched():
    original = get_template_schema("minimal")
    changes = []
    editor = FormSchemaEditor(original, on_change=changes.append)

    result = editor.add_section()

    assert len(original.sections) == 2
    assert len(result.sections) == 3
    new_section = result.sections[-1]
    assert new_section.title == "New Section"
    assert new_section.description == "Section description"
    assert new_section.order == 3
    assert new_section.id.startswith("section_")
    assert len(changes) == 1
    assert len(changes[0].sections) == 3


def test_remove_section_renumbers():
    editor = FormSchemaEditor(get_template_schema("standard"))
    result = editor.remove_section(1)
    assert [s.id for s in result.sections] == ["personal", "essays", "additional"]
    assert_orders_contiguous(result)


def test_move_section():
    editor = FormSchemaEditor(get_template_schema("standard"))
    result = editor.move_section(3, 0)
    assert [s.id for s in result.sections] == ["additional", "personal", "academic", "essays"]
    assert_orders_contiguous(result)


def test_update_section_merges_partial():
    editor = FormSchemaEditor(get_template_schema("minimal"))
    result = editor.update_section(1, {"title": "Your Story"})
    assert result.sections[1].title == "Your Story"
    assert result.sections[1].description == "Tell us about yourself"
    assert result.sections[1].id == "essay"


def test_update_section_ignores_order_and_rejects_taken_id():
    editor = FormSchemaEditor(get_template_schema("minimal"))
    result = editor.update_section(0, {"order": 7})
    assert_orders_contiguous(result)
    assert [s.id for s in result.sections] == ["basic", "essay"]

    with pytest.raises(ValueError):
        editor.update_section(0, {"id": "essay"})


# --- editor: fields ---

def test_add_field_to_section_uses_template_defaults():
    editor = FormSchemaEditor(get_template_schema("minimal"))
    result = editor.add_field_to_section(1, "custom_file")
    field = result.sections[1].fields[-1]
    assert re.fullmatch(r"file_1_\d+_[a-z0-9]{9}", field.id)
    assert field.label == "Upload File"
    assert field.order == len(result.sections[1].fields)
    assert field.accepted_formats == [".pdf", ".doc", ".docx"]


def test_add_field_unknown_template_raises():
    editor = FormSchemaEditor(get_template_schema("minimal"))
    with pytest.raises(KeyError):
        editor.add_field_to_section(0, "no_such_template")


def test_field_ids_stay_unique_within_same_millisecond(monkeypatch):
    """Test that a colliding id is regenerated rather than reused"""
    suffixes = iter(["aaaaaaaaa", "aaaaaaaaa", "bbbbbbbbb"])
    monkeypatch.setattr(form_builder, "timestamp_ms", lambda: 1700000000000)
    monkeypatch.setattr(form_builder, "random_suffix", lambda length=9: next(suffixes))

    editor = FormSchemaEditor(FormSchema())
    editor.add_section()
    editor.add_field_to_section(0, "custom_text")
    result = editor.add_field_to_section(0, "custom_text")

    ids = [f.id for f in result.sections[0].fields]
    assert ids == ["text_0_1700000000000_aaaaaaaaa", "text_0_1700000000000_bbbbbbbbb"]


def test_update_field_keeps_id_and_order():
    editor = FormSchemaEditor(get_template_schema("minimal"))
    result = editor.update_field(0, 2, {"label": "Contact Email", "required": False})
    field = result.sections[0].fields[2]
    assert field.id == "email"
    assert field.label == "Contact Email"
    assert field.required is False
    assert field.order == 3


def test_update_field_ignores_order_and_rejects_taken_id():
    editor = FormSchemaEditor(get_template_schema("minimal"))
    result = editor.update_field(0, 1, {"order": 9, "label": "Surname"})
    assert result.sections[0].fields[1].order == 2
    assert result.sections[0].fields[1].label == "Surname"

    with pytest.raises(ValueError):
        editor.update_field(0, 1, {"id": "first_name"})
    assert field_ids(editor.schema).count("first_name") == 1

    renamed = editor.update_field(0, 1, {"id": "family_name"})
    assert renamed.sections[0].fields[1].id == "family_name"


def test_update_field_cannot_drop_select_options():
    editor = FormSchemaEditor(get_template_schema("minimal"))
    editor.add_field_to_section(1, "custom_select")
    with pytest.raises(ValueError):
        editor.update_field(1, len(editor.schema.sections[1].fields) - 1, {"options": []})


def test_remove_field_renumbers():
    editor = FormSchemaEditor(get_template_schema("minimal"))
    result = editor.remove_field(0, 0)
    assert [f.id for f in result.sections[0].fields] == ["last_name", "email", "school", "major"]
    assert_orders_contiguous(result)


def test_move_field_between_sections():
    editor = FormSchemaEditor(get_template_schema("minimal"))
    result = editor.move_field(0, 4, 1, 0)
    assert [f.id for f in result.sections[0].fields] == ["first_name", "last_name", "email", "school"]
    assert [f.id for f in result.sections[1].fields] == ["major", "why_deserve_scholarship"]
    assert_orders_contiguous(result)


def test_move_field_within_section():
    editor = FormSchemaEditor(get_template_schema("minimal"))
    result = editor.move_field(0, 0, 0, 2)
    assert [f.id for f in result.sections[0].fields] == ["last_name", "email", "first_name", "school", "major"]
    assert_orders_contiguous(result)


def test_load_template_replaces_schema():
    editor = FormSchemaEditor(get_template_schema("standard"))
    result = editor.load_template("academic")
    assert [s.id for s in result.sections] == ["contact", "academic", "achievements"]


# --- legacy migration and resolution ---

def test_migrate_legacy_custom_fields():
    schema = migrate_legacy_custom_fields(LEGACY_FIELDS)
    assert len(schema.sections) == 5
    legacy_section = schema.sections[-1]
    assert legacy_section.id == "custom"
    assert legacy_section.title == "Scholarship Questions"
    assert legacy_section.order == 5
    assert [f.id for f in legacy_section.fields] == ["essay_1", "ffa_member"]
    assert_orders_contiguous(schema)


def test_resolve_prefers_sectioned_schema():
    stored = get_template_schema("minimal").to_json()
    schema = resolve_form_schema(stored, LEGACY_FIELDS)
    assert [s.id for s in schema.sections] == ["basic", "essay"]


def test_resolve_falls_back_to_legacy_then_standard():
    assert resolve_form_schema(None, LEGACY_FIELDS).sections[-1].id == "custom"
    assert [s.id for s in resolve_form_schema(None, None).sections] == ["personal", "academic", "essays", "additional"]


def test_stored_json_uses_camel_case_aliases():
    stored = get_template_schema("standard").to_json()
    gpa = next(f for f in stored["sections"][1]["fields"] if f["id"] == "gpa")
    assert gpa["validation"] == {"min": 0, "max": 4}
    essay = stored["sections"][2]["fields"][0]
    assert essay["validation"] == {"minLength": 50}
    assert "placeholder" not in essay


# --- operations over HTTP payloads ---

def test_apply_operation_dispatch():
    editor = FormSchemaEditor(get_template_schema("minimal"))
    apply_operation(editor, {"op": "add_section"})
    apply_operation(editor, {"op": "add_field", "section_index": 2, "template_id": "custom_number"})
    result = apply_operation(editor, {"op": "update_section", "section_index": 2, "changes": {"title": "Numbers"}})
    assert result.sections[2].title == "Numbers"
    assert result.sections[2].fields[0].type == "number"


def test_apply_operation_unknown_raises():
    with pytest.raises(ValueError):
        apply_operation(FormSchemaEditor(), {"op": "explode"})


@pytest.mark.parametrize("op, message", [
    ({"op": "remove_section", "section_index": 5}, "Section index out of range: 5"),
    ({"op": "update_field", "section_index": 0, "field_index": 9}, "Field index out of range"),
    ({"op": "move_section", "from_index": 0, "to_index": 2}, "Section move indices out of range"),
    ({"op": "add_field", "section_index": 0, "template_id": "nope"}, "Unknown field template: nope"),
    ({"op": "load_template", "template_key": "nope"}, "Unknown form template: nope"),
])
def test_check_operation_bounds_rejects(op, message):
    assert check_operation_bounds(get_template_schema("minimal"), op) == message


def test_check_operation_bounds_allows_append_when_moving_across_sections():
    schema = get_template_schema("minimal")
    op = {"op": "move_field", "from_section": 0, "from_field": 0, "to_section": 1, "to_field": 1}
    assert check_operation_bounds(schema, op) is None
    op["to_field"] = 2
    assert check_operation_bounds(schema, op) == "Target field index out of range"


def test_normalize_schema_rewrites_order_and_rejects_duplicates():
    schema = get_template_schema("minimal")
    schema.sections[0].order = 7
    schema.sections[0].fields[0].order = 42
    normalized = normalize_schema(schema)
    assert_orders_contiguous(normalized)
    assert schema.sections[0].order == 7

    schema.sections[1].fields.append(FormField(id="email", type="email", label="Again"))
    with pytest.raises(ValueError):
        normalize_schema(schema)
    assert field_ids(schema).count("email") == 2
