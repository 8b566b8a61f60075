from datetime import date

from fastapi import BackgroundTasks

from app.models.application import Application
from app.services.email_service import send_application_confirmation
from app.services.wizard import ApplicationWizard, derive_steps, initial_form_data
from app.utils.field_library import get_template_schema

LEGACY_FIELDS = [
    {"id": "chainsaw_cert", "type": "select", "label": "Chainsaw certification", "required": True,
     "options": ["None", "Basic", "Advanced"]},
    {"id": "miles_from_mill", "type": "number", "label": "Miles from nearest mill", "validation": {"min": 0}},
]


def _fill(wizard, data):
    for name, value in data.items():
        wizard.update_field(name, value)


# --- step derivation ---

def test_builtin_steps_without_custom_fields():
    steps = derive_steps(None, None)
    assert [s.id for s in steps] == ["personal", "academic", "essays", "additional", "review"]
    assert steps[-1].fields == []


def test_legacy_custom_step_follows_additional():
    steps = derive_steps(None, LEGACY_FIELDS)
    assert [s.id for s in steps] == ["personal", "academic", "essays", "additional", "custom", "review"]
    custom = steps[4]
    assert custom.title == "Additional Information"
    assert custom.description == "Scholarship-specific questions"
    assert custom.fields == ["chainsaw_cert", "miles_from_mill"]


def test_schema_steps_follow_section_order():
    schema = get_template_schema("minimal").to_json()
    schema["sections"][0]["order"], schema["sections"][1]["order"] = 2, 1
    steps = derive_steps(schema, LEGACY_FIELDS)
    assert [s.id for s in steps] == ["essay", "basic", "review"]
    assert steps[1].fields == ["first_name", "last_name", "email", "school", "major"]


def test_initial_form_data_defaults():
    data = initial_form_data("sch-1", date(2026, 5, 1))
    assert data["scholarship_id"] == "sch-1"
    assert data["graduation_year"] == 2027
    assert data["academic_level"] == "undergraduate"
    assert data["custom_responses"] == {}
    assert data["first_name"] == ""


# --- navigation and validation ---

def test_next_step_blocked_by_invalid_fields(db, scholarship, applicant_user):
    wizard = ApplicationWizard(scholarship, applicant_user.id, db)
    assert wizard.is_first_step
    assert wizard.next_step() is False
    assert wizard.current_step == 0
    assert wizard.errors["first_name"] == "Must be at least 2 characters"
    assert wizard.errors["email"] == "Valid email address is required"
    assert "date_of_birth" not in wizard.errors


def test_walk_to_review_with_complete_data(db, scholarship, applicant_user, complete_form_data):
    wizard = ApplicationWizard(scholarship, applicant_user.id, db)
    _fill(wizard, complete_form_data)

    for expected in range(1, 5):
        assert wizard.next_step() is True
        assert wizard.current_step == expected
    assert wizard.is_review_step
    assert wizard.progress() == 100.0


def test_editing_a_field_clears_its_error(db, scholarship, applicant_user):
    wizard = ApplicationWizard(scholarship, applicant_user.id, db)
    wizard.next_step()
    assert "last_name" in wizard.errors
    wizard.update_field("last_name", "Doe")
    assert "last_name" not in wizard.errors


def test_prev_and_go_to_step(db, scholarship, applicant_user):
    wizard = ApplicationWizard(scholarship, applicant_user.id, db)
    wizard.prev_step()
    assert wizard.current_step == 0
    assert wizard.go_to_step(3) is True
    assert wizard.current_step == 3
    assert wizard.progress() == 80.0
    assert wizard.go_to_step(5) is False
    assert wizard.go_to_step(-1) is False
    assert wizard.current_step == 3


def test_unknown_field_is_ignored(db, scholarship, applicant_user):
    wizard = ApplicationWizard(scholarship, applicant_user.id, db)
    wizard.update_field("favorite_tree", "Redwood")
    assert "favorite_tree" not in wizard.form_data
    assert "favorite_tree" not in wizard.form_data["custom_responses"]


def test_legacy_custom_step_uses_field_rules(db, scholarship, applicant_user, complete_form_data):
    scholarship.custom_fields = LEGACY_FIELDS
    db.commit()
    wizard = ApplicationWizard(scholarship, applicant_user.id, db)
    _fill(wizard, complete_form_data)
    wizard.go_to_step(4)

    wizard.update_field("miles_from_mill", -3)
    assert wizard.next_step() is False
    assert wizard.errors == {
        "chainsaw_cert": "Chainsaw certification is required",
        "miles_from_mill": "Value must be at least 0",
    }

    wizard.update_field("chainsaw_cert", "Basic")
    wizard.update_field("miles_from_mill", 12)
    assert wizard.next_step() is True
    assert wizard.form_data["custom_responses"] == {"chainsaw_cert": "Basic", "miles_from_mill": 12}


def test_schema_step_uses_generic_validator(db, scholarship, applicant_user):
    scholarship.form_schema = get_template_schema("minimal").to_json()
    db.commit()
    wizard = ApplicationWizard(scholarship, applicant_user.id, db)

    assert [s.id for s in wizard.steps] == ["basic", "essay", "review"]
    assert wizard.next_step() is False
    assert wizard.errors["first_name"] == "First Name is required"
    assert wizard.errors["school"] == "School/University is required"


# --- persistence ---

def test_draft_saved_twice_keeps_one_row(db, scholarship, applicant_user):
    wizard = ApplicationWizard(scholarship, applicant_user.id, db)
    wizard.update_field("first_name", "Jane")
    assert wizard.save_draft().success

    wizard.update_field("first_name", "Janet")
    wizard.update_field("gpa", "3.2")
    result = wizard.save_draft()
    assert result.success

    rows = db.query(Application).filter(Application.applicant_id == applicant_user.id).all()
    assert len(rows) == 1
    assert rows[0].first_name == "Janet"
    assert float(rows[0].gpa) == 3.2
    assert rows[0].status == "draft"


def test_existing_draft_is_loaded(db, scholarship, applicant_user):
    first = ApplicationWizard(scholarship, applicant_user.id, db)
    first.update_field("school", "Cal Poly Humboldt")
    first.save_draft()

    second = ApplicationWizard(scholarship, applicant_user.id, db)
    assert second.get_value("school") == "Cal Poly Humboldt"
    assert second.form_data["scholarship_id"] == scholarship.id
    assert second.form_data["status"] == "draft"


def test_submit_persists_and_schedules_confirmation(db, scholarship, applicant_user, complete_form_data):
    outcomes = []
    wizard = ApplicationWizard(scholarship, applicant_user.id, db, on_success=outcomes.append)
    _fill(wizard, complete_form_data)
    tasks = BackgroundTasks()

    result = wizard.submit(tasks)

    assert result.success
    assert wizard.is_submitted
    application = result.data
    assert application.status == "submitted"
    assert application.submission_date is not None
    assert application.graduation_year == complete_form_data["graduation_year"]
    assert len(tasks.tasks) == 1
    assert tasks.tasks[0].func is send_application_confirmation
    assert tasks.tasks[0].args[0] == "jane.doe@example.com"
    assert outcomes == [result]


def test_submit_after_draft_updates_same_row(db, scholarship, applicant_user, complete_form_data):
    wizard = ApplicationWizard(scholarship, applicant_user.id, db)
    _fill(wizard, complete_form_data)
    draft = wizard.save_draft().data
    submitted = wizard.submit().data
    assert submitted.id == draft.id
    assert db.query(Application).count() == 1
