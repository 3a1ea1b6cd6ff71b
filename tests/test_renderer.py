from types import SimpleNamespace
from unittest.mock import MagicMock

from app.core.exceptions import StoreError
from app.modules.forms.renderer import (
    SUBMIT_FAILED_MESSAGE, SubmissionForm, render_preview, validate_responses,
)
from app.modules.forms.schemas import (
    ImageUploadField, MultipleChoiceField, TextareaField, TextInputField, UnknownField,
)


def _form():
    return [
        TextInputField(id="name", label="Full name", required=True, placeholder="Jane"),
        MultipleChoiceField(id="level", label="Level", required=True, options=["Beginner", ""]),
        TextareaField(id="why", label="Why join?"),
        ImageUploadField(id="photo", label="Portfolio"),
    ]


def test_preview_renders_disabled_controls():
    form = render_preview(_form())

    assert form.mode == "preview"
    assert form.submit_disabled
    assert form.accent_color == "#3B82F6"
    assert all(c.disabled for c in form.controls)
    assert [c.kind for c in form.controls] == ["text", "radio-group", "multiline", "file"]


def test_preview_shows_placeholder_text_for_empty_options():
    level = render_preview(_form()).controls[1]
    assert [o.label for o in level.options] == ["Beginner", "Option 2"]


def test_preview_upload_affordance():
    photo = render_preview(_form(), form_color="#10B981").controls[3]
    assert photo.accept == "image/*"
    assert photo.prompt == "Click to upload image"


def test_preview_of_empty_form():
    form = render_preview([])
    assert form.controls == []
    assert form.empty_message == "No form fields to preview"


def test_unknown_field_types_are_skipped():
    fields = [UnknownField(id="sig", type="signature", label="Sign"), TextareaField(id="why", label="Why?")]
    form = render_preview(fields)
    assert [c.field_id for c in form.controls] == ["why"]


def test_preview_with_stored_responses():
    form = render_preview(_form(), responses={"name": "Ada", "level": "Beginner"})
    assert {c.field_id: c.value for c in form.controls} == {
        "name": "Ada", "level": "Beginner", "why": None, "photo": None,
    }


def test_validate_responses_messages():
    errors = validate_responses(_form(), {"name": "", "level": None})
    assert errors == {
        "name": "Full name is required",
        "level": "Please select an option for Level",
    }


def test_validate_responses_rejects_unlisted_option():
    errors = validate_responses(_form(), {"name": "Ada", "level": "Expert"})
    assert errors == {"level": "Please select one of the listed options"}


def test_submit_with_missing_required_fields_never_calls_store():
    on_submit = MagicMock()
    form = SubmissionForm(_form(), on_submit)
    form.set_value("why", "Curious")

    assert form.submit() is None

    on_submit.assert_not_called()
    assert set(form.errors) == {"name", "level"}
    assert form.values == {"why": "Curious"}
    rendered = form.render()
    assert {c.field_id: c.error for c in rendered.controls if c.error} == form.errors


def test_submit_passes_responses_once():
    on_submit = MagicMock(return_value="created")
    form = SubmissionForm(_form(), on_submit)
    form.fill({"name": "Ada", "level": "Beginner", "stray": "ignored"})
    form.set_value("photo", SimpleNamespace(filename="portfolio.png"))

    assert form.submit() == "created"

    on_submit.assert_called_once_with({"name": "Ada", "level": "Beginner", "photo": "portfolio.png"})
    assert form.errors == {}
    assert not form.submitting


def test_store_failure_keeps_values_and_shows_one_message():
    on_submit = MagicMock(side_effect=StoreError("Failed to create application"))
    form = SubmissionForm(_form(), on_submit)
    form.fill({"name": "Ada", "level": "Beginner"})

    assert form.submit() is None

    assert form.submit_error == SUBMIT_FAILED_MESSAGE
    assert form.values == {"name": "Ada", "level": "Beginner"}
    assert form.render().submit_error == SUBMIT_FAILED_MESSAGE


def test_busy_form_rejects_second_submit():
    on_submit = MagicMock()
    form = SubmissionForm(_form(), on_submit)
    form.fill({"name": "Ada", "level": "Beginner"})
    form.submitting = True

    assert form.submit() is None
    on_submit.assert_not_called()
    assert form.render().submit_label == "Submitting..."


def test_editing_a_field_clears_its_error():
    form = SubmissionForm(_form(), MagicMock())
    form.submit()
    form.set_value("name", "Ada")
    assert "name" not in form.errors
    assert "level" in form.errors
