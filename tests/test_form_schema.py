import pytest
from pydantic import ValidationError

from app.modules.forms.schemas import (
    FieldType, ImageUploadField, MultipleChoiceField, TextareaField, TextInputField, UnknownField,
    check_publishable, form_fields_adapter, new_field, normalize_on_type_change,
    stored_form_fields_adapter, validate_field,
)


def test_validate_field_accepts_well_formed_dict():
    assert validate_field({"id": "f1", "type": "textarea", "label": "", "required": False})


@pytest.mark.parametrize("field", [
    {"id": "", "type": "text-input", "label": "Name", "required": True},
    {"id": "f1", "type": "signature", "label": "Name", "required": True},
    {"id": "f1", "type": "text-input", "label": None, "required": True},
    {"id": "f1", "type": "text-input", "label": "Name", "required": "yes"},
    {"type": "text-input", "label": "Name", "required": True},
    "text-input",
    None,
])
def test_validate_field_rejects_malformed(field):
    assert not validate_field(field)


def test_validate_field_accepts_models():
    assert validate_field(new_field(FieldType.VIDEO_UPLOAD))


def test_new_field_defaults_per_type():
    choice = new_field("multiple-choice")
    text = new_field("text-input")
    image = new_field("image-upload")

    assert choice.options == [""]
    assert text.placeholder == ""
    assert not hasattr(image, "options")
    assert not hasattr(image, "placeholder")
    assert choice.id.startswith("field_")
    assert len({choice.id, text.id, image.id}) == 3


def test_switching_to_multiple_choice_adds_single_empty_option():
    field = TextInputField(id="f1", label="Experience", required=True, placeholder="Tell us")

    switched = normalize_on_type_change(field, FieldType.MULTIPLE_CHOICE)

    assert isinstance(switched, MultipleChoiceField)
    assert (switched.id, switched.label, switched.required) == ("f1", "Experience", True)
    assert switched.options == [""]


def test_switching_away_from_multiple_choice_drops_options():
    field = MultipleChoiceField(id="f1", label="Level", options=["Beginner", "Advanced"])

    switched = normalize_on_type_change(field, "image-upload")

    assert isinstance(switched, ImageUploadField)
    assert "options" not in switched.model_dump()


def test_switching_between_text_types_resets_placeholder():
    field = TextInputField(id="f1", label="Bio", placeholder="Short bio")

    switched = normalize_on_type_change(field, "textarea")

    assert isinstance(switched, TextareaField)
    assert switched.placeholder == ""


def test_switching_to_same_type_keeps_field():
    field = MultipleChoiceField(id="f1", label="Level", options=["A", "B"])
    assert normalize_on_type_change(field, "multiple-choice") is field


def test_input_union_rejects_unknown_type():
    with pytest.raises(ValidationError):
        form_fields_adapter.validate_python([{"id": "f1", "type": "signature", "label": "", "required": False}])


def test_input_union_drops_attributes_of_other_types():
    fields = form_fields_adapter.validate_python([
        {"id": "f1", "type": "image-upload", "label": "Photo", "required": True, "options": ["x"]},
    ])
    assert fields[0].model_dump() == {"id": "f1", "type": "image-upload", "label": "Photo", "required": True}


def test_stored_union_keeps_unknown_types():
    fields = stored_form_fields_adapter.validate_python([
        {"id": "f1", "type": "signature", "label": "Sign here", "required": True, "pen": "blue"},
        {"id": "f2", "type": "textarea", "label": "Why?", "required": False},
    ])

    assert isinstance(fields[0], UnknownField)
    assert fields[0].model_dump()["pen"] == "blue"
    assert isinstance(fields[1], TextareaField)


def test_check_publishable_reports_missing_labels_and_options():
    fields = [
        TextInputField(id="f1", label="  "),
        MultipleChoiceField(id="f2", label="Level", options=["", " "]),
        MultipleChoiceField(id="f3", label="Track", options=["", "Evening"]),
        UnknownField(id="f4", type="signature", label=""),
    ]

    assert check_publishable(fields) == {
        "f1": "Question 1 needs a label",
        "f2": "Level needs at least one option",
    }


def test_check_publishable_accepts_empty_form():
    assert check_publishable([]) == {}
