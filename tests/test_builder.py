from unittest.mock import patch

import pytest

from app.modules.forms.builder import (
    FormBuilder, add_field, add_option, remove_field, remove_option, reorder_field, update_field,
    update_option,
)
from app.modules.forms.schemas import MultipleChoiceField, TextareaField, TextInputField


def _fields(*ids):
    return [TextInputField(id=i, label=i.upper()) for i in ids]


def _ids(fields):
    return [f.id for f in fields]


def test_reorder_inserts_into_shortened_list():
    assert _ids(reorder_field(_fields("a", "b", "c", "d"), 0, 2)) == ["b", "c", "a", "d"]
    assert _ids(reorder_field(_fields("a", "b", "c", "d"), 3, 0)) == ["d", "a", "b", "c"]


def test_reorder_out_of_range_is_noop():
    assert _ids(reorder_field(_fields("a", "b"), 5, 0)) == ["a", "b"]


def test_operations_leave_input_untouched():
    original = _fields("a", "b", "c")
    snapshot = list(original)

    reorder_field(original, 0, 2)
    remove_field(original, 1)
    add_field(original, "textarea")
    update_field(original, 0, {"label": "Changed"})

    assert original == snapshot


def test_add_field_appends_with_type_defaults():
    fields = add_field([], "multiple-choice")
    assert len(fields) == 1
    assert fields[0].options == [""]


def test_update_field_merges_and_keeps_id():
    fields = update_field(_fields("a"), 0, {"id": "hijacked", "label": "Full name", "required": True})
    assert fields[0].id == "a"
    assert fields[0].label == "Full name"
    assert fields[0].required is True


def test_update_field_type_change_normalizes_then_applies_rest():
    fields = update_field(_fields("a"), 0, {"type": "multiple-choice", "label": "Level"})
    field = fields[0]
    assert isinstance(field, MultipleChoiceField)
    assert (field.id, field.label, field.options) == ("a", "Level", [""])


def test_update_field_ignores_attributes_the_type_lacks():
    fields = update_field([MultipleChoiceField(id="a", options=["x"])], 0, {"placeholder": "nope"})
    assert "placeholder" not in fields[0].model_dump()


@pytest.mark.parametrize("index", [-1, 1, 10])
def test_update_and_remove_out_of_range_are_noops(index):
    fields = _fields("a")
    assert update_field(fields, index, {"label": "x"}) == fields
    assert remove_field(fields, index) == fields


def test_option_editing_on_multiple_choice():
    fields = [MultipleChoiceField(id="a", label="Level", options=[""])]

    fields = update_option(fields, 0, 0, "Beginner")
    fields = add_option(fields, 0)
    fields = update_option(fields, 0, 1, "Advanced")
    fields = add_option(fields, 0)
    fields = remove_option(fields, 0, 2)

    assert fields[0].options == ["Beginner", "Advanced"]


def test_option_editing_is_noop_on_other_types_and_bad_indices():
    text = [TextareaField(id="a", label="Bio")]
    choice = [MultipleChoiceField(id="b", label="Level", options=["x"])]

    assert add_option(text, 0) == text
    assert update_option(text, 0, 0, "y") == text
    assert update_option(choice, 0, 3, "y") == choice
    assert remove_option(choice, 0, 1) == choice
    assert add_option(choice, 4) == choice


def test_drag_and_drop_reorders_and_clears_drag_state():
    builder = FormBuilder(_fields("a", "b", "c", "d"))

    builder.start_drag(0)
    builder.drop(2)

    assert _ids(builder.fields) == ["b", "c", "a", "d"]
    assert builder.dragged_index is None


def test_drop_without_drag_is_noop():
    builder = FormBuilder(_fields("a", "b"))
    builder.drop(1)
    assert _ids(builder.fields) == ["a", "b"]


def test_cancel_drag_prevents_reorder():
    builder = FormBuilder(_fields("a", "b"))
    builder.start_drag(0)
    builder.cancel_drag()
    builder.drop(1)
    assert _ids(builder.fields) == ["a", "b"]


def test_drag_state_cleared_when_drop_fails():
    builder = FormBuilder(_fields("a", "b"))
    builder.start_drag(0)

    with patch("app.modules.forms.builder.reorder_field", side_effect=RuntimeError("boom")):
        with pytest.raises(RuntimeError):
            builder.drop(1)

    assert builder.dragged_index is None
    assert _ids(builder.fields) == ["a", "b"]
