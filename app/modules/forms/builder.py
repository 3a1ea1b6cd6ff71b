"""
Form builder: edit operations on an ordered field list.

Every operation returns a new list and leaves its input untouched; callers
replace the list they hold with the result. Out-of-range indices, and option
edits on anything but a multiple-choice field, are no-ops.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from app.modules.forms.schemas import (
    BaseFormField, FieldType, MultipleChoiceField, new_field, normalize_on_type_change
)

logger = logging.getLogger(__name__)

Fields = Sequence[BaseFormField]


def _in_range(fields: Fields, index: int) -> bool:
    return 0 <= index < len(fields)


def add_field(fields: Fields, field_type: Union[FieldType, str]) -> List[BaseFormField]:
    return [*fields, new_field(field_type)]


def update_field(fields: Fields, index: int, updates: Dict[str, Any]) -> List[BaseFormField]:
    """Merge updates into the field at index. A type change normalizes first; id never changes."""
    if not _in_range(fields, index):
        logger.debug(f"update_field: index {index} out of range")
        return list(fields)
    field = fields[index]
    updates = {k: v for k, v in updates.items() if k != "id"}
    new_type = updates.pop("type", None)
    if new_type is not None:
        field = normalize_on_type_change(field, new_type)
    if updates:
        # Re-validate through the variant; attributes it does not carry are dropped
        field = type(field).model_validate({**field.model_dump(), **updates})
    result = list(fields)
    result[index] = field
    return result


def remove_field(fields: Fields, index: int) -> List[BaseFormField]:
    if not _in_range(fields, index):
        return list(fields)
    return [f for i, f in enumerate(fields) if i != index]


def reorder_field(fields: Fields, from_index: int, to_index: int) -> List[BaseFormField]:
    """
    Move the field at from_index to to_index.

    to_index addresses the list after the moved field has been taken out, so
    moving 0 to 2 in [A, B, C, D] gives [B, C, A, D].
    """
    if not _in_range(fields, from_index):
        return list(fields)
    result = list(fields)
    moved = result.pop(from_index)
    result.insert(to_index, moved)
    return result


def _update_options(fields: Fields, index: int, options: List[str]) -> List[BaseFormField]:
    result = list(fields)
    result[index] = result[index].model_copy(update={"options": options})
    return result


def _choice_field(fields: Fields, index: int) -> Optional[MultipleChoiceField]:
    if not _in_range(fields, index):
        return None
    field = fields[index]
    return field if isinstance(field, MultipleChoiceField) else None


def add_option(fields: Fields, index: int) -> List[BaseFormField]:
    field = _choice_field(fields, index)
    if field is None:
        return list(fields)
    return _update_options(fields, index, [*field.options, ""])


def update_option(fields: Fields, index: int, option_index: int, value: str) -> List[BaseFormField]:
    field = _choice_field(fields, index)
    if field is None or not _in_range(field.options, option_index):
        return list(fields)
    options = list(field.options)
    options[option_index] = value
    return _update_options(fields, index, options)


def remove_option(fields: Fields, index: int, option_index: int) -> List[BaseFormField]:
    field = _choice_field(fields, index)
    if field is None or not _in_range(field.options, option_index):
        return list(fields)
    return _update_options(fields, index, [o for i, o in enumerate(field.options) if i != option_index])


class FormBuilder:
    """An editing session: the current field list plus the index being dragged, if any."""

    def __init__(self, fields: Fields = ()):
        self.fields: List[BaseFormField] = list(fields)
        self.dragged_index: Optional[int] = None

    def add_field(self, field_type: Union[FieldType, str]) -> List[BaseFormField]:
        self.fields = add_field(self.fields, field_type)
        return self.fields

    def update_field(self, index: int, updates: Dict[str, Any]) -> List[BaseFormField]:
        self.fields = update_field(self.fields, index, updates)
        return self.fields

    def remove_field(self, index: int) -> List[BaseFormField]:
        self.fields = remove_field(self.fields, index)
        return self.fields

    def reorder_field(self, from_index: int, to_index: int) -> List[BaseFormField]:
        self.fields = reorder_field(self.fields, from_index, to_index)
        return self.fields

    def add_option(self, index: int) -> List[BaseFormField]:
        self.fields = add_option(self.fields, index)
        return self.fields

    def update_option(self, index: int, option_index: int, value: str) -> List[BaseFormField]:
        self.fields = update_option(self.fields, index, option_index, value)
        return self.fields

    def remove_option(self, index: int, option_index: int) -> List[BaseFormField]:
        self.fields = remove_option(self.fields, index, option_index)
        return self.fields

    def start_drag(self, index: int) -> None:
        self.dragged_index = index

    def cancel_drag(self) -> None:
        self.dragged_index = None

    def drop(self, target_index: int) -> List[BaseFormField]:
        """Finish a drag onto target_index. Without an active drag this does nothing."""
        if self.dragged_index is None:
            return self.fields
        try:
            self.fields = reorder_field(self.fields, self.dragged_index, target_index)
        finally:
            self.dragged_index = None
        return self.fields
