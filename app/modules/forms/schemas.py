"""
Application-form field definitions.

A field is a tagged union discriminated on ``type``; each variant only carries
the attributes that make sense for it (options on multiple-choice, placeholder
on the text types). ``FormField`` is the closed union used for input.
``StoredFormField`` also admits ``UnknownField`` so a stored schema containing
an unrecognised type still loads; the renderer skips such fields.
"""

import uuid
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import (
    BaseModel, ConfigDict, Discriminator, Field, StrictBool, StrictStr, Tag, TypeAdapter
)


class FieldType(str, Enum):
    TEXT_INPUT = "text-input"
    TEXTAREA = "textarea"
    MULTIPLE_CHOICE = "multiple-choice"
    IMAGE_UPLOAD = "image-upload"
    VIDEO_UPLOAD = "video-upload"


TEXT_FIELD_TYPES = (FieldType.TEXT_INPUT, FieldType.TEXTAREA)
UPLOAD_FIELD_TYPES = (FieldType.IMAGE_UPLOAD, FieldType.VIDEO_UPLOAD)


def generate_field_id() -> str:
    return f"field_{uuid.uuid4().hex}"


class BaseFormField(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: StrictStr = Field(min_length=1)
    label: StrictStr = ""
    required: StrictBool = False


class TextInputField(BaseFormField):
    type: Literal["text-input"] = "text-input"
    placeholder: Optional[StrictStr] = None


class TextareaField(BaseFormField):
    type: Literal["textarea"] = "textarea"
    placeholder: Optional[StrictStr] = None


class MultipleChoiceField(BaseFormField):
    type: Literal["multiple-choice"] = "multiple-choice"
    options: List[StrictStr] = Field(default_factory=list)


class ImageUploadField(BaseFormField):
    type: Literal["image-upload"] = "image-upload"


class VideoUploadField(BaseFormField):
    type: Literal["video-upload"] = "video-upload"


class UnknownField(BaseFormField):
    """A stored field whose type is outside FieldType. Kept verbatim, never rendered."""
    model_config = ConfigDict(extra="allow")

    type: StrictStr


FormField = Annotated[
    Union[TextInputField, TextareaField, MultipleChoiceField, ImageUploadField, VideoUploadField],
    Field(discriminator="type"),
]

_VARIANTS = {
    FieldType.TEXT_INPUT: TextInputField,
    FieldType.TEXTAREA: TextareaField,
    FieldType.MULTIPLE_CHOICE: MultipleChoiceField,
    FieldType.IMAGE_UPLOAD: ImageUploadField,
    FieldType.VIDEO_UPLOAD: VideoUploadField,
}


def known_type(value: Any) -> Optional[FieldType]:
    """FieldType for value, or None when value is not one of the closed set."""
    try:
        return FieldType(value)
    except (ValueError, TypeError):
        return None


def _stored_field_tag(value: Any) -> str:
    raw = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    field_type = known_type(raw)
    return field_type.value if field_type else "unknown"


StoredFormField = Annotated[
    Union[
        Annotated[TextInputField, Tag("text-input")],
        Annotated[TextareaField, Tag("textarea")],
        Annotated[MultipleChoiceField, Tag("multiple-choice")],
        Annotated[ImageUploadField, Tag("image-upload")],
        Annotated[VideoUploadField, Tag("video-upload")],
        Annotated[UnknownField, Tag("unknown")],
    ],
    Discriminator(_stored_field_tag),
]

form_fields_adapter = TypeAdapter(List[FormField])
stored_form_fields_adapter = TypeAdapter(List[StoredFormField])


def validate_field(field: Any) -> bool:
    """
    Structural check of a single field.

    Well-formed iff it has a non-empty string id, a type from the closed set,
    a string label (empty allowed here) and a boolean required flag.
    """
    if isinstance(field, BaseModel):
        field = field.model_dump()
    if not isinstance(field, dict):
        return False
    field_id = field.get("id")
    return (
        isinstance(field_id, str)
        and bool(field_id)
        and known_type(field.get("type")) is not None
        and isinstance(field.get("label"), str)
        and isinstance(field.get("required"), bool)
    )


def new_field(field_type: Union[FieldType, str], field_id: Optional[str] = None,
              label: str = "", required: bool = False) -> BaseFormField:
    """A field of field_type with that type's defaults: one empty option, or an empty placeholder."""
    field_type = FieldType(field_type)
    extra: Dict[str, Any] = {}
    if field_type == FieldType.MULTIPLE_CHOICE:
        extra["options"] = [""]
    elif field_type in TEXT_FIELD_TYPES:
        extra["placeholder"] = ""
    return _VARIANTS[field_type](
        id=field_id or generate_field_id(),
        label=label,
        required=required,
        **extra,
    )


def normalize_on_type_change(field: BaseFormField, new_type: Union[FieldType, str]) -> BaseFormField:
    """
    Switch field to new_type, keeping id, label and required.

    Type-specific attributes are reset, never carried over: switching away from
    multiple-choice drops the options and switching back starts from a single
    empty option again.
    """
    new_type = FieldType(new_type)
    if field.type == new_type.value:
        return field
    return new_field(new_type, field_id=field.id, label=field.label, required=field.required)


def check_publishable(fields: List[BaseFormField]) -> Dict[str, str]:
    """Publish-time policy. Returns field id -> problem; empty when the form may go live."""
    problems: Dict[str, str] = {}
    for index, field in enumerate(fields):
        if isinstance(field, UnknownField):
            continue
        if not field.label.strip():
            problems[field.id] = f"Question {index + 1} needs a label"
        elif isinstance(field, MultipleChoiceField) and not any(o.strip() for o in field.options):
            problems[field.id] = f"{field.label} needs at least one option"
    return problems


# Builder requests

class FieldUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: Optional[FieldType] = None
    label: Optional[StrictStr] = None
    required: Optional[StrictBool] = None
    placeholder: Optional[StrictStr] = None


class AddFieldOp(BaseModel):
    op: Literal["add_field"]
    type: FieldType


class UpdateFieldOp(BaseModel):
    op: Literal["update_field"]
    index: int
    updates: FieldUpdate


class RemoveFieldOp(BaseModel):
    op: Literal["remove_field"]
    index: int


class ReorderFieldOp(BaseModel):
    op: Literal["reorder_field"]
    from_index: int
    to_index: int


class AddOptionOp(BaseModel):
    op: Literal["add_option"]
    index: int


class UpdateOptionOp(BaseModel):
    op: Literal["update_option"]
    index: int
    option_index: int
    value: StrictStr


class RemoveOptionOp(BaseModel):
    op: Literal["remove_option"]
    index: int
    option_index: int


class StartDragOp(BaseModel):
    op: Literal["start_drag"]
    index: int


class DropOp(BaseModel):
    op: Literal["drop"]
    target_index: int


BuilderOperation = Annotated[
    Union[
        AddFieldOp, UpdateFieldOp, RemoveFieldOp, ReorderFieldOp,
        AddOptionOp, UpdateOptionOp, RemoveOptionOp, StartDragOp, DropOp,
    ],
    Field(discriminator="op"),
]


class FormBuilderRequest(BaseModel):
    fields: List[FormField] = []
    operations: List[BuilderOperation] = []


class FormBuilderResponse(BaseModel):
    fields: List[FormField]
    publish_problems: Dict[str, str] = {}


class FormPreviewRequest(BaseModel):
    fields: List[FormField] = []
    form_color: Optional[str] = None
