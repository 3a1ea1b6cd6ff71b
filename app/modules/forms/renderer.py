"""
Form rendering.

Fields are turned into control descriptors the browser client draws as
widgets. Preview mode yields disabled controls (the master checking a form
before publishing, a student seeing what will be asked, or a master reading a
submitted application). Submission mode yields live controls and goes with
``SubmissionForm``, which holds entered values and per-field errors and
validates before anything reaches the store.
"""
import logging
from typing import Any, Callable, Dict, List, Literal, Mapping, Optional, Sequence

from pydantic import BaseModel

from app.config import settings
from app.core.exceptions import StoreError
from app.modules.forms.schemas import (
    BaseFormField, FieldType, MultipleChoiceField, UPLOAD_FIELD_TYPES, known_type
)

logger = logging.getLogger(__name__)

SUBMIT_FAILED_MESSAGE = "Failed to submit application. Please try again."

_KIND_BY_TYPE = {
    FieldType.TEXT_INPUT: "text",
    FieldType.TEXTAREA: "multiline",
    FieldType.MULTIPLE_CHOICE: "radio-group",
    FieldType.IMAGE_UPLOAD: "file",
    FieldType.VIDEO_UPLOAD: "file",
}

_UPLOADS = {
    FieldType.IMAGE_UPLOAD: ("image/*", "Click to upload image", "Click to upload image or drag and drop"),
    FieldType.VIDEO_UPLOAD: ("video/*", "Click to upload video", "Click to upload video or drag and drop"),
}


class ChoiceOption(BaseModel):
    value: str
    label: str


class RenderedControl(BaseModel):
    field_id: str
    field_type: FieldType
    kind: Literal["text", "multiline", "radio-group", "file"]
    label: str
    required: bool
    disabled: bool
    placeholder: Optional[str] = None
    rows: Optional[int] = None
    options: List[ChoiceOption] = []
    accept: Optional[str] = None
    prompt: Optional[str] = None
    value: Any = None
    error: Optional[str] = None


class RenderedForm(BaseModel):
    mode: Literal["preview", "submission"]
    accent_color: str
    controls: List[RenderedControl]
    submit_label: str = "Submit Application"
    submit_disabled: bool
    empty_message: Optional[str] = None
    submit_error: Optional[str] = None


def _render_control(field: BaseFormField, preview: bool, value: Any = None,
                    error: Optional[str] = None) -> Optional[RenderedControl]:
    field_type = known_type(field.type)
    if field_type is None:
        # Unrecognised type: no control, the rest of the form still renders
        logger.debug(f"Skipping field {field.id} of unknown type {field.type!r}")
        return None
    control = RenderedControl(
        field_id=field.id,
        field_type=field_type,
        kind=_KIND_BY_TYPE[field_type],
        label=field.label,
        required=field.required,
        disabled=preview,
        value=value,
        error=error,
    )
    if field_type == FieldType.TEXT_INPUT:
        control.placeholder = field.placeholder or ""
    elif field_type == FieldType.TEXTAREA:
        control.placeholder = field.placeholder or ""
        control.rows = 3 if preview else 4
    elif field_type == FieldType.MULTIPLE_CHOICE:
        control.options = [
            ChoiceOption(value=option, label=(option or f"Option {i + 1}") if preview else option)
            for i, option in enumerate(field.options)
        ]
    else:
        accept, preview_prompt, live_prompt = _UPLOADS[field_type]
        control.accept = accept
        control.prompt = preview_prompt if preview else live_prompt
    return control


def _accent(form_color: Optional[str]) -> str:
    return form_color or settings.default_form_color


def render_preview(fields: Sequence[BaseFormField], form_color: Optional[str] = None,
                   responses: Optional[Mapping[str, Any]] = None) -> RenderedForm:
    """Read-only rendering. With responses, each control shows the stored answer."""
    responses = responses or {}
    controls = []
    for field in fields:
        control = _render_control(field, preview=True, value=responses.get(field.id))
        if control is not None:
            controls.append(control)
    return RenderedForm(
        mode="preview",
        accent_color=_accent(form_color),
        controls=controls,
        submit_disabled=True,
        empty_message=None if fields else "No form fields to preview",
    )


def render_submission(fields: Sequence[BaseFormField], form_color: Optional[str] = None,
                      values: Optional[Mapping[str, Any]] = None,
                      errors: Optional[Mapping[str, str]] = None,
                      submitting: bool = False,
                      submit_error: Optional[str] = None) -> RenderedForm:
    values = values or {}
    errors = errors or {}
    controls = []
    for field in fields:
        control = _render_control(field, preview=False, value=values.get(field.id),
                                  error=errors.get(field.id))
        if control is not None:
            controls.append(control)
    return RenderedForm(
        mode="submission",
        accent_color=_accent(form_color),
        controls=controls,
        submit_label="Submitting..." if submitting else "Submit Application",
        submit_disabled=submitting,
        submit_error=submit_error,
    )


def _is_blank(value: Any) -> bool:
    return value is None or value == "" or value == []


def validate_responses(fields: Sequence[BaseFormField], responses: Mapping[str, Any]) -> Dict[str, str]:
    """Field id -> message for every rule broken. Empty means the submission may go ahead."""
    errors: Dict[str, str] = {}
    for field in fields:
        field_type = known_type(field.type)
        if field_type is None:
            continue
        value = responses.get(field.id)
        if isinstance(field, MultipleChoiceField):
            if _is_blank(value):
                if field.required:
                    errors[field.id] = f"Please select an option for {field.label}"
            elif value not in field.options:
                errors[field.id] = "Please select one of the listed options"
        elif field.required and _is_blank(value):
            errors[field.id] = f"{field.label} is required"
    return errors


def collect_responses(fields: Sequence[BaseFormField], values: Mapping[str, Any]) -> Dict[str, Any]:
    """The response map: entered values keyed by field id, limited to renderable fields."""
    known_ids = {f.id for f in fields if known_type(f.type) is not None}
    return {field_id: value for field_id, value in values.items() if field_id in known_ids}


def _file_display_name(value: Any) -> Any:
    # Upload fields record the chosen file's name, not its content
    return getattr(value, "filename", None) or getattr(value, "name", None) or value


class SubmissionForm:
    """
    Interactive state of one application form.

    on_submit receives the response map and performs the store write; its
    return value is passed back from submit(). A StoreError from it becomes a
    single user-facing message while the entered values stay in place.
    """

    def __init__(self, fields: Sequence[BaseFormField], on_submit: Callable[[Dict[str, Any]], Any],
                 form_color: Optional[str] = None):
        self.fields = list(fields)
        self.on_submit = on_submit
        self.form_color = form_color
        self.values: Dict[str, Any] = {}
        self.errors: Dict[str, str] = {}
        self.submitting = False
        self.submit_error: Optional[str] = None
        self._types = {f.id: known_type(f.type) for f in self.fields}

    def set_value(self, field_id: str, value: Any) -> None:
        if self._types.get(field_id) in UPLOAD_FIELD_TYPES:
            value = _file_display_name(value)
        self.values[field_id] = value
        self.errors.pop(field_id, None)

    def fill(self, values: Mapping[str, Any]) -> None:
        for field_id, value in values.items():
            self.set_value(field_id, value)

    def submit(self) -> Any:
        """Validate, then hand the responses to on_submit once. Returns None when blocked or failed."""
        if self.submitting:
            return None
        self.errors = validate_responses(self.fields, self.values)
        if self.errors:
            return None
        self.submitting = True
        self.submit_error = None
        try:
            return self.on_submit(collect_responses(self.fields, self.values))
        except StoreError as e:
            logger.info(f"Submission failed: {e.detail}")
            self.submit_error = SUBMIT_FAILED_MESSAGE
            return None
        finally:
            self.submitting = False

    def render(self) -> RenderedForm:
        return render_submission(
            self.fields,
            form_color=self.form_color,
            values=self.values,
            errors=self.errors,
            submitting=self.submitting,
            submit_error=self.submit_error,
        )
