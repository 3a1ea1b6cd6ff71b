from fastapi import APIRouter, Depends
from app.modules.forms.builder import FormBuilder
from app.modules.forms.renderer import RenderedForm, render_preview
from app.modules.forms.schemas import (
    FormBuilderRequest, FormBuilderResponse, FormPreviewRequest, check_publishable,
    AddFieldOp, UpdateFieldOp, RemoveFieldOp, ReorderFieldOp,
    AddOptionOp, UpdateOptionOp, RemoveOptionOp, StartDragOp, DropOp,
)
from app.core.dependencies import require_permission
from app.modules.users.schemas import UserResponse

router = APIRouter(prefix="/forms", tags=["forms"])


def apply_operations(request: FormBuilderRequest) -> FormBuilder:
    builder = FormBuilder(request.fields)
    for operation in request.operations:
        if isinstance(operation, AddFieldOp):
            builder.add_field(operation.type)
        elif isinstance(operation, UpdateFieldOp):
            builder.update_field(operation.index, operation.updates.model_dump(exclude_none=True))
        elif isinstance(operation, RemoveFieldOp):
            builder.remove_field(operation.index)
        elif isinstance(operation, ReorderFieldOp):
            builder.reorder_field(operation.from_index, operation.to_index)
        elif isinstance(operation, AddOptionOp):
            builder.add_option(operation.index)
        elif isinstance(operation, UpdateOptionOp):
            builder.update_option(operation.index, operation.option_index, operation.value)
        elif isinstance(operation, RemoveOptionOp):
            builder.remove_option(operation.index, operation.option_index)
        elif isinstance(operation, StartDragOp):
            builder.start_drag(operation.index)
        elif isinstance(operation, DropOp):
            builder.drop(operation.target_index)
    return builder


@router.post("/builder", response_model=FormBuilderResponse)
async def edit_form(
    request: FormBuilderRequest,
    user: UserResponse = Depends(require_permission("workshops:create")),
):
    """Apply builder operations to an unsaved field list. Nothing is persisted."""
    builder = apply_operations(request)
    return FormBuilderResponse(fields=builder.fields, publish_problems=check_publishable(builder.fields))


@router.post("/preview", response_model=RenderedForm)
async def preview_form(
    request: FormPreviewRequest,
    user: UserResponse = Depends(require_permission("workshops:create")),
):
    """Preview an unsaved field list the way applicants will see it."""
    return render_preview(request.fields, form_color=request.form_color)
