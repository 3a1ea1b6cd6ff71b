"""
Text serialization of form schemas and response maps.

Both live in string columns. Reads never raise: anything that does not decode
to the expected shape comes back empty, so one corrupt record cannot fail a
listing.
"""
import json
import logging
from typing import Any, Dict, List, Sequence

from pydantic import BaseModel, ValidationError

from app.modules.forms.schemas import BaseFormField, stored_form_fields_adapter

logger = logging.getLogger(__name__)


def _decode(raw: Any) -> Any:
    if isinstance(raw, (list, dict)):
        # jsonb columns arrive already decoded
        return raw
    if not isinstance(raw, str):
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return None


def dump_form_schema(fields: Sequence[BaseFormField]) -> str:
    return json.dumps([f.model_dump(mode="json", exclude_none=True) for f in fields])


def parse_form_schema(raw: Any) -> List[BaseFormField]:
    data = _decode(raw)
    if not isinstance(data, list):
        if raw not in (None, ""):
            logger.warning("Discarding undecodable form schema")
        return []
    try:
        return stored_form_fields_adapter.validate_python(data)
    except ValidationError as e:
        logger.warning(f"Discarding malformed form schema: {e.error_count()} error(s)")
        return []


def dump_responses(responses: Dict[str, Any]) -> str:
    return json.dumps(responses, default=_response_default)


def _response_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    return str(value)


def parse_responses(raw: Any) -> Dict[str, Any]:
    data = _decode(raw)
    if not isinstance(data, dict):
        if raw not in (None, ""):
            logger.warning("Discarding undecodable application responses")
        return {}
    return data
