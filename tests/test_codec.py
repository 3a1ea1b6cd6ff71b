import json

from app.modules.forms.codec import dump_form_schema, dump_responses, parse_form_schema, parse_responses
from app.modules.forms.schemas import MultipleChoiceField, TextareaField, VideoUploadField


def test_form_schema_round_trip_preserves_order_and_attributes():
    fields = [
        MultipleChoiceField(id="f1", label="Level", required=True, options=["Beginner", "", "Pro"]),
        TextareaField(id="f2", label="Motivation", placeholder=""),
        VideoUploadField(id="f3", label="Audition"),
    ]

    parsed = parse_form_schema(dump_form_schema(fields))

    assert parsed == fields


def test_empty_form_schema_round_trips():
    assert dump_form_schema([]) == "[]"
    assert parse_form_schema("[]") == []


def test_dumped_schema_omits_attributes_a_type_does_not_have():
    stored = json.loads(dump_form_schema([VideoUploadField(id="f3", label="Audition")]))
    assert stored == [{"id": "f3", "type": "video-upload", "label": "Audition", "required": False}]


def test_parse_form_schema_tolerates_corrupt_data():
    assert parse_form_schema("{not json") == []
    assert parse_form_schema('{"id": "f1"}') == []
    assert parse_form_schema(None) == []
    assert parse_form_schema(42) == []


def test_parse_form_schema_discards_list_with_malformed_field():
    raw = json.dumps([
        {"id": "f1", "type": "textarea", "label": "Why?", "required": False},
        {"id": "f2", "type": "textarea", "label": "Oops", "required": "yes"},
    ])
    assert parse_form_schema(raw) == []


def test_parse_form_schema_accepts_decoded_json():
    parsed = parse_form_schema([{"id": "f1", "type": "textarea", "label": "Why?", "required": False}])
    assert parsed == [TextareaField(id="f1", label="Why?", required=False)]


def test_responses_round_trip():
    responses = {"f1": "Beginner", "f2": "Because", "f3": "clip.mp4"}
    assert parse_responses(dump_responses(responses)) == responses


def test_parse_responses_tolerates_corrupt_data():
    assert parse_responses("not json") == {}
    assert parse_responses("[1, 2]") == {}
    assert parse_responses(None) == {}
    assert parse_responses({"f1": "x"}) == {"f1": "x"}
