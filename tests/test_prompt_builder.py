import json

import pytest

from scanbrief.services.ai.errors import AnalysisError, ErrorKind
from scanbrief.services.ai.prompt_builder import (
    TRUNCATION_MARKER,
    build,
    serialize_data,
)

from .conftest import HOST_DATA

TEMPLATE = "Analyze this:\n{data}\nEnd."


def test_text_input_is_used_verbatim():
    prompt = build("ip,port\n1.2.3.4,22", TEMPLATE, 1000)

    assert prompt.data == "ip,port\n1.2.3.4,22"
    assert prompt.text == "Analyze this:\nip,port\n1.2.3.4,22\nEnd."
    assert prompt.truncated is False


def test_structured_input_is_indented_json():
    prompt = build(HOST_DATA, TEMPLATE, 10000)

    assert prompt.data == json.dumps(HOST_DATA, indent=2)
    assert prompt.original_length == len(prompt.data)


def test_build_is_idempotent_below_limit():
    first = build(HOST_DATA, TEMPLATE, 10000)
    second = build(HOST_DATA, TEMPLATE, 10000)

    assert first.text == second.text
    assert first.truncated is second.truncated is False


def test_oversized_input_is_cut_and_marked():
    raw = [{"ip": f"10.0.0.{i}", "port": 443} for i in range(200)]
    serialized = serialize_data(raw)
    limit = 500

    prompt = build(raw, TEMPLATE, limit)

    assert prompt.truncated is True
    assert len(prompt.data) == limit + len(TRUNCATION_MARKER)
    assert prompt.data == serialized[:limit] + TRUNCATION_MARKER
    assert prompt.original_length == len(serialized)
    assert prompt.text.endswith(TRUNCATION_MARKER + "\nEnd.")


def test_input_exactly_at_limit_is_not_truncated():
    prompt = build("x" * 50, TEMPLATE, 50)

    assert prompt.truncated is False
    assert prompt.data == "x" * 50


def test_braces_inside_data_are_not_interpreted():
    prompt = build("literal {data} and {other}", TEMPLATE, 1000)

    assert prompt.text == "Analyze this:\nliteral {data} and {other}\nEnd."


def test_non_ascii_is_preserved():
    prompt = build({"city": "Zürich"}, TEMPLATE, 1000)

    assert "Zürich" in prompt.text


@pytest.mark.parametrize("template", ["no placeholder", "{data} twice {data}"])
def test_template_must_have_exactly_one_placeholder(template):
    with pytest.raises(AnalysisError) as exc_info:
        build(HOST_DATA, template, 1000)

    assert exc_info.value.kind is ErrorKind.TEMPLATE_ERROR
