import json

import pytest

from docscan.normalization.exceptions import MalformedPayloadError
from docscan.normalization.parser import parse_payload

_OBJECT = {"documentType": "generic", "data": {"title": "x"}}


class TestParsePayload:
    def test_accepts_mapping(self) -> None:
        assert parse_payload(_OBJECT) == _OBJECT

    def test_returns_copy_of_mapping(self) -> None:
        result = parse_payload(_OBJECT)
        result["extra"] = 1
        assert "extra" not in _OBJECT

    def test_parses_json_text(self) -> None:
        assert parse_payload(json.dumps(_OBJECT)) == _OBJECT

    def test_parses_bytes(self) -> None:
        assert parse_payload(json.dumps(_OBJECT).encode()) == _OBJECT

    def test_strips_markdown_code_fences(self) -> None:
        content = "```json\n" + json.dumps(_OBJECT) + "\n```"
        assert parse_payload(content) == _OBJECT

    def test_strips_plain_code_fences(self) -> None:
        content = "```\n" + json.dumps(_OBJECT) + "\n```"
        assert parse_payload(content) == _OBJECT

    def test_extracts_object_surrounded_by_prose(self) -> None:
        content = "Here is the result:\n" + json.dumps(_OBJECT) + "\nHope this helps."
        assert parse_payload(content) == _OBJECT


class TestMalformed:
    @pytest.mark.parametrize("raw", ["", "   ", "not valid json", "[1, 2, 3]", "42"])
    def test_rejects_unstructured_text(self, raw: str) -> None:
        with pytest.raises(MalformedPayloadError):
            parse_payload(raw)

    def test_rejects_broken_embedded_object(self) -> None:
        with pytest.raises(MalformedPayloadError):
            parse_payload("result: {documentType: receipt}")

    def test_rejects_non_text(self) -> None:
        with pytest.raises(MalformedPayloadError):
            parse_payload(12.5)

    def test_rejects_invalid_utf8(self) -> None:
        with pytest.raises(MalformedPayloadError):
            parse_payload(b"\xff\xfe{")
