import pytest

from app.ocr.exceptions import ParseError
from app.ocr.response_parser import (
    parse_fenced,
    parse_json_array,
    parse_lenient,
    strip_code_fences,
)

FENCED = '```json\n[{"name":"A","address":"1 St","date":"2024-01-05","ward":"3"}]\n```'


class TestStripCodeFences:
    def test_removes_language_fence(self) -> None:
        assert strip_code_fences(FENCED).startswith("[")
        assert strip_code_fences(FENCED).endswith("]")

    def test_leaves_plain_text_alone(self) -> None:
        assert strip_code_fences("  [1, 2]  ") == "[1, 2]"


class TestParseJsonArray:
    def test_rejects_objects(self) -> None:
        with pytest.raises(ParseError, match="array"):
            parse_json_array('{"name": "A"}')

    def test_rejects_invalid_json(self) -> None:
        with pytest.raises(ParseError):
            parse_json_array("not json")


class TestParseFenced:
    def test_parses_fenced_array(self) -> None:
        rows = parse_fenced(FENCED)

        assert rows == [{"name": "A", "address": "1 St", "date": "2024-01-05", "ward": "3"}]

    def test_empty_array(self) -> None:
        assert parse_fenced("```\n[]\n```") == []

    def test_prose_around_fence_fails(self) -> None:
        with pytest.raises(ParseError):
            parse_fenced("Here you go:\n" + FENCED)


class TestParseLenient:
    def test_finds_fenced_array_inside_prose(self) -> None:
        rows = parse_lenient("Here are the rows:\n" + FENCED + "\nLet me know!")

        assert rows[0]["name"] == "A"

    def test_accepts_bare_array(self) -> None:
        assert parse_lenient('[{"name": "B"}]') == [{"name": "B"}]

    def test_uppercase_fence_label(self) -> None:
        assert parse_lenient('```JSON\n[{"ward": "5"}]\n```') == [{"ward": "5"}]

    def test_unparseable_raises(self) -> None:
        with pytest.raises(ParseError):
            parse_lenient("I could not read this page.")
