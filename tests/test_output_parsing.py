"""
Tests for recovering JSON arrays from model output.
"""

import pytest

from aeo_engine.output import JsonArrayParser, parse_json_array


@pytest.fixture
def parser():
    return JsonArrayParser()


class TestJsonArrayParser:

    def test_direct_array(self, parser):
        result = parser.parse('[{"queryId": "q1"}, {"queryId": "q2"}]')

        assert result.success
        assert result.parse_method == "direct"
        assert [i["queryId"] for i in result.items] == ["q1", "q2"]

    def test_fenced_array(self, parser):
        result = parser.parse('```json\n[{"queryId": "q1"}]\n```')

        assert result.parse_method == "direct"
        assert result.items == [{"queryId": "q1"}]

    def test_array_wrapped_in_prose(self, parser):
        raw = 'Here are the recommendations:\n[{"queryId": "q1", "Effort": "Low"}]\nLet me know!'
        result = parser.parse(raw)

        assert result.success
        assert result.items == [{"queryId": "q1", "Effort": "Low"}]

    def test_trailing_comma_repaired(self, parser):
        result = parser.parse('[{"queryId": "q1", "Effort": "Low",}, {"queryId": "q2"},]')

        assert result.parse_method == "repaired"
        assert len(result.items) == 2
        assert result.errors and result.errors[0].startswith("direct:")

    def test_object_by_object_fallback(self, parser):
        raw = '{"queryId": "q1"} some chatter {"queryId": "q2"} {"broken": }'
        result = parser.parse(raw)

        assert result.parse_method == "objects"
        assert [i["queryId"] for i in result.items] == ["q1", "q2"]

    def test_non_object_members_dropped(self, parser):
        result = parser.parse('[1, "two", null, {"queryId": "q1"}]')
        assert result.items == [{"queryId": "q1"}]

    def test_single_object(self, parser):
        assert parser.parse('{"queryId": "q1"}').items == [{"queryId": "q1"}]

    @pytest.mark.parametrize("raw", ["", "   ", None])
    def test_empty(self, parser, raw):
        result = parser.parse(raw)

        assert not result.success
        assert result.items == []
        assert result.parse_method == "none"
        assert result.errors == ["Empty response"]

    def test_unrecoverable(self, parser):
        result = parser.parse("I could not find any opportunities worth acting on.")

        assert not result.success
        assert result.parse_method == "none"
        assert result.errors

    def test_convenience_wrapper(self):
        assert parse_json_array('[{"a": 1}]') == [{"a": 1}]
        assert parse_json_array("nothing") == []
