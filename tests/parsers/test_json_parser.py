"""Tests for the JSON tree walker and exporter."""

import json

import pytest

from gameloc.core.constants import GameFormat
from gameloc.core.entries import JsonMetadata
from gameloc.core.errors import ParseError
from gameloc.parsers.json_parser import JsonParser, get_by_path, split_path


@pytest.fixture
def parser() -> JsonParser:
    return JsonParser()


def _nested(depth: int, leaf: str) -> dict:
    node: object = leaf
    for _ in range(depth):
        node = {"a": node}
    return node  # type: ignore[return-value]


class TestSplitPath:
    def test_dotted_and_indexed(self):
        assert split_path("dialogue[2].text") == ["dialogue", "2", "text"]

    def test_root_index(self):
        assert split_path("[0].name") == ["0", "name"]

    def test_nested_indexes(self):
        assert split_path("grid[1][2]") == ["grid", "1", "2"]


class TestJsonParse:
    def test_extracts_string_leaves(self, parser, sample_json):
        entries = parser.parse(sample_json, "npc.json")
        texts = [e.original_text for e in entries]
        assert texts == ["Dungeon Quest", "Guard", "Halt! Who goes there?", "Hero", "A friend."]

    def test_paths_and_context(self, parser, sample_json):
        entries = parser.parse(sample_json, "npc.json")
        halt = entries[2]
        assert halt.context == "dialogue[0].text"
        assert halt.metadata == JsonMetadata(path="dialogue[0].text")
        assert halt.source_file == "npc.json"

    def test_numbers_booleans_null_skipped(self, parser):
        entries = parser.parse('{"a": 1, "b": true, "c": null, "d": 2.5}', "x.json")
        assert entries == []

    def test_blank_strings_skipped(self, parser):
        entries = parser.parse('{"a": "", "b": "   ", "c": "ok"}', "x.json")
        assert [e.original_text for e in entries] == ["ok"]

    def test_root_string(self, parser):
        entries = parser.parse('"Hello"', "x.json")
        assert len(entries) == 1
        assert entries[0].context == "text"
        assert entries[0].metadata.path == ""

    def test_root_array(self, parser):
        entries = parser.parse('[{"name": "Potion"}, "Sword"]', "items.json")
        assert [e.metadata.path for e in entries] == ["[0].name", "[1]"]

    def test_depth_limit(self, parser):
        shallow = json.dumps(_nested(10, "kept"))
        deep = json.dumps(_nested(11, "dropped"))
        assert [e.original_text for e in parser.parse(shallow, "x.json")] == ["kept"]
        assert parser.parse(deep, "x.json") == []

    def test_bom_is_ignored(self, parser):
        entries = parser.parse('\ufeff{"a": "b"}', "x.json")
        assert entries[0].original_text == "b"

    def test_rpgmaker_tag(self, parser):
        entries = parser.parse('{"name": "Hero"}', "Actors.json", GameFormat.RPGMAKER)
        assert entries[0].metadata.format == GameFormat.RPGMAKER

    def test_malformed_raises_parse_error(self, parser):
        with pytest.raises(ParseError) as exc_info:
            parser.parse('{"a": ', "broken.json")
        assert exc_info.value.filename == "broken.json"
        assert "broken.json" in str(exc_info.value)

    def test_excessive_nesting_raises_parse_error(self, parser):
        with pytest.raises(ParseError) as exc_info:
            parser.parse("[" * 100_000 + "]" * 100_000, "deep.json")
        assert exc_info.value.filename == "deep.json"
        assert isinstance(exc_info.value.cause, RecursionError)


class TestJsonExport:
    def test_roundtrip_paths(self, parser, sample_json):
        entries = parser.parse(sample_json, "npc.json")
        for entry in entries:
            entry.translation = f"VI {entry.original_text}"

        exported = json.loads(parser.export(entries))
        for entry in entries:
            assert get_by_path(exported, entry.metadata.path) == entry.translation

    def test_untranslated_omitted(self, parser):
        entries = parser.parse('{"a": "One", "b": "Two"}', "x.json")
        entries[0].translation = "Một"
        assert json.loads(parser.export(entries)) == {"a": "Một"}

    def test_array_root(self, parser):
        entries = parser.parse('[{"name": "Potion"}, {"name": "Sword"}]', "items.json")
        entries[0].translation = "Thuốc"
        entries[1].translation = "Kiếm"
        assert json.loads(parser.export(entries)) == [{"name": "Thuốc"}, {"name": "Kiếm"}]

    def test_list_gaps_padded_with_null(self, parser):
        entries = parser.parse('{"lines": ["a", "b", "c"]}', "x.json")
        entries[2].translation = "C"
        assert json.loads(parser.export(entries)) == {"lines": [None, None, "C"]}

    def test_non_ascii_kept(self, parser):
        entries = parser.parse('{"a": "Hello"}', "x.json")
        entries[0].translation = "Xin chào"
        assert "Xin chào" in parser.export(entries)

    def test_nothing_translated(self, parser, sample_json):
        assert json.loads(parser.export(parser.parse(sample_json, "npc.json"))) == {}
