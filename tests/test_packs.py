"""Tests for pack loading and saving."""

import pytest

from icongen.errors import ConfigurationError, ParseError
from icongen.packs import find_record_by_name, list_pack_files, load_pack, save_pack


NDJSON = (
    '{"_id":"a1","name":"Acid Splash","type":"spell","system":{"school":"Elementalism","rank":0}}\n'
    '{"_id":"b2","name":"Cloak of Warding","type":"item","img":"icons/svg/item-bag.svg"}\n'
    '{"_id":"c3","name":"Éclair Rune","type":"spell"}\n'
)

ARRAY = '[{"_id":"a1","name":"Aid","type":"spell"},{"_id":"b2","name":"Bane","type":"spell"}]\n'


class TestLoadPack:
    def test_ndjson_detected(self, tmp_path):
        path = tmp_path / "spells.db"
        path.write_text(NDJSON, encoding="utf-8")
        docs, fmt = load_pack(path)
        assert fmt == "ndjson"
        assert [d["name"] for d in docs] == ["Acid Splash", "Cloak of Warding", "Éclair Rune"]

    def test_array_detected(self, tmp_path):
        path = tmp_path / "spells.db"
        path.write_text("\n  " + ARRAY, encoding="utf-8")
        docs, fmt = load_pack(path)
        assert fmt == "array"
        assert len(docs) == 2

    def test_blank_and_crlf_lines_are_ignored(self, tmp_path):
        path = tmp_path / "items.db"
        path.write_bytes(b'{"name":"A"}\r\n\r\n   \r\n{"name":"B"}\r\n')
        docs, fmt = load_pack(path)
        assert fmt == "ndjson"
        assert [d["name"] for d in docs] == ["A", "B"]

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.db"
        path.write_text("  \n", encoding="utf-8")
        assert load_pack(path) == ([], "ndjson")

    def test_malformed_line_reports_file_and_line(self, tmp_path):
        path = tmp_path / "items.db"
        path.write_text('{"name":"A"}\n{"name":"B"}\n{"name":\n', encoding="utf-8")
        with pytest.raises(ParseError) as excinfo:
            load_pack(path)
        assert excinfo.value.line == 3
        assert "items.db" in str(excinfo.value)
        assert "line 3" in str(excinfo.value)

    def test_malformed_array(self, tmp_path):
        path = tmp_path / "items.db"
        path.write_text('[{"name":"A"},', encoding="utf-8")
        with pytest.raises(ParseError, match="items.db"):
            load_pack(path)


class TestSavePack:
    def test_ndjson_round_trip_is_byte_identical(self, tmp_path):
        path = tmp_path / "spells.db"
        path.write_text(NDJSON, encoding="utf-8")
        docs, fmt = load_pack(path)
        save_pack(path, docs, fmt)
        assert path.read_text(encoding="utf-8") == NDJSON

    def test_array_round_trip_is_byte_identical(self, tmp_path):
        path = tmp_path / "spells.db"
        path.write_text(ARRAY, encoding="utf-8")
        docs, fmt = load_pack(path)
        save_pack(path, docs, fmt)
        assert path.read_text(encoding="utf-8") == ARRAY

    def test_preserves_order_and_format(self, tmp_path):
        path = tmp_path / "out.db"
        save_pack(path, [{"name": "B"}, {"name": "A"}], "ndjson")
        assert path.read_text(encoding="utf-8") == '{"name":"B"}\n{"name":"A"}\n'


def test_list_pack_files_sorted_and_filtered(tmp_path):
    for name in ("spells.db", "cantrips.db", "ITEMS.DB", "notes.txt"):
        (tmp_path / name).write_text("", encoding="utf-8")
    (tmp_path / "sub.db").mkdir()
    assert [p.name for p in list_pack_files(tmp_path)] == ["cantrips.db", "ITEMS.DB", "spells.db"]


def test_list_pack_files_missing_dir(tmp_path):
    with pytest.raises(ConfigurationError, match="packs/ not found"):
        list_pack_files(tmp_path / "packs")


def test_find_record_by_name():
    docs = [{"name": "Aid"}, "junk", {"name": "Bane", "_id": "x"}, {"name": "Bane", "_id": "y"}]
    assert find_record_by_name(docs, "Bane")["_id"] == "x"
    assert find_record_by_name(docs, "bane") is None


class TestEncodingEdgeCases:
    def test_lone_surrogate_round_trips_as_escape(self, tmp_path):
        path = tmp_path / "spells.db"
        text = '{"name":"Aid","type":"spell","note":"\\ud83d"}\n'
        path.write_text(text, encoding="utf-8")
        docs, fmt = load_pack(path)
        assert docs[0]["note"] == "\ud83d"

        save_pack(path, docs, fmt)

        assert path.read_text(encoding="utf-8") == text

    def test_lone_surrogate_in_array_pack(self, tmp_path):
        path = tmp_path / "items.db"
        save_pack(path, [{"name": "Odd \udc00 Ring"}], "array")
        assert path.read_text(encoding="utf-8") == '[{"name":"Odd \\udc00 Ring"}]\n'

    def test_invalid_utf8_is_a_parse_error(self, tmp_path):
        path = tmp_path / "bad.db"
        path.write_bytes(b'{"name":"\xff"}\n')
        with pytest.raises(ParseError, match="bad.db.*invalid UTF-8"):
            load_pack(path)
