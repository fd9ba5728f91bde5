"""Tests for match data loading."""

import json

import pytest

from sparkstats.loader import DataLoadError, load_characters, parse_characters


class TestParseCharacters:
    """Tests for the accepted JSON layouts."""

    def test_list_of_characters(self, match_factory):
        data = [
            {"name": "Goku", "matches": [match_factory()]},
            {"name": "Vegeta", "matches": []},
        ]
        characters = parse_characters(data)
        assert [c.name for c in characters] == ["Goku", "Vegeta"]
        assert len(characters[0].matches) == 1

    def test_single_character(self, match_factory):
        characters = parse_characters({"name": "Goku", "matches": [match_factory()]})
        assert len(characters) == 1
        assert characters[0].name == "Goku"

    def test_name_to_matches_map(self, match_factory):
        characters = parse_characters({"Goku": [match_factory()], "Broly": [match_factory(), match_factory()]})
        assert [(c.name, len(c.matches)) for c in characters] == [("Goku", 1), ("Broly", 2)]

    def test_bare_match_list(self, match_factory):
        characters = parse_characters([match_factory()], source_name="Gohan")
        assert characters[0].name == "Gohan"

    def test_missing_name(self):
        characters = parse_characters({"matches": []})
        assert characters[0].name == "Unknown"

    @pytest.mark.parametrize("data", [42, "text", {"Goku": 5}, [1, 2]])
    def test_unsupported_layout(self, data):
        with pytest.raises(DataLoadError):
            parse_characters(data)


class TestLoadCharacters:
    """Tests for file and directory loading."""

    def test_single_file(self, corpus_file):
        characters = load_characters(corpus_file)
        assert [c.name for c in characters] == ["Goku", "Vegeta"]

    def test_accepts_string_path(self, corpus_file):
        assert len(load_characters(str(corpus_file))) == 2

    def test_invalid_json_file_raises(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(DataLoadError, match="Invalid JSON"):
            load_characters(path)

    def test_missing_path_raises(self, tmp_path):
        with pytest.raises(DataLoadError, match="not found"):
            load_characters(tmp_path / "absent.json")

    def test_directory_skips_bad_files(self, tmp_path, match_factory):
        (tmp_path / "a_goku.json").write_text(json.dumps({"name": "Goku", "matches": [match_factory()]}))
        (tmp_path / "b_broken.json").write_text("[")
        (tmp_path / "c_vegeta.json").write_text(json.dumps([match_factory()]))
        (tmp_path / "notes.txt").write_text("ignored")

        characters = load_characters(tmp_path)
        assert [c.name for c in characters] == ["Goku", "c_vegeta"]

    def test_data_load_error_is_value_error(self):
        assert issubclass(DataLoadError, ValueError)

    def test_directory_skips_undecodable_file(self, tmp_path, match_factory):
        (tmp_path / "good.json").write_text(json.dumps({"name": "Goku", "matches": [match_factory()]}))
        (tmp_path / "bad.json").write_bytes(b"\xff\xfe\x00garbage")

        characters = load_characters(tmp_path)
        assert [c.name for c in characters] == ["Goku"]

    def test_undecodable_file_raises(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_bytes(b"\xff\xfe\x00garbage")
        with pytest.raises(DataLoadError, match="Invalid JSON"):
            load_characters(path)
