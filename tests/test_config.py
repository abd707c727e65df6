"""Tests for fixture_tables.config and fixture_tables.naming."""

from __future__ import annotations

import json

import pytest

from fixture_tables.config import MappingConfig, load_config
from fixture_tables.naming import candidate_names, to_snake_case


# ─── MappingConfig ───────────────────────────────────────────────────────────


class TestMappingConfig:
    def test_defaults(self):
        config = MappingConfig()
        assert config.vertical_header == "property"
        assert config.backing_field_pattern == "_{name}"
        assert config.strict_backing_storage is True
        assert config.use_default_converters is True
        assert config.header_style == "exact"

    def test_from_dict_partial(self):
        config = MappingConfig.from_dict({"strict_backing_storage": False})
        assert config.strict_backing_storage is False
        assert config.vertical_header == "property"

    def test_from_dict_full(self):
        config = MappingConfig.from_dict({
            "vertical_header": "field",
            "backing_field_pattern": "m_{name}",
            "strict_backing_storage": False,
            "use_default_converters": False,
            "header_style": "snake_case",
        })
        assert config == MappingConfig("field", "m_{name}", False, False, "snake_case")

    def test_pattern_without_placeholder(self):
        with pytest.raises(ValueError, match="must contain"):
            MappingConfig(backing_field_pattern="_backing")

    def test_blank_vertical_header(self):
        with pytest.raises(ValueError, match="must not be blank"):
            MappingConfig(vertical_header="  ")

    def test_unknown_header_style(self):
        with pytest.raises(ValueError, match="header_style"):
            MappingConfig(header_style="camel")

    def test_from_dict_rejects_unknown_key(self):
        with pytest.raises(ValueError, match=r"Unknown mapping config key\(s\): strict_backing"):
            MappingConfig.from_dict({"strict_backing": False})

    @pytest.mark.parametrize("value", ["false", 0, None])
    def test_from_dict_rejects_non_bool(self, value):
        with pytest.raises(ValueError, match="strict_backing_storage must be true or false"):
            MappingConfig.from_dict({"strict_backing_storage": value})

    def test_non_string_header_rejected(self):
        with pytest.raises(ValueError, match="vertical_header must be a string"):
            MappingConfig(vertical_header=1)

    def test_frozen(self):
        config = MappingConfig()
        with pytest.raises(AttributeError):
            config.vertical_header = "key"


class TestLoadConfig:
    def test_load(self, tmp_path):
        path = tmp_path / "mapping.json"
        path.write_text(json.dumps({"vertical_header": "key", "header_style": "snake_case"}))
        config = load_config(path)
        assert config.vertical_header == "key"
        assert config.header_style == "snake_case"
        assert config.backing_field_pattern == "_{name}"

    def test_load_str_path(self, tmp_path):
        path = tmp_path / "mapping.json"
        path.write_text("{}")
        assert load_config(str(path)) == MappingConfig()

    def test_non_object_rejected(self, tmp_path):
        path = tmp_path / "mapping.json"
        path.write_text("[1, 2]")
        with pytest.raises(ValueError, match="JSON object"):
            load_config(path)

    def test_string_boolean_rejected(self, tmp_path):
        path = tmp_path / "mapping.json"
        path.write_text(json.dumps({"strict_backing_storage": "false"}))
        with pytest.raises(ValueError, match="must be true or false"):
            load_config(path)

    def test_invalid_value_rejected(self, tmp_path):
        path = tmp_path / "mapping.json"
        path.write_text(json.dumps({"backing_field_pattern": "oops"}))
        with pytest.raises(ValueError):
            load_config(path)


# ─── Header naming ───────────────────────────────────────────────────────────


class TestSnakeCase:
    @pytest.mark.parametrize(
        "header, expected",
        [
            ("Name", "name"),
            ("Zip Code", "zip_code"),
            ("ZipCode", "zip_code"),
            ("zipCode", "zip_code"),
            ("zip-code", "zip_code"),
            ("zip_code", "zip_code"),
            ("HTTPStatus", "http_status"),
            ("  Date  Of Birth ", "date_of_birth"),
        ],
    )
    def test_to_snake_case(self, header, expected):
        assert to_snake_case(header) == expected


class TestCandidateNames:
    def test_exact(self):
        assert candidate_names("Zip Code", "exact") == ("Zip Code",)

    def test_snake_case_adds_fallback(self):
        assert candidate_names("Zip Code", "snake_case") == ("Zip Code", "zip_code")

    def test_snake_case_no_duplicate(self):
        assert candidate_names("age", "snake_case") == ("age",)

    def test_unknown_style(self):
        with pytest.raises(ValueError, match="Unknown header style"):
            candidate_names("Name", "kebab")
