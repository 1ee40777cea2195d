import json
import logging
import os
import tempfile

import pytest

from thrift_tools.formatter.options import (
    ConfigError,
    FormattingOptions,
    load_options_file,
    resolve_options,
)


class TestFormattingOptions:
    def test_defaults(self):
        options = FormattingOptions()
        assert options.align_types is True
        assert options.align_struct_defaults is False
        assert options.trailing_comma == "preserve"
        assert options.indent_size == 4
        assert options.max_line_length == 100
        assert options.collection_style == "preserve"
        assert options.incremental_formatting_enabled is False
        assert options.max_dirty_lines == 200

    def test_from_camel_case_mapping(self):
        options = FormattingOptions.from_mapping({"alignTypes": False, "indentSize": 2, "trailingComma": "add"})
        assert options.align_types is False
        assert options.indent_size == 2
        assert options.trailing_comma == "add"

    def test_snake_case_keys_accepted(self):
        assert FormattingOptions.from_mapping({"tab_size": 8}).tab_size == 8

    def test_invalid_values_fall_back_to_defaults(self, caplog):
        with caplog.at_level(logging.WARNING):
            options = FormattingOptions.from_mapping(
                {"indentSize": 0, "alignTypes": "yes", "trailingComma": "always", "tabSize": True, "bogus": 1}
            )
        assert options == FormattingOptions()
        assert "bogus" in caplog.text
        assert "trailingComma" in caplog.text

    def test_to_mapping_round_trip(self):
        options = FormattingOptions(indent_size=2, collection_style="auto")
        mapping = options.to_mapping()
        assert mapping["indentSize"] == 2
        assert mapping["collectionStyle"] == "auto"
        assert FormattingOptions.from_mapping(mapping) == options

    def test_indent(self):
        assert FormattingOptions().indent(2) == " " * 8
        assert FormattingOptions(insert_spaces=False).indent(2) == "\t\t"
        assert FormattingOptions().indent(0) == ""

    def test_display_width_expands_tabs(self):
        assert FormattingOptions(tab_size=4).display_width("\tab") == 6

    def test_resolve_options(self):
        options = FormattingOptions(indent_size=3)
        assert resolve_options(options) is options
        assert resolve_options(None) == FormattingOptions()
        assert resolve_options({"indentSize": 3}) == options


class TestLoadOptionsFile:
    def _write(self, content):
        fd, path = tempfile.mkstemp(suffix=".json")
        os.write(fd, content.encode())
        os.close(fd)
        return path

    def test_load(self):
        path = self._write(json.dumps({"alignComments": False, "maxLineLength": 80}))
        try:
            options = load_options_file(path)
            assert options.align_comments is False
            assert options.max_line_length == 80
        finally:
            os.unlink(path)

    def test_malformed_json(self):
        path = self._write("{not json")
        try:
            with pytest.raises(ConfigError):
                load_options_file(path)
        finally:
            os.unlink(path)

    def test_not_an_object(self):
        path = self._write("[1, 2]")
        try:
            with pytest.raises(ConfigError, match="must be a JSON object"):
                load_options_file(path)
        finally:
            os.unlink(path)

    def test_missing_file(self):
        with pytest.raises(ConfigError):
            load_options_file("/nonexistent/thrift-options.json")
