"""Formatting options: a closed, typed set of style settings."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

logger = logging.getLogger(__name__)

TRAILING_COMMA_CHOICES = ("preserve", "add", "remove")
COLLECTION_STYLE_CHOICES = ("preserve", "multiline", "auto")


class ConfigError(Exception):
    """Raised when a configuration file cannot be loaded."""


@dataclass(frozen=True)
class FormattingOptions:
    align_types: bool = True
    align_field_names: bool = True
    align_struct_defaults: bool = False
    align_annotations: bool = True
    align_comments: bool = True
    align_enum_names: bool = True
    align_enum_equals: bool = True
    align_enum_values: bool = True
    trailing_comma: str = "preserve"
    indent_size: int = 4
    max_line_length: int = 100
    collection_style: str = "preserve"
    insert_spaces: bool = True
    tab_size: int = 4
    incremental_formatting_enabled: bool = False
    max_dirty_lines: int = 200

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, Any]]) -> FormattingOptions:
        """Build options from camelCase (editor style) or snake_case keys.

        Unknown keys and invalid values are ignored with a warning so the
        documented default applies.
        """
        accepted: Dict[str, Any] = {}
        for key, value in (values or {}).items():
            attr = _CAMEL_TO_ATTR.get(key, key)
            if attr not in _DEFAULTS:
                logger.warning("Ignoring unknown formatting option %r", key)
                continue
            if not _valid(attr, value):
                logger.warning("Ignoring invalid value %r for formatting option %r", value, key)
                continue
            accepted[attr] = value
        return cls(**accepted)

    def to_mapping(self) -> Dict[str, Any]:
        """camelCase view, the shape editors and config files use."""
        return {_ATTR_TO_CAMEL[name]: value for name, value in asdict(self).items()}

    def indent(self, level: int) -> str:
        if level <= 0:
            return ""
        if self.insert_spaces:
            return " " * (self.indent_size * level)
        return "\t" * level

    def display_width(self, text: str) -> int:
        """Width of a line with tabs expanded to ``tab_size``."""
        return len(text.expandtabs(self.tab_size))


_CAMEL_TO_ATTR = {
    "alignTypes": "align_types",
    "alignFieldNames": "align_field_names",
    "alignStructDefaults": "align_struct_defaults",
    "alignAnnotations": "align_annotations",
    "alignComments": "align_comments",
    "alignEnumNames": "align_enum_names",
    "alignEnumEquals": "align_enum_equals",
    "alignEnumValues": "align_enum_values",
    "trailingComma": "trailing_comma",
    "indentSize": "indent_size",
    "maxLineLength": "max_line_length",
    "collectionStyle": "collection_style",
    "insertSpaces": "insert_spaces",
    "tabSize": "tab_size",
    "incrementalFormattingEnabled": "incremental_formatting_enabled",
    "maxDirtyLines": "max_dirty_lines",
}
_ATTR_TO_CAMEL = {attr: camel for camel, attr in _CAMEL_TO_ATTR.items()}
_DEFAULTS = {f.name: f.default for f in fields(FormattingOptions)}
_CHOICES = {
    "trailing_comma": TRAILING_COMMA_CHOICES,
    "collection_style": COLLECTION_STYLE_CHOICES,
}


def _valid(attr: str, value: Any) -> bool:
    default = _DEFAULTS[attr]
    if isinstance(default, bool):
        return isinstance(value, bool)
    if isinstance(default, int):
        return isinstance(value, int) and not isinstance(value, bool) and value > 0
    return value in _CHOICES[attr]


OptionsLike = Union[FormattingOptions, Mapping[str, Any], None]


def resolve_options(options: OptionsLike) -> FormattingOptions:
    if isinstance(options, FormattingOptions):
        return options
    return FormattingOptions.from_mapping(options)


def load_options_file(path: Union[str, Path]) -> FormattingOptions:
    """Read options from a JSON object of camelCase keys."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Cannot read formatting options from {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Formatting options in {path} must be a JSON object")
    return FormattingOptions.from_mapping(data)
