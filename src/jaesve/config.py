"""Application configuration defaults and config-file layering."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field, fields as dataclass_fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

from jaesve.errors import ConfigError

LOGGER = logging.getLogger(__name__)

SYSTEM_CONFIG_PATH = Path("/etc/jaesve.toml")

_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "0": "\0", "\\": "\\"}


class Field(str, Enum):
    """Output columns, in the order they may appear on a line."""

    IDENT = "ident"
    TYPE = "type"
    POINTER = "pointer"
    VALUE = "value"


class Column(str, Enum):
    """Record column a regex filter can be applied to."""

    POINTER = "pointer"
    TYPE = "type"
    VALUE = "value"
    SEPARATOR = "separator"

    @classmethod
    def parse(cls, name: str) -> "Column":
        key = name.strip().lower()
        key = {"path": "pointer", "key": "pointer", "sep": "separator"}.get(key, key)
        try:
            return cls(key)
        except ValueError:
            choices = ", ".join(c.value for c in cls)
            raise ConfigError(f"Unknown column {name!r}, expected one of: {choices}") from None


DEFAULT_FIELDS = (Field.IDENT, Field.TYPE, Field.POINTER, Field.VALUE)


def decode_escapes(text: str) -> str:
    """Turn backslash escapes such as ``\\t`` into the characters they name."""
    out: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text) and text[i + 1] in _ESCAPES:
            out.append(_ESCAPES[text[i + 1]])
            i += 2
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def parse_fields(text: str) -> tuple[Field, ...]:
    """Parse a dot separated field list such as ``type.pointer.value``."""
    names = [part.strip().lower() for part in text.split(".") if part.strip()]
    if not names:
        raise ConfigError("Field format must name at least one field")
    result: list[Field] = []
    for name in names:
        try:
            item = Field(name)
        except ValueError:
            choices = ", ".join(f.value for f in Field)
            raise ConfigError(f"Unknown field {name!r}, expected one of: {choices}") from None
        if item in result:
            raise ConfigError(f"Field {name!r} listed more than once")
        result.append(item)
    return tuple(result)


@dataclass(slots=True, frozen=True)
class FormatOptions:
    """Options controlling how a record is rendered into a line."""

    separator: str = ", "
    left_delimiter: str = '"'
    right_delimiter: str = '"'
    begin_record: str = ""
    end_record: str = "\n"
    hide_type: bool = False
    header: bool = False
    fields: tuple[Field, ...] = DEFAULT_FIELDS
    regex_pattern: str | None = None
    regex_column: Column | None = None

    def validate(self) -> None:
        if not self.fields:
            raise ConfigError("Field format must name at least one field")
        if self.regex_pattern is not None and self.regex_column is Column.TYPE and self.hide_type:
            raise ConfigError("Cannot filter on the type column while type output is hidden")


@dataclass(slots=True)
class AppConfig:
    format: FormatOptions = field(default_factory=FormatOptions)
    multi_document: int | None = None
    carry_ident: bool = False
    base_path: str = ""
    input_buffer_size: int = 8192
    output_buffer_size: int = 8192
    linereader_eol: str = "\n"
    verbose: int = 0

    def validate(self) -> None:
        """Reject settings that cannot work, before any input is read."""
        self.format.validate()
        if self.input_buffer_size <= 0:
            raise ConfigError("input_buffer_size must be positive")
        if self.output_buffer_size <= 0:
            raise ConfigError("output_buffer_size must be positive")
        if self.multi_document is not None and self.multi_document < 0:
            raise ConfigError("multi_document start must not be negative")
        if len(self.linereader_eol.encode("utf-8")) != 1:
            raise ConfigError(f"linereader_eol must be a single byte, got {self.linereader_eol!r}")

    @property
    def eol_bytes(self) -> bytes:
        return self.linereader_eol.encode("utf-8")

    def with_overrides(self, **overrides: Any) -> "AppConfig":
        """Return a copy where every non-None override replaces the current value.

        Keys naming a ``FormatOptions`` field are applied to ``format``.
        """
        format_names = {f.name for f in dataclass_fields(FormatOptions)}
        app_changes = {}
        format_changes = {}
        for key, value in overrides.items():
            if value is None:
                continue
            if key in format_names:
                format_changes[key] = value
            else:
                app_changes[key] = value
        if format_changes:
            app_changes["format"] = replace(self.format, **format_changes)
        return replace(self, **app_changes)


# Keys accepted at the top level of a config file, with their expected type.
_FILE_KEYS: dict[str, type | tuple[type, ...]] = {
    "separator": str,
    "left_delimiter": str,
    "right_delimiter": str,
    "begin_record": str,
    "end_record": str,
    "hide_type": bool,
    "header": bool,
    "format": str,
    "regex": str,
    "column": str,
    "multi_document": int,
    "carry_ident": bool,
    "base_path": str,
    "verbose": int,
}

_SUBCONFIG_KEYS: dict[str, type] = {
    "input_buffer_size": int,
    "output_buffer_size": int,
    "linereader_eol": str,
}

_ESCAPED_KEYS = {"separator", "left_delimiter", "right_delimiter", "begin_record", "end_record", "linereader_eol"}


def _check_type(path: Path, key: str, value: Any, expected: type | tuple[type, ...]) -> Any:
    # bool is an int subclass; keep booleans out of integer settings
    if (expected is int and isinstance(value, bool)) or not isinstance(value, expected):
        raise ConfigError(f"{path}: '{key}' has invalid value {value!r}")
    return value


def read_config_file(path: Path) -> dict[str, Any]:
    """Read one TOML config file into a flat settings mapping.

    Raises ``OSError`` if the file cannot be read and ``ConfigError`` if it
    is not valid TOML or holds invalid values.
    """
    with path.open("rb") as handle:
        try:
            raw = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"{path}: invalid TOML") from exc

    settings: dict[str, Any] = {}
    for key, value in raw.items():
        if key == "config":
            if not isinstance(value, dict):
                raise ConfigError(f"{path}: 'config' must be a table")
            for sub_key, sub_value in value.items():
                if sub_key not in _SUBCONFIG_KEYS:
                    LOGGER.warning("%s: ignoring unknown key 'config.%s'", path, sub_key)
                    continue
                settings[sub_key] = _check_type(path, sub_key, sub_value, _SUBCONFIG_KEYS[sub_key])
        elif key in _FILE_KEYS:
            settings[key] = _check_type(path, key, value, _FILE_KEYS[key])
        else:
            LOGGER.warning("%s: ignoring unknown key '%s'", path, key)

    for key in _ESCAPED_KEYS & settings.keys():
        settings[key] = decode_escapes(settings[key])
    return settings


def merge_config_files(paths: Sequence[Path], *, include_system: bool = True) -> dict[str, Any]:
    """Layer config files so that earlier paths take priority.

    The system-wide file is consulted last. Files that cannot be opened
    are logged and skipped.
    """
    candidates: list[Path] = list(paths)
    if include_system:
        candidates.append(SYSTEM_CONFIG_PATH)

    merged: dict[str, Any] = {}
    for path in candidates:
        try:
            settings = read_config_file(path)
        except OSError as exc:
            if path == SYSTEM_CONFIG_PATH and not path.exists():
                LOGGER.debug("No system config at %s", path)
            else:
                LOGGER.warning("Unable to open config path %s: %s", path, exc)
            continue
        LOGGER.debug("Loaded config from %s", path)
        for key, value in settings.items():
            merged.setdefault(key, value)
    return merged


def settings_to_overrides(settings: Mapping[str, Any]) -> dict[str, Any]:
    """Translate flat file settings into ``AppConfig.with_overrides`` keywords."""
    overrides = dict(settings)
    if "format" in overrides:
        overrides["fields"] = parse_fields(overrides.pop("format"))
    if "regex" in overrides:
        overrides["regex_pattern"] = overrides.pop("regex")
    if "column" in overrides:
        overrides["regex_column"] = Column.parse(overrides.pop("column"))
    return overrides


def load_config(paths: Iterable[Path] = (), *, include_system: bool = True) -> AppConfig:
    """Build an ``AppConfig`` from defaults layered under config files."""
    settings = merge_config_files(list(paths), include_system=include_system)
    return AppConfig().with_overrides(**settings_to_overrides(settings))
