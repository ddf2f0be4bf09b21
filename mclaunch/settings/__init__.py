"""Settings file model, schema and interactive editor."""

from .schema import DEFAULT_SCHEMA, SettingSpec, SettingsSchema
from .store import LocalFileSystem, SettingLine, SettingsFile, SettingsStore
from .editor import (
    ConsoleInput,
    EditResult,
    InputSource,
    ScriptedInput,
    SettingChange,
    SettingsEditor,
)

__all__ = [
    "DEFAULT_SCHEMA",
    "SettingSpec",
    "SettingsSchema",
    "LocalFileSystem",
    "SettingLine",
    "SettingsFile",
    "SettingsStore",
    "ConsoleInput",
    "EditResult",
    "InputSource",
    "ScriptedInput",
    "SettingChange",
    "SettingsEditor",
]
