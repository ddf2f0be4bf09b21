"""Reading, editing and atomically rewriting the settings file.

The file is kept as a list of lines so that anything this tool does not
understand (comments, blank lines, settings for other tools, malformed lines)
is written back exactly as it was read.
"""

import codecs
import os
import re
import uuid
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from mclaunch.core.exceptions import (
    ConfigurationError,
    FileOperationError,
    SettingsParseError,
    ValidationError,
)
from mclaunch.core.logging_config import get_logger
from mclaunch.settings.schema import DEFAULT_SCHEMA, SettingsSchema

SEPARATORS = ("=", ":")
COMMENT_PREFIXES = ("#", "!")
_LINE_RE = re.compile(r"[^\r\n]*(?:\r\n|\r|\n)|[^\r\n]+\Z")

SettingValue = Union[str, int, bool, None]


def _split_eol(raw: str) -> Tuple[str, str]:
    """Split a raw line into (body, line terminator)."""
    if raw.endswith("\r\n"):
        return raw[:-2], "\r\n"
    if raw.endswith("\n") or raw.endswith("\r"):
        return raw[:-1], raw[-1]
    return raw, ""


def _separator_index(body: str) -> int:
    positions = [body.find(sep) for sep in SEPARATORS if sep in body]
    return min(positions) if positions else -1


@dataclass
class SettingLine:
    """One physical line of the settings file."""

    raw: str
    key: Optional[str] = None
    value: Optional[str] = None

    @property
    def is_setting(self) -> bool:
        return self.key is not None

    @classmethod
    def parse(cls, raw: str) -> "SettingLine":
        body, _ = _split_eol(raw)
        stripped = body.lstrip()
        if not stripped or stripped.startswith(COMMENT_PREFIXES):
            return cls(raw=raw)

        index = _separator_index(body)
        if index < 0:
            return cls(raw=raw)

        key = body[:index].strip()
        if not key:
            return cls(raw=raw)

        return cls(raw=raw, key=key, value=body[index + 1 :].strip())

    def with_value(self, value: str) -> "SettingLine":
        """Copy of this line with only the value part rewritten."""
        body, eol = _split_eol(self.raw)
        index = _separator_index(body)
        after = body[index + 1 :]
        padding = after[: len(after) - len(after.lstrip())]
        raw = f"{body[: index + 1]}{padding}{value}{eol}"
        return replace(self, raw=raw, value=value)


@dataclass
class SettingsFile:
    """In-memory model of a settings file."""

    lines: List[SettingLine] = field(default_factory=list)
    path: Optional[Path] = None
    created: bool = False
    dirty: bool = False
    bom: bool = False

    def find(self, name: str) -> Optional[SettingLine]:
        for line in self.lines:
            if line.key == name:
                return line
        return None

    def index_of(self, name: str) -> int:
        for i, line in enumerate(self.lines):
            if line.key == name:
                return i
        return -1

    def keys(self) -> List[str]:
        return [line.key for line in self.lines if line.is_setting]

    def newline(self) -> str:
        for line in self.lines:
            _, eol = _split_eol(line.raw)
            if eol:
                return eol
        return "\n"

    def to_text(self) -> str:
        return "".join(line.raw for line in self.lines)

    def copy(self) -> "SettingsFile":
        return replace(self, lines=list(self.lines))


class LocalFileSystem:
    """File access used by SettingsStore; swap it out in tests."""

    def exists(self, path: Path) -> bool:
        return path.exists()

    def is_file(self, path: Path) -> bool:
        return path.is_file()

    def read_bytes(self, path: Path) -> bytes:
        return path.read_bytes()

    def write_bytes(self, path: Path, data: bytes) -> None:
        with open(path, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())

    def replace(self, source: Path, target: Path) -> None:
        os.replace(source, target)

    def remove(self, path: Path) -> None:
        os.remove(path)


class SettingsStore:
    """Loads, validates, mutates and saves the settings file."""

    def __init__(
        self,
        filename: str = "settings.txt",
        encoding: str = "utf-8",
        schema: SettingsSchema = DEFAULT_SCHEMA,
        fs: Optional[LocalFileSystem] = None,
    ):
        """Initialize the store.

        Args:
            filename: Settings file name inside the server directory
            encoding: Text encoding of the settings file
            schema: Known settings and their types
            fs: Filesystem capability, defaults to the local filesystem

        Raises:
            ConfigurationError: the encoding is not a known codec
        """
        try:
            codec = codecs.lookup(encoding)
        except LookupError as e:
            raise ConfigurationError(
                f"Unknown settings file encoding: {encoding}",
                config_key="encoding",
            ) from e

        self.filename = filename
        self.encoding = encoding
        # A UTF-8 byte order mark is kept aside so it never sticks to a key
        self._strip_bom = codec.name == "utf-8"
        self.schema = schema
        self.fs = fs or LocalFileSystem()
        self.logger = get_logger("settings.store")

    def path_for(self, directory: Union[str, Path]) -> Path:
        return Path(directory) / self.filename

    def load(self, directory: Union[str, Path]) -> SettingsFile:
        """Read the settings file from a server directory.

        A missing file is replaced by the default template and flagged as
        created so that it is written before the server starts.

        Raises:
            FileOperationError: the file exists but cannot be read
            SettingsParseError: the file is not valid text or repeats a setting
        """
        path = self.path_for(directory)

        if not self.fs.exists(path):
            self.logger.info(f"No settings file at {path}, using defaults")
            settings = self.parse(
                "".join(self.schema.default_lines()), path=path
            )
            settings.created = True
            return settings

        if not self.fs.is_file(path):
            raise FileOperationError(
                f"Settings path is not a regular file: {path}",
                file_path=str(path),
                operation="read",
            )

        try:
            data = self.fs.read_bytes(path)
        except OSError as e:
            raise FileOperationError(
                f"Cannot read settings file {path}: {e}",
                file_path=str(path),
                operation="read",
            ) from e

        bom = self._strip_bom and data.startswith(codecs.BOM_UTF8)
        if bom:
            data = data[len(codecs.BOM_UTF8) :]

        try:
            text = data.decode(self.encoding)
        except UnicodeDecodeError as e:
            raise SettingsParseError(
                f"Settings file {path} is not valid {self.encoding} text",
                file_path=str(path),
                details=str(e),
            ) from e

        settings = self.parse(text, path=path)
        settings.bom = bom
        self._warn_invalid_values(settings)
        self.logger.debug(f"Loaded {len(settings.keys())} settings from {path}")
        return settings

    def parse(self, text: str, path: Optional[Path] = None) -> SettingsFile:
        """Build a SettingsFile from text, keeping every line verbatim."""
        lines: List[SettingLine] = []
        seen: Dict[str, int] = {}

        raw_lines = (match.group(0) for match in _LINE_RE.finditer(text))
        for number, raw in enumerate(raw_lines, 1):
            line = SettingLine.parse(raw)
            if line.is_setting:
                if line.key in seen:
                    raise SettingsParseError(
                        f"Duplicate setting {line.key!r} on lines "
                        f"{seen[line.key]} and {number}",
                        file_path=str(path) if path else None,
                        line_number=number,
                    )
                seen[line.key] = number
            lines.append(line)

        return SettingsFile(lines=lines, path=path)

    def _warn_invalid_values(self, settings: SettingsFile) -> None:
        for line in settings.lines:
            spec = self.schema.get(line.key) if line.is_setting else None
            if spec is None or not line.value:
                continue
            try:
                spec.validate_value(line.value)
            except ValidationError as e:
                self.logger.warning(f"Ignoring stored value: {e}")

    def get(self, settings: SettingsFile, name: str) -> Optional[str]:
        """Current value of a setting, or None when absent or unset."""
        line = settings.find(name)
        if line is None or not line.value:
            return None
        return line.value

    def values(self, settings: SettingsFile) -> Dict[str, Optional[str]]:
        """Every setting in file order."""
        return {
            line.key: (line.value or None)
            for line in settings.lines
            if line.is_setting
        }

    def launch_values(self, settings: SettingsFile) -> Dict[str, Optional[str]]:
        """Canonical values of the known settings; invalid stored values are dropped."""
        result: Dict[str, Optional[str]] = {}
        for spec in self.schema:
            stored = self.get(settings, spec.name)
            if stored is None:
                result[spec.name] = None
                continue
            try:
                result[spec.name] = spec.validate_value(stored)
            except ValidationError:
                result[spec.name] = None
        return result

    def set(self, settings: SettingsFile, name: str, value: SettingValue) -> bool:
        """Validate and apply a value in memory.

        Returns:
            True when the file content changed

        Raises:
            ValidationError: the name or value is not acceptable; nothing changes
        """
        self._check_name(name)
        text = self._canonical(name, value)

        index = settings.index_of(name)
        if index >= 0:
            line = settings.lines[index]
            if (line.value or "") == text:
                return False
            settings.lines[index] = line.with_value(text)
        else:
            newline = settings.newline()
            if settings.lines:
                last = settings.lines[-1]
                if not _split_eol(last.raw)[1]:
                    settings.lines[-1] = replace(last, raw=last.raw + newline)
            settings.lines.append(SettingLine.parse(f"{name}={text}{newline}"))

        settings.dirty = True
        return True

    def _check_name(self, name: str) -> None:
        if (
            not name
            or name != name.strip()
            or name.startswith(COMMENT_PREFIXES)
            or any(ch in name for ch in SEPARATORS + ("\n", "\r"))
        ):
            raise ValidationError(f"Invalid setting name {name!r}", setting=name)

    def _canonical(self, name: str, value: SettingValue) -> str:
        if isinstance(value, bool):
            value = "true" if value else "false"
        elif isinstance(value, int):
            value = str(value)

        if value is not None and ("\n" in value or "\r" in value):
            raise ValidationError(
                f"{name} cannot contain line breaks", setting=name, value=value
            )

        spec = self.schema.get(name)
        if spec is None:
            text = "" if value is None else value.strip()
        else:
            canonical = spec.validate_value(value)
            text = "" if canonical is None else canonical

        try:
            text.encode(self.encoding)
        except UnicodeEncodeError as e:
            raise ValidationError(
                f"{name} cannot be stored as {self.encoding} text",
                setting=name,
                value=text,
                details=str(e),
            ) from e
        return text

    def save(self, settings: SettingsFile, directory: Union[str, Path]) -> Path:
        """Write the settings file atomically.

        The content goes to a temporary file next to the target which is then
        renamed over it, so a failure leaves the previous file untouched.

        Raises:
            FileOperationError: the file could not be written
        """
        path = self.path_for(directory)
        tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")

        try:
            data = settings.to_text().encode(self.encoding)
        except UnicodeEncodeError as e:
            raise FileOperationError(
                f"Cannot write settings file {path}: content is not "
                f"representable as {self.encoding}",
                file_path=str(path),
                operation="write",
                details=str(e),
            ) from e
        if settings.bom:
            data = codecs.BOM_UTF8 + data

        try:
            self.fs.write_bytes(tmp_path, data)
            self.fs.replace(tmp_path, path)
        except OSError as e:
            self._discard(tmp_path)
            raise FileOperationError(
                f"Cannot write settings file {path}: {e}",
                file_path=str(path),
                operation="write",
            ) from e

        settings.path = path
        settings.created = False
        settings.dirty = False
        self.logger.info(f"Saved settings to {path}")
        return path

    def _discard(self, tmp_path: Path) -> None:
        try:
            if self.fs.exists(tmp_path):
                self.fs.remove(tmp_path)
        except OSError as e:
            self.logger.warning(f"Could not remove temporary file {tmp_path}: {e}")
