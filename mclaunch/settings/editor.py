"""Interactive keep-or-replace walk over the known settings."""

import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import BinaryIO, Iterable, List, Optional, TextIO

from mclaunch.core.exceptions import ValidationError
from mclaunch.core.logging_config import get_logger, log_setting_change
from mclaunch.core.user_feedback import UserFeedback
from mclaunch.settings.schema import SettingSpec
from mclaunch.settings.store import SettingsFile, SettingsStore

CLEAR_TOKEN = ":none"
ABORT_TOKEN = ":abort"


class InputSource(ABC):
    """Where the editor's answers come from."""

    @abstractmethod
    def read(self, prompt: str) -> str:
        """Return one answer. Raises EOFError when no more input is available."""


class ConsoleInput(InputSource):
    """Reads answers from the terminal.

    Lines are taken from the binary stdin buffer, the same layer the console
    relay forwards from, so nothing typed or piped ahead of the server start
    is held back in a text wrapper.
    """

    def __init__(
        self,
        stream: Optional[BinaryIO] = None,
        output: Optional[TextIO] = None,
        encoding: Optional[str] = None,
    ):
        self.stream = stream
        self.output = output
        self.encoding = encoding

    def read(self, prompt: str) -> str:
        stream = self.stream if self.stream is not None else sys.stdin.buffer
        output = self.output if self.output is not None else sys.stdout
        encoding = self.encoding or getattr(sys.stdin, "encoding", None) or "utf-8"

        output.write(prompt)
        output.flush()
        line = stream.readline()
        if not line:
            raise EOFError("end of input")
        return line.decode(encoding, errors="replace").rstrip("\r\n")


class ScriptedInput(InputSource):
    """Replays a fixed list of answers, for tests and automation."""

    def __init__(self, responses: Iterable[str]):
        self.responses = list(responses)
        self.prompts: List[str] = []

    def read(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.responses:
            raise EOFError("scripted input exhausted")
        return self.responses.pop(0)


@dataclass
class SettingChange:
    """One accepted edit."""

    name: str
    old: Optional[str]
    new: Optional[str]

    def describe(self) -> str:
        old = self.old if self.old is not None else "<unset>"
        new = self.new if self.new is not None else "<unset>"
        return f"{self.name}: {old} -> {new}"


@dataclass
class EditResult:
    """Outcome of an editing session."""

    changes: List[SettingChange] = field(default_factory=list)
    aborted: bool = False

    @property
    def has_changes(self) -> bool:
        return bool(self.changes)


class EditorAborted(Exception):
    """Raised inside a session when the user asks to cancel."""


class SettingsEditor:
    """Prompts for every known setting and applies the accepted values.

    Answers:
        empty line  keep the current value
        :none       unset an optional setting
        :abort      cancel the whole session, nothing is applied
        anything    new value, re-prompted until it validates
    """

    def __init__(
        self,
        store: SettingsStore,
        input_source: Optional[InputSource] = None,
        feedback: Optional[UserFeedback] = None,
    ):
        self.store = store
        self.input_source = input_source or ConsoleInput()
        self.feedback = feedback or UserFeedback()
        self.logger = get_logger("settings.editor")

    def run(self, settings: SettingsFile) -> EditResult:
        """Walk the schema against a scratch copy, then apply to ``settings``.

        On abort ``settings`` is left exactly as it was.
        """
        scratch = settings.copy()
        changes: List[SettingChange] = []

        self.feedback.info(
            f"Press Enter to keep a value, {CLEAR_TOKEN} to unset it, "
            f"{ABORT_TOKEN} to cancel."
        )

        try:
            for spec in self.store.schema:
                change = self._edit_setting(scratch, spec)
                if change is not None:
                    changes.append(change)
        except (EditorAborted, EOFError, KeyboardInterrupt):
            self.feedback.warning("Editing cancelled, no changes were applied")
            self.logger.info("Editor session aborted")
            return EditResult(aborted=True)

        for change in changes:
            self.store.set(settings, change.name, change.new)
            log_setting_change(self.logger, change.name, change.old, change.new)

        if not changes:
            self.logger.debug("Editor session finished without changes")

        return EditResult(changes=changes)

    def _edit_setting(
        self, scratch: SettingsFile, spec: SettingSpec
    ) -> Optional[SettingChange]:
        current = self.store.get(scratch, spec.name)

        self.feedback.info(f"{spec.label} ({spec.name})")
        if spec.description:
            self.feedback.info(f"  {spec.description}")

        while True:
            answer = self.input_source.read(self._prompt(spec, current)).strip()

            if answer == ABORT_TOKEN:
                raise EditorAborted()
            if not answer:
                return None

            value: Optional[str] = answer
            if answer == CLEAR_TOKEN:
                if not spec.optional:
                    self.feedback.warning(f"{spec.name} cannot be unset")
                    continue
                value = None

            try:
                changed = self.store.set(scratch, spec.name, value)
            except ValidationError as e:
                self.feedback.warning(str(e))
                continue

            if not changed:
                return None
            return SettingChange(
                name=spec.name, old=current, new=self.store.get(scratch, spec.name)
            )

    def _prompt(self, spec: SettingSpec, current: Optional[str]) -> str:
        if spec.kind == "bool":
            hint = "true/false"
        elif spec.kind == "int":
            low = spec.minimum if spec.minimum is not None else ""
            high = spec.maximum if spec.maximum is not None else ""
            hint = f"number {low}-{high}" if low != "" or high != "" else "number"
        else:
            hint = "text"
        shown = current if current is not None else "unset"
        return f"  {spec.name} ({hint}) [{shown}]: "
