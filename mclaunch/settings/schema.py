"""Known launch settings and their value rules."""

from typing import Dict, Iterator, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from mclaunch.core.exceptions import ValidationError

_BOOL = TypeAdapter(bool)
_INT = TypeAdapter(int)


class SettingSpec(BaseModel):
    """Definition of one known setting."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Key used in the settings file")
    label: str = Field(description="Human readable name shown when editing")
    description: str = Field(default="", description="Help text shown when editing")
    kind: Literal["bool", "int", "str"]
    optional: bool = Field(default=False, description="Whether the value may be unset")
    default: Optional[str] = Field(default=None, description="Canonical default text")
    flag: str = Field(description="Server command-line option, without dashes")
    minimum: Optional[int] = None
    maximum: Optional[int] = None

    def validate_value(self, text: Optional[str]) -> Optional[str]:
        """Check user text against this setting and return its canonical form.

        Returns None when an optional setting is being unset.

        Raises:
            ValidationError: the text does not fit the setting's type or range
        """
        raw = "" if text is None else text.strip()

        if not raw:
            if self.optional:
                return None
            raise ValidationError(
                f"{self.name} requires a value", setting=self.name, value=text
            )

        if self.kind == "bool":
            try:
                return "true" if _BOOL.validate_python(raw) else "false"
            except PydanticValidationError as e:
                raise ValidationError(
                    f"{self.name} expects true or false, got {raw!r}",
                    setting=self.name,
                    value=text,
                    details=str(e),
                ) from e

        if self.kind == "int":
            try:
                number = _INT.validate_python(raw)
            except PydanticValidationError as e:
                raise ValidationError(
                    f"{self.name} expects a whole number, got {raw!r}",
                    setting=self.name,
                    value=text,
                    details=str(e),
                ) from e
            if self.minimum is not None and number < self.minimum:
                raise ValidationError(
                    f"{self.name} must be at least {self.minimum}, got {number}",
                    setting=self.name,
                    value=text,
                )
            if self.maximum is not None and number > self.maximum:
                raise ValidationError(
                    f"{self.name} must be at most {self.maximum}, got {number}",
                    setting=self.name,
                    value=text,
                )
            return str(number)

        return raw

    def to_arguments(self, value: Optional[str]) -> List[str]:
        """Server command-line arguments for a canonical value of this setting."""
        if value is None or value == "":
            return []

        if self.kind == "bool":
            enabled = value == "true"
            # gui is on by default for the server, so only the opt-out is passed
            if self.flag == "nogui":
                return [] if enabled else ["--nogui"]
            return [f"--{self.flag}"] if enabled else []

        return [f"--{self.flag}", value]


class SettingsSchema:
    """Ordered collection of known settings."""

    def __init__(self, specs: List[SettingSpec]):
        self._specs: Dict[str, SettingSpec] = {}
        for spec in specs:
            if spec.name in self._specs:
                raise ValueError(f"Duplicate setting in schema: {spec.name}")
            self._specs[spec.name] = spec

    def __iter__(self) -> Iterator[SettingSpec]:
        return iter(self._specs.values())

    def __len__(self) -> int:
        return len(self._specs)

    def __contains__(self, name: object) -> bool:
        return name in self._specs

    def get(self, name: str) -> Optional[SettingSpec]:
        return self._specs.get(name)

    def names(self) -> List[str]:
        return list(self._specs)

    def default_lines(self) -> List[str]:
        """Lines of a freshly created settings file."""
        lines = [
            "# Minecraft server launch settings\n",
            "# Edited by mclaunch; blank values are unset.\n",
        ]
        for spec in self:
            lines.append(f"{spec.name}={spec.default or ''}\n")
        return lines

    def to_arguments(self, values: Mapping[str, Optional[str]]) -> List[str]:
        """Server arguments for all known settings, in schema order."""
        args: List[str] = []
        for spec in self:
            args.extend(spec.to_arguments(values.get(spec.name)))
        return args


DEFAULT_SCHEMA = SettingsSchema(
    [
        SettingSpec(
            name="bonusChest",
            label="Bonus chest",
            description="Whether or not to add the bonus chest when creating a new world.",
            kind="bool",
            default="true",
            flag="bonusChest",
        ),
        SettingSpec(
            name="demo",
            label="Demo mode",
            description="Shows the players a demo pop-up, players can't place/break/eat once the demo expires.",
            kind="bool",
            default="false",
            flag="demo",
        ),
        SettingSpec(
            name="eraseCache",
            label="Erase the cache",
            description="Erases the lighting caches, etc.",
            kind="bool",
            default="false",
            flag="eraseCache",
        ),
        SettingSpec(
            name="forceUpgrade",
            label="Force an upgrade",
            description="Forces an upgrade on all the chunks.",
            kind="bool",
            default="false",
            flag="forceUpgrade",
        ),
        SettingSpec(
            name="initSettings",
            label="Initialize server settings",
            description="Initializes 'server.properties' and 'eula.txt', then quits.",
            kind="bool",
            default="false",
            flag="initSettings",
        ),
        SettingSpec(
            name="gui",
            label="GUI mode",
            description="When enabled, opens the GUI upon launch of the server.",
            kind="bool",
            default="false",
            flag="nogui",
        ),
        SettingSpec(
            name="port",
            label="Port",
            description="Which port to listen on, overrides the server.properties value.",
            kind="int",
            optional=True,
            flag="port",
            minimum=1,
            maximum=65535,
        ),
        SettingSpec(
            name="safeMode",
            label="Safe mode",
            description="Loads level with vanilla data pack only.",
            kind="bool",
            default="false",
            flag="safeMode",
        ),
        SettingSpec(
            name="singleplayer",
            label="Single-player mode",
            description="Runs the server in offline mode without authentication. "
            "This is insecure, do not use this when online.",
            kind="bool",
            default="false",
            flag="singleplayer",
        ),
        SettingSpec(
            name="universe",
            label="Universe name",
            description="Directory that holds the worlds.",
            kind="str",
            optional=True,
            flag="universe",
        ),
        SettingSpec(
            name="world",
            label="World name",
            description="Name of the world folder to load.",
            kind="str",
            optional=True,
            flag="world",
        ),
    ]
)
