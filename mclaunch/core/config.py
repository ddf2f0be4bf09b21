"""Configuration management for mclaunch."""

import codecs
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

from mclaunch.core.exceptions import ConfigurationError


@dataclass
class LoggingConfig:
    """Logging configuration settings."""

    level: str = "INFO"
    console: bool = True
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5
    format_string: str = "%(asctime)s | %(levelname)-8s | %(name)-25s | %(message)s"


@dataclass
class JavaConfig:
    """How the server runtime is invoked."""

    executable: str = "java"
    min_memory: str = "1G"
    max_memory: str = "2G"
    extra_args: List[str] = field(default_factory=list)
    terminate_timeout: float = 10.0  # seconds to wait before killing


@dataclass
class SettingsConfig:
    """Where launch settings are stored inside the server directory."""

    filename: str = "settings.txt"
    encoding: str = "utf-8"


@dataclass
class LauncherConfig:
    """Complete configuration for the launcher."""

    java: JavaConfig = field(default_factory=JavaConfig)
    settings: SettingsConfig = field(default_factory=SettingsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    server_directory: Optional[str] = None


class ConfigManager:
    """Loads configuration from an optional TOML file and the environment."""

    ENV_MAPPINGS = {
        "MCLAUNCH_JAVA": ("java", "executable"),
        "MCLAUNCH_MIN_MEMORY": ("java", "min_memory"),
        "MCLAUNCH_MAX_MEMORY": ("java", "max_memory"),
        "MCLAUNCH_JAVA_ARGS": ("java", "extra_args"),
        "MCLAUNCH_TERMINATE_TIMEOUT": ("java", "terminate_timeout"),
        "MCLAUNCH_SETTINGS_FILE": ("settings", "filename"),
        "MCLAUNCH_SETTINGS_ENCODING": ("settings", "encoding"),
        "MCLAUNCH_LOG_LEVEL": ("logging", "level"),
        "MCLAUNCH_LOG_FILE": ("logging", "file_path"),
        "MCLAUNCH_LOG_CONSOLE": ("logging", "console"),
        "MCLAUNCH_SERVER_DIR": (None, "server_directory"),
    }

    def __init__(
        self,
        config_path: Optional[Union[str, Path]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """Initialize configuration manager.

        Args:
            config_path: Path to TOML configuration file. When None only
                defaults and environment overrides apply.
            environ: Environment to read overrides from, defaults to os.environ
        """
        self.config_path = Path(config_path) if config_path else None
        self.environ = os.environ if environ is None else environ
        self._config: Optional[LauncherConfig] = None

    def load_config(self) -> LauncherConfig:
        """Load configuration from file and environment variables.

        Returns:
            Complete configuration object
        """
        if self._config is not None:
            return self._config

        config_data: Dict = {}
        if self.config_path is not None:
            if not self.config_path.exists():
                raise ConfigurationError(
                    f"Configuration file not found: {self.config_path}",
                    context={"config_path": str(self.config_path)},
                    recovery_suggestions=[
                        f"Create one with: mclaunch --create-config {self.config_path}"
                    ],
                )
            config_data = self._load_toml_config()

        config_data = self._apply_env_overrides(config_data)
        self._config = self._create_config_from_dict(config_data)

        return self._config

    def _load_toml_config(self) -> Dict:
        """Load configuration from TOML file.

        Returns:
            Configuration dictionary
        """
        try:
            with open(self.config_path, "rb") as f:
                return tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigurationError(
                f"Failed to load config file {self.config_path}: {e}",
                context={"config_path": str(self.config_path)},
            ) from e

    def _apply_env_overrides(self, config_data: Dict) -> Dict:
        """Apply environment variable overrides to configuration.

        Args:
            config_data: Base configuration dictionary

        Returns:
            Configuration with environment overrides applied
        """
        for env_var, (section, key) in self.ENV_MAPPINGS.items():
            value = self.environ.get(env_var)
            if value is None:
                continue

            converted_value = self._convert_env_value(env_var, value, key)
            if section is None:
                config_data[key] = converted_value
            else:
                config_data.setdefault(section, {})[key] = converted_value

        return config_data

    def _convert_env_value(
        self, env_var: str, value: str, key: str
    ) -> Union[str, float, bool, List[str]]:
        """Convert environment variable string to appropriate type."""
        if key == "console":
            return value.lower() in ("true", "1", "yes", "on")

        if key == "extra_args":
            return value.split()

        if key == "terminate_timeout":
            try:
                return float(value)
            except ValueError as e:
                raise ConfigurationError(
                    f"{env_var} must be a number of seconds, got {value!r}",
                    config_key=key,
                ) from e

        return value

    def _create_config_from_dict(self, config_data: Dict) -> LauncherConfig:
        """Create configuration object from dictionary, ignoring unknown keys."""
        sections = {
            "java": JavaConfig,
            "settings": SettingsConfig,
            "logging": LoggingConfig,
        }

        built = {}
        for name, cls in sections.items():
            data = config_data.get(name, {})
            if not isinstance(data, dict):
                raise ConfigurationError(
                    f"[{name}] must be a table in the config file", config_key=name
                )
            try:
                built[name] = cls(
                    **{k: v for k, v in data.items() if k in cls.__dataclass_fields__}
                )
            except TypeError as e:
                raise ConfigurationError(
                    f"Invalid [{name}] section: {e}", config_key=name
                ) from e

        if isinstance(built["java"].extra_args, str):
            built["java"].extra_args = built["java"].extra_args.split()

        try:
            codecs.lookup(built["settings"].encoding)
        except LookupError as e:
            raise ConfigurationError(
                f"Unknown settings file encoding: {built['settings'].encoding}",
                config_key="encoding",
            ) from e

        return LauncherConfig(
            server_directory=config_data.get("server_directory"),
            **built,
        )

    def get_config(self) -> LauncherConfig:
        """Get current configuration, loading if necessary."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def reload_config(self) -> LauncherConfig:
        """Reload configuration from file and environment."""
        self._config = None
        return self.load_config()

    def save_config_template(self, output_path: Union[str, Path]) -> None:
        """Save a template configuration file.

        Args:
            output_path: Path to save template file
        """
        template_content = """# mclaunch configuration

# Default server directory used when none is given on the command line.
# server_directory = "/srv/minecraft"

[java]
executable = "java"
min_memory = "1G"   # passed as -Xms
max_memory = "2G"   # passed as -Xmx
extra_args = []     # e.g. ["-XX:+UseG1GC"]
terminate_timeout = 10.0

[settings]
filename = "settings.txt"
encoding = "utf-8"

[logging]
level = "INFO"
console = true
# file_path = "mclaunch.log"
max_file_size = 10485760  # 10MB
backup_count = 5
"""

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w") as f:
            f.write(template_content)


def get_config(
    config_path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> LauncherConfig:
    """Load the launcher configuration.

    Args:
        config_path: Optional path to a TOML configuration file
        environ: Environment to read overrides from

    Returns:
        Configuration object
    """
    return ConfigManager(config_path, environ=environ).get_config()
