"""Resolve and launch the Minecraft server runtime."""

import os
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Callable, List, Mapping, Optional, Union

from mclaunch.core.config import JavaConfig
from mclaunch.core.exceptions import ConfigurationError, NotFoundError, SpawnError
from mclaunch.core.exit_codes import ExitCodeManager
from mclaunch.core.logging_config import get_logger, log_process_event
from mclaunch.server.relay import ConsoleRelay
from mclaunch.settings.schema import DEFAULT_SCHEMA, SettingsSchema


@dataclass(frozen=True)
class LaunchSpec:
    """Everything needed to start the server once."""

    directory: Path
    jar: str
    jar_path: Path
    argv: List[str] = field(default_factory=list)


def default_server_directory(
    platform: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
    home: Optional[Path] = None,
) -> Path:
    """Server directory used when none is given.

    ``%APPDATA%\\.minecraft\\server`` on Windows, ``~/.minecraft/server``
    elsewhere.
    """
    platform = platform or sys.platform
    environ = os.environ if environ is None else environ

    if platform.startswith("win"):
        appdata = environ.get("APPDATA")
        if not appdata:
            raise ConfigurationError(
                "No server directory was given and APPDATA is not set",
                config_key="APPDATA",
                recovery_suggestions=["Pass the server directory explicitly"],
            )
        return Path(appdata) / ".minecraft" / "server"

    return (home or Path.home()) / ".minecraft" / "server"


class ServerLauncher:
    """Builds the java command line and runs the server in the foreground."""

    def __init__(
        self,
        java: Optional[JavaConfig] = None,
        schema: SettingsSchema = DEFAULT_SCHEMA,
        spawn: Callable[..., subprocess.Popen] = subprocess.Popen,
        relay_factory: Callable[..., ConsoleRelay] = ConsoleRelay,
        platform: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
        stdin: Optional[BinaryIO] = None,
        stdout: Optional[BinaryIO] = None,
        stderr: Optional[BinaryIO] = None,
    ):
        """Initialize the launcher.

        Args:
            java: Java executable and memory settings
            schema: Known settings, used to turn values into server flags
            spawn: Process factory with the subprocess.Popen signature
            relay_factory: Builds the console relay for a started process
            platform: Platform name used for the default directory
            environ: Environment used for the default directory
            stdin: Stream forwarded to the server console
            stdout: Sink for server output
            stderr: Sink for server error output
        """
        self.java = java or JavaConfig()
        self.schema = schema
        self.spawn = spawn
        self.relay_factory = relay_factory
        self.platform = platform
        self.environ = environ
        self.streams = {"stdin": stdin, "stdout": stdout, "stderr": stderr}
        self.exit_codes = ExitCodeManager()
        self.logger = get_logger("server.launcher")
        self._process: Optional[subprocess.Popen] = None

    def resolve_directory(self, directory: Optional[Union[str, Path]] = None) -> Path:
        """Absolute server directory, substituting the platform default.

        Raises:
            NotFoundError: the directory does not exist
        """
        if directory is None:
            path = default_server_directory(self.platform, self.environ)
            self.logger.debug(f"Using default server directory {path}")
        else:
            path = Path(directory).expanduser()

        path = path.resolve()
        if not path.is_dir():
            raise NotFoundError(f"Server directory not found: {path}", path=str(path))
        return path

    def resolve(
        self,
        jar_filename: str,
        directory: Optional[Union[str, Path]] = None,
        settings: Optional[Mapping[str, Optional[str]]] = None,
    ) -> LaunchSpec:
        """Build the LaunchSpec for a jar in a server directory.

        Args:
            jar_filename: Jar name, relative to the server directory
            directory: Server directory, platform default when omitted
            settings: Canonical setting values that become server flags

        Raises:
            NotFoundError: the directory or the jar does not exist
        """
        server_dir = self.resolve_directory(directory)
        jar_path = server_dir / jar_filename
        if not jar_path.is_file():
            raise NotFoundError(
                f"Server jar not found: {jar_path}",
                path=str(jar_path),
            )

        argv = self.build_command(jar_filename, settings or {})
        return LaunchSpec(
            directory=server_dir, jar=jar_filename, jar_path=jar_path, argv=argv
        )

    def build_command(
        self, jar_filename: str, settings: Mapping[str, Optional[str]]
    ) -> List[str]:
        """java, memory flags, extra JVM flags, -jar, jar, server flags."""
        command = [self.java.executable]
        if self.java.min_memory:
            command.append(f"-Xms{self.java.min_memory}")
        if self.java.max_memory:
            command.append(f"-Xmx{self.java.max_memory}")
        command.extend(self.java.extra_args)
        command.extend(["-jar", jar_filename])
        command.extend(self.schema.to_arguments(settings))
        return command

    def launch(self, spec: LaunchSpec) -> int:
        """Run the server until it exits, relaying its console.

        Returns:
            The server's exit code (128 + signal number when killed)

        Raises:
            SpawnError: the runtime could not be started
        """
        try:
            process = self.spawn(
                spec.argv,
                cwd=str(spec.directory),
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                bufsize=0,
            )
        except FileNotFoundError as e:
            raise SpawnError(
                f"Java runtime not found: {spec.argv[0]}",
                executable=spec.argv[0],
                details=str(e),
            ) from e
        except OSError as e:
            raise SpawnError(
                f"Cannot start server process: {e}",
                executable=spec.argv[0],
                details=str(e),
            ) from e

        self._process = process
        log_process_event(self.logger, "start", argv=spec.argv, pid=process.pid)

        relay = self.relay_factory(process, **self.streams)
        try:
            relay.start()
            returncode = relay.wait()
        except KeyboardInterrupt:
            self.shutdown()
            raise
        finally:
            self._process = None

        log_process_event(self.logger, "exit", pid=process.pid, returncode=returncode)
        return self.exit_codes.from_process_status(returncode)

    def shutdown(self) -> None:
        """Stop the running server, if any, so it does not outlive us."""
        process = self._process
        if process is None or process.poll() is not None:
            return

        log_process_event(self.logger, "terminate", pid=process.pid)
        process.terminate()
        try:
            process.wait(timeout=self.java.terminate_timeout)
        except subprocess.TimeoutExpired:
            log_process_event(self.logger, "kill", pid=process.pid)
            process.kill()
            process.wait()
