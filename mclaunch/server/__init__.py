"""Server process resolution, launch and console relay."""

from .launcher import LaunchSpec, ServerLauncher, default_server_directory
from .relay import ConsoleRelay, pump

__all__ = [
    "LaunchSpec",
    "ServerLauncher",
    "default_server_directory",
    "ConsoleRelay",
    "pump",
]
