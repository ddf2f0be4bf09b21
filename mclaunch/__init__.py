"""Edit Minecraft server launch settings and run the server."""

__version__ = "0.1.0"
