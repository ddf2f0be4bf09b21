"""Global test configuration and fixtures."""

import logging
from unittest.mock import Mock

import pytest

from mclaunch.server.launcher import ServerLauncher


@pytest.fixture(autouse=True)
def reset_mclaunch_logger():
    """Detach handlers that setup_logging may have bound to captured streams."""
    yield
    logger = logging.getLogger("mclaunch")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep MCLAUNCH_* variables from the developer's shell out of tests."""
    import os

    for name in list(os.environ):
        if name.startswith("MCLAUNCH_"):
            monkeypatch.delenv(name)


@pytest.fixture
def server_dir(tmp_path):
    """A server directory containing a jar."""
    directory = tmp_path / "server"
    directory.mkdir()
    (directory / "server.jar").write_bytes(b"PK\x03\x04")
    return directory


class FakeRelay:
    """Relay stand-in that only waits for the process."""

    def __init__(self, process, **streams):
        self.process = process
        self.streams = streams
        self.started = False

    def start(self):
        self.started = True

    def wait(self):
        return self.process.wait()


@pytest.fixture
def fake_process():
    process = Mock()
    process.pid = 4242
    process.wait.return_value = 0
    process.poll.return_value = None
    return process


@pytest.fixture
def fake_spawn(fake_process):
    return Mock(return_value=fake_process)


@pytest.fixture
def fake_launcher(fake_spawn):
    """ServerLauncher whose processes are mocks."""
    return ServerLauncher(spawn=fake_spawn, relay_factory=FakeRelay)
