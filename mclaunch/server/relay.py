"""Console relay between the terminal and the server process.

Three one-way copy threads move bytes as soon as they arrive:

    child stdout -> our stdout
    child stderr -> our stderr
    our stdin    -> child stdin

The child's exit is the single completion signal: once it has been seen the
output pumps are drained and joined and the child's stdin is closed.
"""

import subprocess
import sys
import threading
from typing import BinaryIO, List, Optional

from mclaunch.core.logging_config import get_logger

CHUNK_SIZE = 4096

logger = get_logger("server.relay")


def _read_chunk(stream: BinaryIO, size: int) -> bytes:
    # read1 returns whatever is buffered instead of waiting for a full chunk
    read1 = getattr(stream, "read1", None)
    if read1 is not None:
        return read1(size)
    return stream.read(size)


def pump(
    source: BinaryIO,
    sink: BinaryIO,
    name: str,
    stop: Optional[threading.Event] = None,
    close_sink: bool = False,
) -> int:
    """Copy ``source`` into ``sink`` until EOF, flushing every chunk.

    Returns the number of bytes copied. A closed or broken peer ends the copy.
    """
    copied = 0
    try:
        while stop is None or not stop.is_set():
            chunk = _read_chunk(source, CHUNK_SIZE)
            if not chunk:
                break
            if stop is not None and stop.is_set():
                break
            sink.write(chunk)
            sink.flush()
            copied += len(chunk)
    except (BrokenPipeError, ValueError, OSError) as e:
        logger.debug(f"{name} pump stopped: {e}")
    finally:
        if close_sink:
            try:
                sink.close()
            except OSError as e:
                logger.debug(f"{name} pump could not close sink: {e}")
    logger.debug(f"{name} pump finished after {copied} bytes")
    return copied


def _binary(stream, fallback):
    if stream is not None:
        return stream
    return getattr(fallback, "buffer", fallback)


class ConsoleRelay:
    """Runs the three copy threads for one child process."""

    def __init__(
        self,
        process: subprocess.Popen,
        stdin: Optional[BinaryIO] = None,
        stdout: Optional[BinaryIO] = None,
        stderr: Optional[BinaryIO] = None,
        drain_timeout: float = 5.0,
    ):
        """Initialize the relay.

        Args:
            process: Child started with stdin, stdout and stderr pipes
            stdin: Stream forwarded to the child, defaults to our stdin
            stdout: Sink for the child's stdout, defaults to our stdout
            stderr: Sink for the child's stderr, defaults to our stderr
            drain_timeout: Seconds to wait for output after the child exits
        """
        self.process = process
        self.stdin = _binary(stdin, sys.stdin)
        self.stdout = _binary(stdout, sys.stdout)
        self.stderr = _binary(stderr, sys.stderr)
        self.drain_timeout = drain_timeout
        self.finished = threading.Event()
        self._output_threads: List[threading.Thread] = []
        self._input_thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Start copying in the background."""
        self._output_threads = [
            threading.Thread(
                target=pump,
                args=(self.process.stdout, self.stdout, "stdout"),
                name="relay-stdout",
                daemon=True,
            ),
            threading.Thread(
                target=pump,
                args=(self.process.stderr, self.stderr, "stderr"),
                name="relay-stderr",
                daemon=True,
            ),
        ]
        for thread in self._output_threads:
            thread.start()

        # A blocked terminal read cannot be interrupted, so this one is never joined
        self._input_thread = threading.Thread(
            target=pump,
            args=(self.stdin, self.process.stdin, "stdin"),
            kwargs={"stop": self.finished, "close_sink": True},
            name="relay-stdin",
            daemon=True,
        )
        self._input_thread.start()

    def wait(self) -> int:
        """Block until the child exits and its output has been drained."""
        returncode = self.process.wait()
        self.finished.set()

        for thread in self._output_threads:
            thread.join(self.drain_timeout)
            if thread.is_alive():
                logger.warning(f"{thread.name} still open after child exit")

        self._close_child_stdin()
        return returncode

    def _close_child_stdin(self) -> None:
        if self.process.stdin is None:
            return
        try:
            self.process.stdin.close()
        except OSError as e:
            logger.debug(f"Closing child stdin failed: {e}")
