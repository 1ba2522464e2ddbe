"""Run the Claude Code CLI and stream its output back to the caller."""

import asyncio
import codecs
import contextlib
import os
import tempfile
from pathlib import Path
from typing import Callable, Iterator, Protocol

import structlog

from ..utils.constants import PROMPT_FILE_PREFIX
from .exceptions import GeneratorProcessError

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

READ_CHUNK_SIZE = 4096

ChunkCallback = Callable[[str], None]


class GeneratorRunner(Protocol):
    """Protocol for runners of the external text generator."""

    async def run(self, prompt_path: Path, on_chunk: ChunkCallback) -> None:
        """Run the generator on the prompt stored at ``prompt_path``.

        Args:
            prompt_path: File holding the rendered prompt.
            on_chunk: Called with each piece of stdout, in the order it arrives.

        Raises:
            Exception: Any failure to start or complete the process.
        """
        ...


class StreamAccumulator:
    """Append-only buffer for streamed process output."""

    def __init__(self) -> None:
        """Initialize an empty buffer."""
        self._chunks: list[str] = []

    def append(self, chunk: str) -> None:
        """Append a chunk of output."""
        self._chunks.append(chunk)
        logger.debug("Claude output", chunk=chunk)

    @property
    def text(self) -> str:
        """Everything appended so far."""
        return "".join(self._chunks)


@contextlib.contextmanager
def prompt_file(prompt: str) -> Iterator[Path]:
    """Write ``prompt`` to a uniquely named temporary file and delete it on exit.

    A failure to delete the file is logged and never replaces the outcome of
    the enclosed block.
    """
    fd, name = tempfile.mkstemp(prefix=PROMPT_FILE_PREFIX, suffix=".txt")
    path = Path(name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(prompt)
        yield path
    finally:
        try:
            path.unlink()
        except OSError as exc:
            logger.error("Failed to delete temporary prompt file", path=str(path), error=str(exc))


class ClaudeCodeRunner:
    """Runs the Claude Code CLI in headless mode with stream-json output.

    stdin is closed, stdout is streamed to the chunk callback and stderr is
    inherited so diagnostics reach the operator unchanged.
    """

    def __init__(self, executable_path: str) -> None:
        """Initialize with the path of the CLI executable."""
        self.executable_path = executable_path

    def build_command(self, prompt_path: Path) -> list[str]:
        """Build the argument vector for a headless run."""
        return [self.executable_path, "-p", "--verbose", "--output-format", "stream-json", f"@{prompt_path}"]

    async def run(self, prompt_path: Path, on_chunk: ChunkCallback) -> None:
        """Run the CLI and feed its stdout to ``on_chunk``.

        Raises:
            OSError: If the process cannot be started.
            GeneratorProcessError: If the process exits with a non-zero status.
        """
        command = self.build_command(prompt_path)
        logger.info("Running Claude Code CLI in headless mode with streaming output", executable=self.executable_path)
        process = await asyncio.create_subprocess_exec(
            *command,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=None,
        )
        if process.stdout is None:
            raise RuntimeError("Claude Code CLI stdout is not piped")

        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        try:
            while chunk := await process.stdout.read(READ_CHUNK_SIZE):
                text = decoder.decode(chunk)
                if text:
                    on_chunk(text)
            tail = decoder.decode(b"", final=True)
            if tail:
                on_chunk(tail)
            returncode = await process.wait()
        except BaseException:
            # Cancelled or failed reads must not leave the CLI behind.
            if process.returncode is None:
                logger.warning("Stopped reading Claude Code CLI output, killing the process", pid=process.pid)
                process.kill()
                await process.wait()
            raise

        if returncode != 0:
            raise GeneratorProcessError(returncode)
        logger.debug("Claude Code CLI finished", returncode=returncode)
