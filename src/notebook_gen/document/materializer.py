"""Turn generated Markdown into a notebook file with an external converter.

The Markdown is written to a transient file that belongs to one call only:
its name is unique per call and it is removed on every exit path, so
concurrent calls in the same directory never see each other's input.
"""

import asyncio
import logging
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from notebook_gen.errors import ConversionFailed, WriteFailed

logger = logging.getLogger(__name__)

TRANSIENT_PREFIX = "_temp-"
TRANSIENT_SUFFIX = ".md"
STDERR_LOG_LIMIT = 2000


@contextmanager
def transient_document(markdown: str, workdir: str | Path | None = None) -> Iterator[Path]:
    """Write ``markdown`` to a uniquely named file and remove it on exit.

    Raises ``WriteFailed`` if the file cannot be created or written; nothing
    is left behind in that case either. Removal problems are only logged.
    """
    directory = Path(workdir) if workdir is not None else Path.cwd()
    try:
        fd, name = tempfile.mkstemp(prefix=TRANSIENT_PREFIX, suffix=TRANSIENT_SUFFIX, dir=directory)
    except OSError as exc:
        logger.error("transient.create_failed dir=%s error=%s", directory, exc)
        raise WriteFailed(f"could not create temporary file in {directory}: {exc}", cause=exc) from exc

    path = Path(name)
    try:
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(markdown)
        except (OSError, UnicodeError) as exc:
            logger.error("transient.write_failed path=%s error=%s", path, exc)
            raise WriteFailed(f"could not write temporary file {path}: {exc}", cause=exc) from exc
        logger.info("transient.written path=%s chars=%d", path, len(markdown))
        yield path
    finally:
        _remove_quietly(path)


def _remove_quietly(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        logger.warning("transient.already_removed path=%s", path)
    except OSError as exc:
        logger.warning("transient.cleanup_failed path=%s error=%s", path, exc)
    else:
        logger.info("transient.removed path=%s", path)


async def run_converter(
    input_path: str | Path,
    output_path: str | Path,
    *,
    converter: str = "pandoc",
    timeout: float | None = None,
) -> None:
    """Run ``converter <input_path> -o <output_path>`` and wait for it.

    The process is killed when ``timeout`` expires or the awaiting task is
    cancelled.
    """
    args = [str(input_path), "-o", str(output_path)]
    logger.info("converter.run converter=%s input=%s output=%s timeout=%s", converter, input_path, output_path, timeout)
    try:
        process = await asyncio.create_subprocess_exec(
            converter,
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        logger.error("converter.launch_failed converter=%s error=%s", converter, exc)
        raise ConversionFailed(f"could not launch {converter}: {exc}", cause=exc) from exc

    try:
        _, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError as exc:
        await _kill(process)
        logger.error("converter.timeout converter=%s timeout=%s", converter, timeout)
        raise ConversionFailed(f"{converter} timed out after {timeout}s", cause=exc) from exc
    except asyncio.CancelledError:
        await _kill(process)
        logger.warning("converter.cancelled converter=%s pid=%s", converter, process.pid)
        raise

    detail = stderr.decode("utf-8", errors="replace").strip()
    if process.returncode != 0:
        logger.error(
            "converter.failed converter=%s returncode=%s stderr=%s",
            converter,
            process.returncode,
            detail[:STDERR_LOG_LIMIT],
        )
        message = f"{converter} exited with status {process.returncode}"
        if detail:
            message = f"{message}: {detail[:STDERR_LOG_LIMIT]}"
        raise ConversionFailed(message, returncode=process.returncode, stderr=detail)
    logger.info("converter.done converter=%s output=%s", converter, output_path)


async def _kill(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass
    await process.wait()


async def materialize(
    markdown: str,
    output_path: str | Path,
    *,
    converter: str = "pandoc",
    workdir: str | Path | None = None,
    timeout: float | None = None,
) -> Path:
    with transient_document(markdown, workdir) as source:
        await run_converter(source, output_path, converter=converter, timeout=timeout)
    return Path(output_path)
