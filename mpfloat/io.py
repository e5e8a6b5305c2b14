"""
Stream I/O for MPFloat values: file objects, raw file descriptors and standard input.

Sources and destinations are checked before use: closed or unusable handles are rejected without
touching them. Failures never raise; readers return None and writers return -1.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import io
import logging
import os
import sys
import threading
from contextlib import contextmanager
from typing import Any, Iterator

# Local ----------------------------------------------------------------------------------------------------------------
from .rounding import RoundingMode
from .utils import check_base, check_non_negative
from .value import MPFloat

logger = logging.getLogger(__name__)

# Constants ------------------------------------------------------------------------------------------------------------
DEFAULT_CHUNK_SIZE = 1024

# Guards every access to the process-wide sys.stdin
STDIN_LOCK = threading.RLock()


# Methods --------------------------------------------------------------------------------------------------------------

def is_readable(source: Any) -> bool:
    """
    True if source is an open file object reporting readable(), or a valid file descriptor.

    Never reads from source.
    """
    return _is_usable(source, "readable")


def is_writable(dest: Any) -> bool:
    """True if dest is an open file object reporting writable(), or a valid file descriptor."""
    return _is_usable(dest, "writable")


def read_record(source: Any, chunk_size: int = DEFAULT_CHUNK_SIZE) -> str | None:
    """
    Read the first line of source.

    Reads chunk_size bytes at a time until a newline or end of file. Only the text before the first
    newline is returned; with no newline, everything read is. Bytes are decoded as UTF-8.

    Args:
        source: Binary or text file object, or an int file descriptor.
        chunk_size: Bytes requested per read, at least 1.

    Returns:
        The record without its newline, or None if source is unusable, a read fails, the data
        is not valid UTF-8, or the record is empty or whitespace only.
    """
    if not is_readable(source):
        logger.debug("rejected source, not open for reading: %r", source)
        return None

    chunk_size = max(int(chunk_size), 1)
    chunks = []
    try:
        while True:
            chunk = _read_chunk(source, chunk_size)
            if not chunk:
                break
            newline = chunk.find(b"\n" if isinstance(chunk, bytes) else "\n")
            if newline >= 0:
                chunks.append(chunk[:newline])
                break
            chunks.append(chunk)
    except (OSError, ValueError) as exc:
        logger.debug("read failed on %r: %s", source, exc)
        return None

    if chunks and isinstance(chunks[0], str):
        record = "".join(chunks)
    else:
        try:
            record = b"".join(chunks).decode("utf-8")
        except UnicodeDecodeError as exc:
            logger.debug("record is not valid UTF-8: %s", exc)
            return None

    if not record.strip():
        return None
    return record


def read_float(source: Any, base: int = 10, precision: int | None = None,
               rounding: RoundingMode | str | None = None) -> MPFloat | None:
    """
    Read one value from the first line of source.

    The whole line, surrounding whitespace aside, must be a numeral in base (0 autodetects).

    Returns:
        The value, or None on any read or conversion failure.

    Example:
        >>> with open("values.txt", "rb") as f:
        ...     x = read_float(f, precision=200)
    """
    record = read_record(source)
    if record is None:
        return None
    return MPFloat.from_string(record, base, precision, rounding)


def read_float_stdin(base: int = 10, precision: int | None = None,
                     rounding: RoundingMode | str | None = None) -> MPFloat | None:
    """Like read_float() on standard input, holding the stdin lock while reading."""
    with STDIN_LOCK:
        stream = sys.stdin
        if stream is None:
            return None
        return read_float(getattr(stream, "buffer", stream), base, precision, rounding)


@contextmanager
def redirect_stdin(source: Any) -> Iterator[Any]:
    """
    Temporarily replace sys.stdin with source.

    Holds the process-wide stdin lock until exit, so redirections from several threads run one
    after the other. The lock is re-entrant: read_float_stdin() may be called inside the block.
    """
    with STDIN_LOCK:
        saved = sys.stdin
        sys.stdin = source
        try:
            yield source
        finally:
            sys.stdin = saved


def write_float(dest: Any, value: MPFloat, base: int = 10, digits: int = 0,
                rounding: RoundingMode | str | None = None) -> int:
    """
    Write value as a numeral followed by a newline.

    Args:
        dest: Binary or text file object, or an int file descriptor.
        value: Value to write, rendered by MPFloat.to_string().
        base: Numeral base, 2..62.
        digits: Significant digits, 0 for as many as needed to read the value back.
        rounding: Rounding mode for the rendering.

    Returns:
        Number of bytes written, or -1 if dest is unusable or the write fails.

    Raises:
        TypeError, ValueError: If base or digits is invalid.
    """
    check_base(base)
    check_non_negative(digits, "digits")
    text = value.to_string(base, digits, rounding) + "\n"
    return write_text(dest, text)


def write_text(dest: Any, text: str) -> int:
    """Write text encoded as UTF-8; returns bytes written, -1 on failure."""
    if not is_writable(dest):
        logger.debug("rejected destination, not open for writing: %r", dest)
        return -1

    data = text.encode("utf-8")
    try:
        if isinstance(dest, int):
            view = memoryview(data)
            while view:
                written = os.write(dest, view)
                view = view[written:]
        elif isinstance(dest, io.TextIOBase):
            dest.write(text)
        else:
            dest.write(data)
        flush = getattr(dest, "flush", None)
        if flush is not None:
            flush()
    except (OSError, ValueError) as exc:
        logger.debug("write failed on %r: %s", dest, exc)
        return -1
    return len(data)


# Private Methods ------------------------------------------------------------------------------------------------------

def _is_usable(handle: Any, direction: str) -> bool:
    if isinstance(handle, bool):
        return False
    if isinstance(handle, int):
        try:
            os.fstat(handle)
        except (OSError, OverflowError):
            return False
        return True
    if handle is None or getattr(handle, "closed", False):
        return False
    check = getattr(handle, direction, None)
    if check is None:
        return False
    try:
        return bool(check())
    except (OSError, ValueError):
        return False


def _read_chunk(source: Any, size: int) -> bytes | str | None:
    if isinstance(source, int):
        return os.read(source, size)
    read1 = getattr(source, "read1", None)
    if read1 is not None:
        return read1(size)
    return source.read(size)
