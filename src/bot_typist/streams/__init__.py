"""Streaming primitives: readers, writers, pipes, and the scanner."""

from bot_typist.streams.adapters import StreamReaderAdapter, copy_stream
from bot_typist.streams.base import (
    DONE,
    Cancelled,
    Reader,
    ReadHandler,
    ReadResult,
    StreamError,
    StringWriter,
    WriteCloser,
    Writer,
    read_all,
)
from bot_typist.streams.pipe import PipeReader, PipeWriter, make_pipe
from bot_typist.streams.scanner import Scanner

__all__ = [
    "DONE",
    "Cancelled",
    "PipeReader",
    "PipeWriter",
    "ReadHandler",
    "ReadResult",
    "Reader",
    "Scanner",
    "StreamError",
    "StreamReaderAdapter",
    "StringWriter",
    "WriteCloser",
    "Writer",
    "copy_stream",
    "make_pipe",
    "read_all",
]
