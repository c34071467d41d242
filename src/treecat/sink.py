"""Record sinks: where the walker hands accepted files.

In parallel mode several worker threads emit concurrently. Sinks take
whole records so each file's output is written in one piece; the order
of files across threads is unspecified.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import BinaryIO, Protocol

from treecat.scanner import FileRecord


class RecordSink(Protocol):
    """Receives one record per accepted file. Must be thread-safe."""

    def emit(self, record: FileRecord) -> None: ...


class StreamSink:
    """Render records to bytes and write them to a binary stream.

    Rendering happens outside the lock; only the write is serialized.
    """

    def __init__(self, stream: BinaryIO, render: Callable[[FileRecord], bytes]) -> None:
        self._stream = stream
        self._render = render
        self._lock = threading.Lock()

    def emit(self, record: FileRecord) -> None:
        data = self._render(record)
        with self._lock:
            self._stream.write(data)

    def flush(self) -> None:
        with self._lock:
            self._stream.flush()


class CollectingSink:
    """Keep emitted records in memory, in emission order."""

    def __init__(self) -> None:
        self._records: list[FileRecord] = []
        self._lock = threading.Lock()

    def emit(self, record: FileRecord) -> None:
        with self._lock:
            self._records.append(record)

    @property
    def records(self) -> list[FileRecord]:
        with self._lock:
            return list(self._records)
