"""Input source and buffered output sink used by interactive tokens."""

from __future__ import annotations

import logging
from typing import IO, Any, List, Optional

logger = logging.getLogger(__name__)


def _as_text(data: Any) -> str:
    if isinstance(data, (bytes, bytearray)):
        return bytes(data).decode("utf-8", errors="replace")
    return str(data)


class InputReader:
    """Blocking reads against a text or binary stream.

    Any failure or end of stream reads as ``None`` so the caller carries on
    with an empty response.
    """

    def __init__(self, stream: IO[Any]) -> None:
        self.stream = stream

    def read_char(self) -> Optional[str]:
        try:
            data = self.stream.read(1)
        except (OSError, ValueError) as exc:
            logger.warning("Input read failed: %s", exc)
            return None
        if not data:
            return None
        if isinstance(data, (bytes, bytearray)):
            return bytes(data).decode("latin-1")
        return data

    def read_line(self) -> Optional[str]:
        try:
            data = self.stream.readline()
        except (OSError, ValueError) as exc:
            logger.warning("Input read failed: %s", exc)
            return None
        if not data:
            return None
        return _as_text(data).rstrip("\r\n")


class OutputBuffer:
    """Accumulates rendered text and hands it to the sink at flush points.

    When ``streaming`` is off, flushes keep the text so that the whole render
    can be returned as one string.
    """

    def __init__(self, sink: Optional[IO[str]], *, streaming: bool) -> None:
        self.sink = sink
        self.streaming = streaming and sink is not None
        self._parts: List[str] = []

    def append(self, text: str) -> None:
        if text:
            self._parts.append(text)

    def flush(self) -> None:
        if not self.streaming or not self._parts:
            return
        data = "".join(self._parts)
        self._parts = []
        try:
            self.sink.write(data)
            flush = getattr(self.sink, "flush", None)
            if callable(flush):
                flush()
        except (OSError, ValueError) as exc:
            logger.warning("Output write failed, dropping %d characters: %s", len(data), exc)

    def take(self) -> str:
        data = "".join(self._parts)
        self._parts = []
        return data
