"""Loading of template and art files relative to a template root."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from .errors import TemplateAccessError, TemplateNotFoundError, UnsupportedCharsetError

logger = logging.getLogger(__name__)

SUPPORTED_CHARSETS = {
    "cp437": "cp437",
    "ibm437": "cp437",
}


class ResourceLoader(Protocol):
    def read(self, name: str) -> bytes:
        ...


class FileLoader:
    """Read files under ``root``; paths outside the root are refused."""

    def __init__(self, root: Path | str = ".") -> None:
        self.root = Path(root)

    def resolve(self, name: str) -> Path:
        requested = Path(name)
        if requested.is_absolute() or ".." in requested.parts:
            raise TemplateAccessError(f"{name} is outside the template root")
        try:
            root = self.root.resolve()
        except (OSError, RuntimeError) as exc:
            raise TemplateAccessError(f"cannot resolve template root {self.root}: {exc}") from exc
        target = (root / requested).resolve()
        if target != root and root not in target.parents:
            raise TemplateAccessError(f"{name} is outside the template root")
        return target

    def read(self, name: str) -> bytes:
        target = self.resolve(name)
        try:
            return target.read_bytes()
        except FileNotFoundError as exc:
            raise TemplateNotFoundError(f"{name} not found") from exc
        except IsADirectoryError as exc:
            raise TemplateAccessError(f"{name} is a directory") from exc
        except OSError as exc:
            raise TemplateAccessError(f"cannot read {name}: {exc.strerror or exc}") from exc


class MemoryLoader:
    """Serve templates from a mapping of names to text or bytes."""

    def __init__(self, files: dict) -> None:
        self.files = dict(files)

    def read(self, name: str) -> bytes:
        try:
            data = self.files[name]
        except KeyError:
            raise TemplateNotFoundError(f"{name} not found") from None
        if isinstance(data, str):
            return data.encode("utf-8")
        return bytes(data)


def decode_text(data: bytes) -> str:
    """Decode UTF-8, replacing undecodable bytes with U+FFFD.

    Art saved in a DOS code page should go through ``[ansiconvert]`` and
    :func:`decode_charset` instead, which keeps every byte.
    """

    return data.decode("utf-8", errors="replace")


def decode_charset(data: bytes, charset: str) -> str:
    codec = SUPPORTED_CHARSETS.get(charset.lower())
    if codec is None:
        raise UnsupportedCharsetError(f"unsupported charset {charset}")
    return data.decode(codec)
