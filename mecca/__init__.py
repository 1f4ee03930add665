"""MECCA markup interpreter for text-mode terminal screens."""

from .errors import (
    DuplicateTokenError,
    MeccaError,
    TemplateAccessError,
    TemplateNotFoundError,
    UnsupportedCharsetError,
)
from .interpreter import Interpreter
from .resources import FileLoader, MemoryLoader
from .settings import InterpreterSettings, load_settings, save_settings
from .terminal import TerminalCapabilities

__all__ = [
    "DuplicateTokenError",
    "FileLoader",
    "Interpreter",
    "InterpreterSettings",
    "MeccaError",
    "MemoryLoader",
    "TemplateAccessError",
    "TemplateNotFoundError",
    "TerminalCapabilities",
    "UnsupportedCharsetError",
    "load_settings",
    "save_settings",
]
