"""Exception types raised by the MECCA interpreter."""

from __future__ import annotations


class MeccaError(Exception):
    """Base class for interpreter failures."""


class TemplateNotFoundError(MeccaError, FileNotFoundError):
    """Raised when a named template or art file does not exist under the root."""


class TemplateAccessError(MeccaError):
    """Raised when a resource path escapes the template root or cannot be read."""


class UnsupportedCharsetError(MeccaError, LookupError):
    """Raised when ``[ansiconvert]`` names a charset that cannot be decoded."""


class DuplicateTokenError(MeccaError, ValueError):
    """Raised when a custom token name is registered twice."""
