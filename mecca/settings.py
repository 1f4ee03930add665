"""Settings persistence for the MECCA interpreter."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

DEFAULT_PAUSE_SECONDS = 0.5
DEFAULT_LINK_DEPTH = 8


def _clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


@dataclass
class InterpreterSettings:
    """Runtime configuration for an :class:`~mecca.interpreter.Interpreter`."""

    template_root: str = "."
    color: str = "auto"
    terminal_height: int = 0
    more_prompts: bool = False
    answers_optional: bool = False
    pause_seconds: float = DEFAULT_PAUSE_SECONDS
    max_link_depth: int = DEFAULT_LINK_DEPTH

    _COLOR_MODES = {"auto", "always", "never"}

    def clamp(self) -> "InterpreterSettings":
        self.template_root = str(self.template_root or ".")

        mode = str(self.color).lower()
        if mode not in self._COLOR_MODES:
            mode = "auto"
        self.color = mode

        self.terminal_height = max(int(self.terminal_height), 0)
        self.more_prompts = bool(self.more_prompts)
        self.answers_optional = bool(self.answers_optional)
        self.pause_seconds = _clamp(float(self.pause_seconds), 0.0, 10.0)
        self.max_link_depth = int(_clamp(int(self.max_link_depth), 1, 64))
        return self

    def copy(self) -> "InterpreterSettings":
        return InterpreterSettings.from_dict(self.to_dict())

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> "InterpreterSettings":
        if not isinstance(data, dict):
            return cls()

        def _as_float(key: str, default: float) -> float:
            try:
                return float(data.get(key, default))
            except (TypeError, ValueError):
                return default

        def _as_int(key: str, default: int) -> int:
            try:
                return int(data.get(key, default))
            except (TypeError, ValueError):
                return default

        def _as_bool(key: str, default: bool) -> bool:
            value = data.get(key, default)
            if isinstance(value, bool):
                return value
            if isinstance(value, str):
                lowered = value.strip().lower()
                if lowered in {"true", "1", "yes", "on"}:
                    return True
                if lowered in {"false", "0", "no", "off"}:
                    return False
            return bool(value) if value is not None else default

        settings = cls(
            template_root=str(data.get("template_root", ".")),
            color=str(data.get("color", "auto")),
            terminal_height=_as_int("terminal_height", 0),
            more_prompts=_as_bool("more_prompts", False),
            answers_optional=_as_bool("answers_optional", False),
            pause_seconds=_as_float("pause_seconds", DEFAULT_PAUSE_SECONDS),
            max_link_depth=_as_int("max_link_depth", DEFAULT_LINK_DEPTH),
        )
        return settings.clamp()


def load_settings(path: Path | str) -> InterpreterSettings:
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except FileNotFoundError:
        return InterpreterSettings()
    except (OSError, json.JSONDecodeError, TypeError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", path, exc)
        return InterpreterSettings()
    return InterpreterSettings.from_dict(data)


def save_settings(settings: InterpreterSettings, path: Path | str) -> InterpreterSettings:
    path = Path(path)
    sanitized = settings.copy().clamp()
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w", delete=False, dir=path.parent, prefix=path.name, suffix=".tmp", encoding="utf-8"
        ) as tmp_file:
            json.dump(sanitized.to_dict(), tmp_file, indent=2)
            tmp_file.write("\n")
            tmp_path = Path(tmp_file.name)
        os.replace(str(tmp_path), str(path))
    except OSError as exc:
        logger.warning("Failed to save settings to %s: %s", path, exc)
        if tmp_path is not None:
            try:
                tmp_path.unlink()
            except OSError:
                pass
    return sanitized
