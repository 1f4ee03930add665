"""Menu option capture and the questionnaire log."""

from __future__ import annotations

from typing import Dict, List, Optional


def is_valid_option_id(option_id: str) -> bool:
    return len(option_id) == 1 and option_id.isascii() and option_id.isalnum()


class MenuState:
    """Options captured between ``[option X]`` and ``[reset]``."""

    def __init__(self) -> None:
        self.options: Dict[str, str] = {}
        self.selected: str = ""
        self.capture_id: Optional[str] = None
        self._capture: List[str] = []

    def reset(self) -> None:
        self.options = {}
        self.selected = ""
        self.capture_id = None
        self._capture = []

    def clear_options(self) -> None:
        self.options = {}

    def begin_option(self, option_id: str) -> None:
        self.finish_option()
        self.capture_id = option_id.lower()

    def capture(self, text: str) -> None:
        if self.capture_id is not None and text:
            self._capture.append(text)

    def finish_option(self) -> None:
        if self.capture_id is not None:
            self.options[self.capture_id] = "".join(self._capture).strip()
        self.capture_id = None
        self._capture = []

    def select(self, char: Optional[str]) -> str:
        """Record the option matching ``char`` (case-insensitive), or clear it."""

        key = (char or "").lower()
        self.selected = key if key and key in self.options else ""
        return self.selected


class QuestionnaireLog:
    """Append-only answers collected by ``[readln]``, ``[store]`` and ``[write]``."""

    def __init__(self) -> None:
        self._entries: List[str] = []

    def __len__(self) -> int:
        return len(self._entries)

    def record(self, value: str, description: Optional[str] = None) -> None:
        if description:
            self._entries.append(f"{description}: {value}")
        else:
            self._entries.append(value)

    def entries(self) -> List[str]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries = []
