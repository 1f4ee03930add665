"""Per-interpreter registry of caller supplied tokens."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from .errors import DuplicateTokenError

TokenFunc = Callable[[List[str]], str]


@dataclass(frozen=True)
class RegisteredToken:
    func: TokenFunc
    arg_count: int = 0

    def invoke(self, args: Sequence[str]) -> str:
        return str(self.func(list(args)))


class TokenRegistry:
    def __init__(self) -> None:
        self._tokens: Dict[str, RegisteredToken] = {}

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._tokens

    def register(self, name: str, func: TokenFunc, arg_count: int = 0) -> RegisteredToken:
        key = name.lower()
        if key in self._tokens:
            raise DuplicateTokenError(f"token {name} already registered")
        if arg_count < 0:
            raise ValueError("arg_count must not be negative")
        token = RegisteredToken(func, arg_count)
        self._tokens[key] = token
        return token

    def lookup(self, name: str) -> Optional[RegisteredToken]:
        return self._tokens.get(name.lower())
