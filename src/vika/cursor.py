from __future__ import annotations

from collections.abc import Iterable

from .lexer import Token, TokenKind


class TokenCursor:
    """Single-pass, consume-only view over a lexed token sequence."""

    def __init__(self, tokens: Iterable[Token]) -> None:
        self._tokens: tuple[Token, ...] = tuple(tokens)
        self._index = 0

    @property
    def exhausted(self) -> bool:
        return self._index >= len(self._tokens)

    @property
    def remaining(self) -> int:
        return len(self._tokens) - self._index

    def peek(self) -> Token | None:
        if self.exhausted:
            return None
        return self._tokens[self._index]

    def pop(self) -> Token | None:
        token = self.peek()
        if token is not None:
            self._index += 1
        return token

    def is_kind(self, kind: TokenKind) -> bool:
        token = self.peek()
        return token is not None and token.kind is kind

    def __repr__(self) -> str:
        return f"TokenCursor(position={self._index}, remaining={self.remaining})"


__all__ = ["TokenCursor"]
