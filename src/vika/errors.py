"""Error taxonomy for issue documents and their storage.

Document errors share :class:`IssueFormatError` and carry the grammar stage
that failed (``lex``, ``preamble``, ``title``, ``description``, ``comments``
or ``comment``) so callers can point at the broken section.

Public API:
- IssueFormatError, UnexpectedTokenError, PreambleError, LexError
- RepositoryError, IssueNotFoundError
- classify_error(exc) -> ErrorInfo
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .lexer import Token, TokenKind


class IssueFormatError(ValueError):
    def __init__(self, message: str, stage: str) -> None:
        super().__init__(f"{stage}: {message}")
        self.stage = stage


class UnexpectedTokenError(IssueFormatError):
    """A required token is missing or of the wrong kind."""

    def __init__(self, expected: TokenKind, found: Token | None, stage: str) -> None:
        found_name = found.kind.name if found is not None else "end of input"
        super().__init__(
            f"unexpected token: expected {expected.name}, found {found_name}", stage
        )
        self.expected = expected
        self.found = found


class PreambleError(IssueFormatError):
    """The embedded YAML block is not a well-formed issue mapping."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "preamble")


class LexError(IssueFormatError):
    """The line source failed; ``tokens`` holds what was lexed before it did."""

    def __init__(self, message: str, tokens: Sequence[Token] = ()) -> None:
        super().__init__(message, "lex")
        self.tokens: list[Token] = list(tokens)


class RepositoryError(RuntimeError):
    pass


class IssueNotFoundError(RepositoryError, LookupError):
    def __init__(self, issue_id: str) -> None:
        super().__init__(f"issue '{issue_id}' does not exist")
        self.issue_id = issue_id


@dataclass
class ErrorInfo:
    category: str
    message: str
    original_type: str
    stage: str | None = None


def classify_error(exc: BaseException) -> ErrorInfo:
    """Map an exception onto a coarse category for CLI diagnostics.

    - UnexpectedTokenError, other IssueFormatError -> 'syntax'
    - PreambleError -> 'preamble'
    - LexError / OSError -> 'io'
    - IssueNotFoundError -> 'not_found'
    - ConfigError -> 'config'
    - anything else -> 'generic'
    """
    from .config import ConfigError  # noqa: PLC0415

    msg = str(exc)
    name = exc.__class__.__name__
    if isinstance(exc, UnexpectedTokenError):
        return ErrorInfo("syntax", msg, name, exc.stage)
    if isinstance(exc, PreambleError):
        return ErrorInfo("preamble", msg, name, exc.stage)
    if isinstance(exc, LexError):
        return ErrorInfo("io", msg, name, exc.stage)
    if isinstance(exc, IssueFormatError):
        return ErrorInfo("syntax", msg, name, exc.stage)
    if isinstance(exc, IssueNotFoundError):
        return ErrorInfo("not_found", msg, name)
    if isinstance(exc, ConfigError):
        return ErrorInfo("config", msg, name)
    if isinstance(exc, OSError):
        return ErrorInfo("io", msg, name)
    return ErrorInfo("generic", msg, name)


__all__ = [
    "ErrorInfo",
    "IssueFormatError",
    "IssueNotFoundError",
    "LexError",
    "PreambleError",
    "RepositoryError",
    "UnexpectedTokenError",
    "classify_error",
]
