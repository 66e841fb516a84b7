from __future__ import annotations

from vika.config import ConfigError
from vika.errors import (
    IssueNotFoundError,
    LexError,
    PreambleError,
    UnexpectedTokenError,
    classify_error,
)
from vika.lexer import Token, TokenKind


def test_classify_syntax() -> None:
    exc = UnexpectedTokenError(TokenKind.EMPTY_LINE, Token.unknown_content("x"), "title")
    info = classify_error(exc)
    assert info.category == "syntax"
    assert info.stage == "title"
    assert "expected EMPTY_LINE, found UNKNOWN_CONTENT" in info.message


def test_classify_preamble() -> None:
    info = classify_error(PreambleError("invalid YAML"))
    assert info.category == "preamble"
    assert info.message == "preamble: invalid YAML"


def test_classify_io() -> None:
    assert classify_error(LexError("boom")).category == "io"
    assert classify_error(FileNotFoundError("missing")).category == "io"


def test_classify_not_found() -> None:
    info = classify_error(IssueNotFoundError("abc"))
    assert info.category == "not_found"
    assert info.message == "issue 'abc' does not exist"


def test_classify_config_and_generic() -> None:
    assert classify_error(ConfigError("bad")).category == "config"
    info = classify_error(ValueError("Some other problem"))
    assert info.category == "generic"
    assert info.original_type == "ValueError"


def test_not_found_is_lookup_error() -> None:
    assert isinstance(IssueNotFoundError("x"), LookupError)
