"""Parser for markdown issue documents.

Grammar, consumed strictly in order from one :class:`TokenCursor`::

    preamble     PREAMBLE_DELIMITER UNKNOWN_CONTENT+ PREAMBLE_DELIMITER
    title        HEADER1_TITLE EMPTY_LINE
    description  (anything but COMMENT_HEADER)*
    comments     COMMENT_HEADER EMPTY_LINE comment*
    comment      (anything but COMMENT_AUTHOR)* COMMENT_AUTHOR

Each stage returns plain values; the :class:`Issue` is assembled only once
every stage has succeeded, so a failing document never yields a half-filled
record. Any failure aborts the whole document.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .cursor import TokenCursor
from .errors import LexError, UnexpectedTokenError
from .lexer import Token, TokenKind, iter_lines, lex
from .logging import get_logger
from .models import Comment, Issue
from .yaml_codec import load_preamble

STAGE_PREAMBLE = "preamble"
STAGE_TITLE = "title"
STAGE_DESCRIPTION = "description"
STAGE_COMMENTS = "comments"
STAGE_COMMENT = "comment"


def accept(cursor: TokenCursor, kind: TokenKind, stage: str) -> Token:
    """Consume the front token if it is of ``kind``, otherwise fail."""
    token = cursor.peek()
    if token is None or token.kind is not kind:
        raise UnexpectedTokenError(kind, token, stage)
    cursor.pop()
    return token


def _trim_trailing_newline(text: str) -> str:
    return text[:-1] if text.endswith("\n") else text


def parse_preamble(cursor: TokenCursor) -> dict[str, Any]:
    accept(cursor, TokenKind.PREAMBLE_DELIMITER, STAGE_PREAMBLE)
    lines = [accept(cursor, TokenKind.UNKNOWN_CONTENT, STAGE_PREAMBLE).text]
    while cursor.is_kind(TokenKind.UNKNOWN_CONTENT):
        lines.append(accept(cursor, TokenKind.UNKNOWN_CONTENT, STAGE_PREAMBLE).text)
    accept(cursor, TokenKind.PREAMBLE_DELIMITER, STAGE_PREAMBLE)
    return load_preamble("\n".join(lines))


def parse_title(cursor: TokenCursor) -> str:
    title = accept(cursor, TokenKind.HEADER1_TITLE, STAGE_TITLE).text
    accept(cursor, TokenKind.EMPTY_LINE, STAGE_TITLE)
    return title


def parse_description(cursor: TokenCursor) -> str:
    parts: list[str] = []
    while not cursor.is_kind(TokenKind.COMMENT_HEADER):
        token = cursor.pop()
        if token is None:
            break
        if token.kind is TokenKind.UNKNOWN_CONTENT:
            parts.append(token.text + "\n")
        elif token.kind is TokenKind.EMPTY_LINE:
            parts.append("\n")
    return _trim_trailing_newline("".join(parts))


def parse_comments_header(cursor: TokenCursor) -> None:
    accept(cursor, TokenKind.COMMENT_HEADER, STAGE_COMMENTS)
    accept(cursor, TokenKind.EMPTY_LINE, STAGE_COMMENTS)


def parse_comment(cursor: TokenCursor) -> Comment:
    # Message trimming mirrors parse_description so rendered comments round-trip.
    parts: list[str] = []
    while not cursor.is_kind(TokenKind.COMMENT_AUTHOR):
        token = cursor.pop()
        if token is None:
            raise UnexpectedTokenError(TokenKind.COMMENT_AUTHOR, None, STAGE_COMMENT)
        if token.kind is TokenKind.COMMENT_CONTENT:
            parts.append(token.text + "\n")
    author = accept(cursor, TokenKind.COMMENT_AUTHOR, STAGE_COMMENT).text
    return Comment(author=author, message=_trim_trailing_newline("".join(parts)))


def parse_comments(cursor: TokenCursor) -> list[Comment]:
    parse_comments_header(cursor)
    comments: list[Comment] = []
    while True:
        while cursor.is_kind(TokenKind.EMPTY_LINE):
            cursor.pop()
        if cursor.exhausted:
            return comments
        comments.append(parse_comment(cursor))


def parse_issue_tokens(tokens: Iterable[Token], issue_id: str = "") -> Issue:
    cursor = TokenCursor(tokens)
    preamble = parse_preamble(cursor)
    title = parse_title(cursor)
    description = parse_description(cursor)
    comments = parse_comments(cursor)
    return Issue(
        id=issue_id,
        title=title,
        description=description or preamble.get("description", ""),
        author=preamble.get("author", ""),
        milestone=preamble.get("milestone", ""),
        labels=preamble.get("labels", []),
        comments=comments,
    )


def parse_issue_document(content: bytes | str, issue_id: str = "") -> Issue:
    """Parse a stored issue document.

    Raises :class:`~vika.errors.LexError` for undecodable input,
    :class:`~vika.errors.UnexpectedTokenError` for structural problems and
    :class:`~vika.errors.PreambleError` for a bad YAML preamble.
    """
    if isinstance(content, bytes):
        try:
            text = content.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise LexError(f"document is not valid UTF-8: {exc}") from exc
    else:
        text = content
    tokens = lex(iter_lines(text))
    get_logger().debug("lexed issue document", issue_id=issue_id, token_count=len(tokens))
    return parse_issue_tokens(tokens, issue_id)


__all__ = [
    "accept",
    "parse_comment",
    "parse_comments",
    "parse_comments_header",
    "parse_description",
    "parse_issue_document",
    "parse_issue_tokens",
    "parse_preamble",
    "parse_title",
]
