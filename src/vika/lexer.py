"""Line lexer for issue documents.

Every input line becomes exactly one :class:`Token`. The lexer is context
free: YAML preamble lines and description paragraphs both come out as
``UNKNOWN_CONTENT`` and the parser decides what they mean.
"""

from __future__ import annotations

import io
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum

from .errors import LexError

PREAMBLE_DELIMITER = "---"
HEADER1_PREFIX = "# "
COMMENT_CONTENT_PREFIX = "> "
COMMENT_AUTHOR_PREFIX = "~ "
COMMENT_HEADING = "## Comments"


class TokenKind(Enum):
    PREAMBLE_DELIMITER = "preamble_delimiter"
    HEADER1_TITLE = "header1_title"
    EMPTY_LINE = "empty_line"
    COMMENT_CONTENT = "comment_content"
    COMMENT_AUTHOR = "comment_author"
    COMMENT_HEADER = "comment_header"
    UNKNOWN_CONTENT = "unknown_content"


@dataclass(frozen=True)
class Token:
    """A classified line.

    ``text`` is the title, comment line, author or raw line depending on
    ``kind``; marker kinds carry an empty string.
    """

    kind: TokenKind
    text: str = ""

    @classmethod
    def preamble_delimiter(cls) -> Token:
        return cls(TokenKind.PREAMBLE_DELIMITER)

    @classmethod
    def header1_title(cls, content: str) -> Token:
        return cls(TokenKind.HEADER1_TITLE, content)

    @classmethod
    def empty_line(cls) -> Token:
        return cls(TokenKind.EMPTY_LINE)

    @classmethod
    def comment_content(cls, content: str) -> Token:
        return cls(TokenKind.COMMENT_CONTENT, content)

    @classmethod
    def comment_author(cls, author: str) -> Token:
        return cls(TokenKind.COMMENT_AUTHOR, author)

    @classmethod
    def comment_header(cls) -> Token:
        return cls(TokenKind.COMMENT_HEADER)

    @classmethod
    def unknown_content(cls, content: str) -> Token:
        return cls(TokenKind.UNKNOWN_CONTENT, content)

    def __repr__(self) -> str:
        if self.text:
            return f"Token({self.kind.name}, {self.text!r})"
        return f"Token({self.kind.name})"


def iter_lines(text: str) -> Iterator[str]:
    """Yield the lines of ``text`` without their terminators.

    Universal newlines apply, so ``\\r\\n`` and bare ``\\r`` both end a line.
    A final terminator does not produce an extra empty line.
    """
    for raw in io.StringIO(text, newline=None):
        yield raw.rstrip("\r\n")


def is_preamble_delimiter(line: str) -> bool:
    return line == PREAMBLE_DELIMITER


def lex_preamble_delimiter(line: str) -> Token:
    return Token.preamble_delimiter()


def is_header1_title(line: str) -> bool:
    return line.startswith(HEADER1_PREFIX)


def lex_header1_title(line: str) -> Token:
    return Token.header1_title(line[len(HEADER1_PREFIX):])


def is_empty_line(line: str) -> bool:
    return line == ""


def lex_empty_line(line: str) -> Token:
    return Token.empty_line()


def is_comment_content(line: str) -> bool:
    return line.startswith(COMMENT_CONTENT_PREFIX)


def lex_comment_content(line: str) -> Token:
    return Token.comment_content(line[len(COMMENT_CONTENT_PREFIX):])


def is_comment_author(line: str) -> bool:
    return line.startswith(COMMENT_AUTHOR_PREFIX)


def lex_comment_author(line: str) -> Token:
    return Token.comment_author(line[len(COMMENT_AUTHOR_PREFIX):])


def is_comment_header(line: str) -> bool:
    return line == COMMENT_HEADING


def lex_comment_header(line: str) -> Token:
    return Token.comment_header()


def lex_unknown_content(line: str) -> Token:
    """Fallback for lines the lexer cannot classify on its own.

    Whether such a line is YAML or description text depends on where it sits
    in the document, which only the parser knows.
    """
    return Token.unknown_content(line)


# Order matters: first match wins and unknown content is the fallback.
_RULES = (
    (is_preamble_delimiter, lex_preamble_delimiter),
    (is_header1_title, lex_header1_title),
    (is_empty_line, lex_empty_line),
    (is_comment_content, lex_comment_content),
    (is_comment_author, lex_comment_author),
    (is_comment_header, lex_comment_header),
)


def lex_line(line: str) -> Token:
    for matches, build in _RULES:
        if matches(line):
            return build(line)
    return lex_unknown_content(line)


def lex(source: Iterable[str]) -> list[Token]:
    """Lex every line of ``source`` into a token.

    Raises :class:`LexError` when the source itself fails while being read;
    the error keeps the tokens produced up to that point.
    """
    tokens: list[Token] = []
    lines = iter(source)
    while True:
        try:
            line = next(lines)
        except StopIteration:
            break
        except (OSError, UnicodeError) as exc:
            raise LexError(f"line source failed: {exc}", tokens) from exc
        tokens.append(lex_line(line))
    return tokens


__all__ = [
    "COMMENT_HEADING",
    "Token",
    "TokenKind",
    "iter_lines",
    "lex",
    "lex_line",
]
