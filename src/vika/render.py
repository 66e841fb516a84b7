"""Serialize issues into the markdown document format read by :mod:`vika.parser`."""

from __future__ import annotations

from .lexer import (
    COMMENT_AUTHOR_PREFIX,
    COMMENT_CONTENT_PREFIX,
    COMMENT_HEADING,
    HEADER1_PREFIX,
    PREAMBLE_DELIMITER,
    TokenKind,
    lex_line,
)
from .models import Comment, Issue
from .yaml_codec import dump_preamble

# Kinds a description line may lex to and still read back as description text.
_DESCRIPTION_KINDS = (TokenKind.UNKNOWN_CONTENT, TokenKind.EMPTY_LINE)


def _breaks_line(text: str) -> bool:
    return "\n" in text or "\r" in text


def document_problems(issue: Issue) -> list[str]:
    """List the fields of ``issue`` that would not survive a render and parse.

    Single-line fields (title, comment authors) must not contain line breaks,
    and no description line may look like document structure.
    """
    problems: list[str] = []
    if _breaks_line(issue.title):
        problems.append("title contains a line break")
    for number, line in enumerate(issue.description.split("\n"), start=1):
        if "\r" in line or lex_line(line).kind not in _DESCRIPTION_KINDS:
            problems.append(f"description line {number} would not read back as text: {line!r}")
    for number, comment in enumerate(issue.comments, start=1):
        if _breaks_line(comment.author):
            problems.append(f"comment #{number} author contains a line break")
    return problems


def render_comment(comment: Comment) -> str:
    quoted = "".join(
        f"{COMMENT_CONTENT_PREFIX}{line}\n" for line in comment.message.split("\n")
    )
    return f"{quoted}\n{COMMENT_AUTHOR_PREFIX}{comment.author}\n"


def render_issue_document(issue: Issue) -> str:
    """Render ``issue`` as a document.

    The output parses back to ``issue`` whenever :func:`document_problems`
    reports nothing. Otherwise the title or an author spills onto extra
    lines, and description lines such as ``---``, ``## Comments`` or lines
    starting with ``# ``, ``> `` or ``~ `` are read as structure.
    """
    parts = [
        f"{PREAMBLE_DELIMITER}\n",
        dump_preamble(issue),
        f"{PREAMBLE_DELIMITER}\n",
        f"{HEADER1_PREFIX}{issue.title}\n",
        "\n",
    ]
    if issue.description:
        parts.append(f"{issue.description}\n")
    parts.append(f"{COMMENT_HEADING}\n")
    parts.append("\n")
    parts.append("\n".join(render_comment(c) for c in issue.comments))
    return "".join(parts)


__all__ = ["document_problems", "render_comment", "render_issue_document"]
