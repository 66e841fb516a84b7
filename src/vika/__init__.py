"""vika - issues stored as flat markdown or YAML files.

High-level public API:

from vika import parse_issue_document, render_issue_document

issue = parse_issue_document(Path('.issues/login-bug.md').read_bytes(), 'login-bug')
text = render_issue_document(issue)

Repositories (``FilesystemMarkdownIssuesRepository``,
``FilesystemIssuesRepository``) wrap the same calls for a whole directory.
"""

from __future__ import annotations

from .config import VikaConfig, load_config
from .errors import (
    IssueFormatError,
    IssueNotFoundError,
    LexError,
    PreambleError,
    RepositoryError,
    UnexpectedTokenError,
)
from .lexer import Token, TokenKind, lex
from .models import Comment, Issue
from .parser import parse_issue_document
from .render import render_issue_document
from .repository import (
    FilesystemIssuesRepository,
    FilesystemMarkdownIssuesRepository,
    IssuesRepository,
)

# Version constant (sync manually with pyproject)
__version__ = "0.1.0"

__all__ = [
    "Comment",
    "FilesystemIssuesRepository",
    "FilesystemMarkdownIssuesRepository",
    "Issue",
    "IssueFormatError",
    "IssueNotFoundError",
    "IssuesRepository",
    "LexError",
    "PreambleError",
    "RepositoryError",
    "Token",
    "TokenKind",
    "UnexpectedTokenError",
    "VikaConfig",
    "__version__",
    "lex",
    "load_config",
    "parse_issue_document",
    "render_issue_document",
]
