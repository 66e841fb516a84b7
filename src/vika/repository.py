"""File-backed issue repositories.

One file per issue inside a single directory; the issue id is the file stem.
``FilesystemIssuesRepository`` stores plain YAML (``<id>.yml``) and
``FilesystemMarkdownIssuesRepository`` stores the markdown document format
(``<id>.md``).
"""

from __future__ import annotations

import dataclasses
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Protocol

from .config import DEFAULT_ID_PATTERN, VikaConfig
from .errors import IssueNotFoundError, RepositoryError
from .logging import get_logger
from .models import Issue
from .parser import parse_issue_document
from .render import document_problems, render_issue_document
from .yaml_codec import dump_yaml_issue, load_yaml_issue


class IssuesRepository(Protocol):
    def list_ids(self) -> list[str]: ...

    def get_issues(self) -> list[Issue]: ...

    def save_issue(self, issue: Issue) -> None: ...

    def get_issue(self, issue_id: str) -> Issue: ...

    def delete_issue(self, issue_id: str) -> None: ...


def normalize_newlines(text: str) -> str:
    """Replace Windows (CR LF) and classic Mac (CR) newlines with LF."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


class _FilesystemRepository(ABC):
    suffix = ""

    def __init__(self, directory: str | Path, id_pattern: str = DEFAULT_ID_PATTERN) -> None:
        self.directory = Path(directory)
        self._id_re = re.compile(id_pattern)

    @abstractmethod
    def _encode(self, issue: Issue) -> str: ...

    @abstractmethod
    def _decode(self, data: bytes, issue_id: str) -> Issue: ...

    def _path(self, issue_id: str) -> Path:
        return self.directory / f"{issue_id}{self.suffix}"

    def _check_id(self, issue_id: str) -> None:
        if not issue_id:
            raise RepositoryError("issue ID is empty")
        if not self._id_re.match(issue_id) or "/" in issue_id or "\\" in issue_id:
            raise RepositoryError(f"issue ID '{issue_id}' is not a valid file name")

    def list_ids(self) -> list[str]:
        if not self.directory.is_dir():
            return []
        return [
            path.stem
            for path in sorted(self.directory.iterdir())
            if path.suffix == self.suffix and path.is_file()
        ]

    def get_issues(self) -> list[Issue]:
        issues = [
            self._decode(self._path(issue_id).read_bytes(), issue_id)
            for issue_id in self.list_ids()
        ]
        get_logger().log_operation("issues_loaded", count=len(issues), directory=str(self.directory))
        return issues

    def save_issue(self, issue: Issue) -> None:
        """Write ``issue`` to disk, replacing any existing file with its id."""
        self._check_id(issue.id)
        normalized = dataclasses.replace(
            issue,
            description=normalize_newlines(issue.description),
            comments=[
                dataclasses.replace(c, message=normalize_newlines(c.message))
                for c in issue.comments
            ],
        )
        path = self._path(issue.id)
        self.directory.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text(self._encode(normalized), encoding="utf-8")
        tmp.replace(path)
        get_logger().log_issue_action("saved", issue.id, path=str(path))

    def get_issue(self, issue_id: str) -> Issue:
        self._check_id(issue_id)
        path = self._path(issue_id)
        try:
            data = path.read_bytes()
        except FileNotFoundError as exc:
            raise IssueNotFoundError(issue_id) from exc
        issue = self._decode(data, issue_id)
        get_logger().log_issue_action("loaded", issue_id, path=str(path))
        return issue

    def delete_issue(self, issue_id: str) -> None:
        self._check_id(issue_id)
        path = self._path(issue_id)
        try:
            path.unlink()
        except FileNotFoundError as exc:
            raise IssueNotFoundError(issue_id) from exc
        get_logger().log_issue_action("deleted", issue_id, path=str(path))


class FilesystemIssuesRepository(_FilesystemRepository):
    suffix = ".yml"

    def _encode(self, issue: Issue) -> str:
        return dump_yaml_issue(issue)

    def _decode(self, data: bytes, issue_id: str) -> Issue:
        return load_yaml_issue(data.decode("utf-8"), issue_id)


class FilesystemMarkdownIssuesRepository(_FilesystemRepository):
    suffix = ".md"

    def _encode(self, issue: Issue) -> str:
        problems = document_problems(issue)
        if problems:
            raise RepositoryError(
                f"issue '{issue.id}' cannot be stored as markdown: " + "; ".join(problems)
            )
        return render_issue_document(issue)

    def _decode(self, data: bytes, issue_id: str) -> Issue:
        return parse_issue_document(data, issue_id)


def open_repository(config: VikaConfig) -> IssuesRepository:
    if config.storage_format == "yaml":
        return FilesystemIssuesRepository(config.issues_dir, config.id_pattern)
    return FilesystemMarkdownIssuesRepository(config.issues_dir, config.id_pattern)


__all__ = [
    "FilesystemIssuesRepository",
    "FilesystemMarkdownIssuesRepository",
    "IssuesRepository",
    "normalize_newlines",
    "open_repository",
]
