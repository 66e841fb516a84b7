from __future__ import annotations

from pathlib import Path

import pytest

from vika.config import default_config
from vika.errors import IssueNotFoundError, RepositoryError, UnexpectedTokenError
from vika.models import Comment, Issue
from vika.repository import (
    FilesystemIssuesRepository,
    FilesystemMarkdownIssuesRepository,
    normalize_newlines,
    open_repository,
)

REPOSITORIES = [FilesystemIssuesRepository, FilesystemMarkdownIssuesRepository]


def _issue(issue_id: str = "issue-1") -> Issue:
    return Issue(
        id=issue_id,
        title="Broken build",
        description="CI fails on main.",
        author="Jane",
        milestone="M1",
        labels=["ci"],
        comments=[Comment(author="John", message="Looking into it.")],
    )


@pytest.mark.parametrize("repo_cls", REPOSITORIES)
def test_save_then_get(tmp_path: Path, repo_cls: type) -> None:
    repo = repo_cls(tmp_path / ".issues")
    repo.save_issue(_issue())
    assert repo.get_issue("issue-1") == _issue()


@pytest.mark.parametrize("repo_cls", REPOSITORIES)
def test_get_issues_sorted_and_filtered(tmp_path: Path, repo_cls: type) -> None:
    repo = repo_cls(tmp_path)
    repo.save_issue(_issue("b"))
    repo.save_issue(_issue("a"))
    (tmp_path / "notes.txt").write_text("ignored")
    assert [i.id for i in repo.get_issues()] == ["a", "b"]
    assert repo.list_ids() == ["a", "b"]


@pytest.mark.parametrize("repo_cls", REPOSITORIES)
def test_missing_directory_is_empty(tmp_path: Path, repo_cls: type) -> None:
    assert repo_cls(tmp_path / "nope").get_issues() == []


@pytest.mark.parametrize("repo_cls", REPOSITORIES)
def test_save_overwrites(tmp_path: Path, repo_cls: type) -> None:
    repo = repo_cls(tmp_path)
    repo.save_issue(_issue())
    updated = _issue()
    updated.title = "Still broken"
    repo.save_issue(updated)
    assert repo.get_issue("issue-1").title == "Still broken"
    assert len(repo.list_ids()) == 1


@pytest.mark.parametrize("repo_cls", REPOSITORIES)
@pytest.mark.parametrize("bad_id", ["", "../escape", "has space", "a/b"])
def test_save_rejects_bad_ids(tmp_path: Path, repo_cls: type, bad_id: str) -> None:
    with pytest.raises(RepositoryError):
        repo_cls(tmp_path).save_issue(_issue(bad_id))


@pytest.mark.parametrize("repo_cls", REPOSITORIES)
def test_get_missing_issue(tmp_path: Path, repo_cls: type) -> None:
    with pytest.raises(IssueNotFoundError, match="issue 'ghost' does not exist"):
        repo_cls(tmp_path).get_issue("ghost")


@pytest.mark.parametrize("repo_cls", REPOSITORIES)
def test_delete(tmp_path: Path, repo_cls: type) -> None:
    repo = repo_cls(tmp_path)
    repo.save_issue(_issue())
    repo.delete_issue("issue-1")
    assert repo.list_ids() == []
    with pytest.raises(IssueNotFoundError):
        repo.delete_issue("issue-1")


@pytest.mark.parametrize("repo_cls", REPOSITORIES)
def test_save_normalizes_newlines(tmp_path: Path, repo_cls: type) -> None:
    repo = repo_cls(tmp_path)
    issue = _issue()
    issue.description = "one\r\ntwo\rthree"
    issue.comments = [Comment(author="x", message="a\r\nb")]
    repo.save_issue(issue)
    loaded = repo.get_issue("issue-1")
    assert loaded.description == "one\ntwo\nthree"
    assert loaded.comments[0].message == "a\nb"
    # caller's record is left alone
    assert issue.description == "one\r\ntwo\rthree"


def test_markdown_file_layout(tmp_path: Path) -> None:
    repo = FilesystemMarkdownIssuesRepository(tmp_path)
    repo.save_issue(_issue())
    text = (tmp_path / "issue-1.md").read_text(encoding="utf-8")
    assert text.startswith("---\nauthor: Jane\n")
    assert "# Broken build\n" in text
    assert "~ John\n" in text


def test_markdown_repository_surfaces_parse_errors(tmp_path: Path) -> None:
    (tmp_path / "broken.md").write_text("# no preamble\n", encoding="utf-8")
    repo = FilesystemMarkdownIssuesRepository(tmp_path)
    with pytest.raises(UnexpectedTokenError):
        repo.get_issue("broken")


def test_normalize_newlines() -> None:
    assert normalize_newlines("a\r\nb\rc\n") == "a\nb\nc\n"


def test_open_repository_by_format(tmp_path: Path) -> None:
    cfg = default_config(tmp_path)
    assert isinstance(open_repository(cfg), FilesystemMarkdownIssuesRepository)
    cfg.storage_format = "yaml"
    repo = open_repository(cfg)
    assert isinstance(repo, FilesystemIssuesRepository)
    assert repo.directory == tmp_path / ".issues"


@pytest.mark.parametrize("field", ["author", "milestone", "labels"])
def test_markdown_preamble_fields_with_blank_lines_round_trip(
    tmp_path: Path, field: str
) -> None:
    repo = FilesystemMarkdownIssuesRepository(tmp_path)
    issue = _issue()
    value = "first\n\nthird"
    setattr(issue, field, [value] if field == "labels" else value)
    repo.save_issue(issue)
    assert repo.get_issue(issue.id) == issue


@pytest.mark.parametrize(
    ("change", "problem"),
    [
        (lambda i: setattr(i, "title", "first\nsecond"), "title contains a line break"),
        (lambda i: setattr(i, "title", "carriage\rreturn"), "title contains a line break"),
        (lambda i: setattr(i, "comments", [Comment(author="x\ny", message="m")]), "author"),
        (lambda i: setattr(i, "description", "above\n## Comments\nbelow"), "description line 2"),
        (lambda i: setattr(i, "description", "---"), "description line 1"),
        (lambda i: setattr(i, "description", "> quoted"), "description line 1"),
    ],
)
def test_markdown_refuses_unreadable_issues(tmp_path: Path, change, problem: str) -> None:
    repo = FilesystemMarkdownIssuesRepository(tmp_path)
    issue = _issue()
    change(issue)
    with pytest.raises(RepositoryError, match=problem):
        repo.save_issue(issue)
    assert list(tmp_path.iterdir()) == []


def test_refused_issue_leaves_other_issues_readable(tmp_path: Path) -> None:
    repo = FilesystemMarkdownIssuesRepository(tmp_path)
    repo.save_issue(_issue("good"))
    bad = _issue("bad")
    bad.title = "a\nb"
    with pytest.raises(RepositoryError):
        repo.save_issue(bad)
    assert [i.id for i in repo.get_issues()] == ["good"]


def test_yaml_store_keeps_multiline_title(tmp_path: Path) -> None:
    repo = FilesystemIssuesRepository(tmp_path)
    issue = _issue()
    issue.title = "first\nsecond"
    repo.save_issue(issue)
    assert repo.get_issue(issue.id).title == "first\nsecond"


def test_filesystem_base_is_abstract(tmp_path: Path) -> None:
    from vika.repository import _FilesystemRepository

    with pytest.raises(TypeError):
        _FilesystemRepository(tmp_path)  # type: ignore[abstract]
