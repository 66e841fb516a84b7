"""YAML side of issue storage.

Two users: the markdown parser hands the preamble block to
:func:`load_preamble`, and the plain YAML repository stores whole issues with
:func:`dump_yaml_issue` / :func:`load_yaml_issue`.
"""

from __future__ import annotations

import datetime as _dt
from typing import Any

import yaml

from .errors import IssueFormatError, PreambleError
from .models import Comment, Issue

TEXT_FIELDS = ("title", "description", "author", "milestone")
PREAMBLE_FIELDS = ("author", "milestone", "labels")

_SCALARS = (str, int, float, bool, _dt.date)


class _IssueDumper(yaml.SafeDumper):
    pass


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    if "\n" in data:
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", data)


_IssueDumper.add_representer(str, _represent_str)


# Line breaks YAML itself recognizes inside a scalar.
_LINE_BREAKS = ("\n", "\r", "\x85", "\u2028", "\u2029")


class _PreambleDumper(yaml.SafeDumper):
    """Keeps every preamble scalar on one line.

    The document lexer ends the preamble at the first empty line, so
    multi-line values are escaped in double quotes instead of written as
    block scalars.
    """


def _represent_preamble_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    if any(br in data for br in _LINE_BREAKS):
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style='"')
    return dumper.represent_scalar("tag:yaml.org,2002:str", data)


_PreambleDumper.add_representer(str, _represent_preamble_str)


def _coerce_text(key: str, value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, _SCALARS):
        return str(value)
    raise TypeError(f"'{key}' must be a string, got {type(value).__name__}")


def _coerce_labels(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [p.strip() for p in value.split(",") if p.strip()]
    if isinstance(value, list):
        labels: list[str] = []
        for item in value:
            if not isinstance(item, _SCALARS):
                raise TypeError(f"label entries must be strings, got {type(item).__name__}")
            labels.append(str(item))
        return labels
    raise TypeError(
        f"'labels' must be a list or a comma separated string, got {type(value).__name__}"
    )


def _coerce_comments(value: Any) -> list[Comment]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise TypeError(f"'comments' must be a list, got {type(value).__name__}")
    comments: list[Comment] = []
    for entry in value:
        if not isinstance(entry, dict):
            raise TypeError("comment entries must be mappings")
        comments.append(
            Comment(
                author=_coerce_text("author", entry.get("author")),
                message=_coerce_text("message", entry.get("message")),
            )
        )
    return comments


def _load_mapping(text: str) -> dict[str, Any]:
    loaded = yaml.safe_load(text)
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise TypeError(f"expected a mapping, got {type(loaded).__name__}")
    return {str(k): v for k, v in loaded.items()}


def load_preamble(text: str) -> dict[str, Any]:
    """Deserialize a preamble block into issue fields.

    Only known keys are returned (``title``, ``description``, ``author``,
    ``milestone``, ``labels``); anything else in the block is ignored.
    """
    try:
        data = _load_mapping(text)
        fields: dict[str, Any] = {}
        for key in TEXT_FIELDS:
            if key in data:
                fields[key] = _coerce_text(key, data[key])
        if "labels" in data:
            fields["labels"] = _coerce_labels(data["labels"])
    except yaml.YAMLError as exc:
        raise PreambleError(f"invalid YAML: {exc}") from exc
    except TypeError as exc:
        raise PreambleError(str(exc)) from exc
    return fields


def dump_preamble(issue: Issue) -> str:
    data = {
        "author": issue.author,
        "milestone": issue.milestone,
        "labels": list(issue.labels),
    }
    return yaml.dump(
        data,
        Dumper=_PreambleDumper,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
        width=float("inf"),
    )


def issue_to_mapping(issue: Issue) -> dict[str, Any]:
    return {
        "id": issue.id,
        "title": issue.title,
        "description": issue.description,
        "author": issue.author,
        "milestone": issue.milestone,
        "comments": [{"author": c.author, "message": c.message} for c in issue.comments],
        "labels": list(issue.labels),
    }


def dump_yaml_issue(issue: Issue) -> str:
    return yaml.dump(
        issue_to_mapping(issue),
        Dumper=_IssueDumper,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )


def load_yaml_issue(text: str, issue_id: str = "") -> Issue:
    """Load a plain YAML issue file; ``issue_id`` wins over an ``id`` key."""
    try:
        data = _load_mapping(text)
        issue = Issue(
            id=issue_id or _coerce_text("id", data.get("id")),
            labels=_coerce_labels(data.get("labels")),
            comments=_coerce_comments(data.get("comments")),
        )
        for key in TEXT_FIELDS:
            setattr(issue, key, _coerce_text(key, data.get(key)))
    except yaml.YAMLError as exc:
        raise IssueFormatError(f"invalid YAML: {exc}", "yaml") from exc
    except TypeError as exc:
        raise IssueFormatError(str(exc), "yaml") from exc
    return issue


__all__ = [
    "dump_preamble",
    "dump_yaml_issue",
    "issue_to_mapping",
    "load_preamble",
    "load_yaml_issue",
]
