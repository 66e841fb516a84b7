"""JSON Schema for the issue export artifact.

The schema is shallow on purpose: enough structure for downstream
validation and documentation, open for additive fields.
"""

from __future__ import annotations

from typing import Any

from .models import Issue

SCHEMA_KEY = "$schema"
SCHEMA_URL = "http://json-schema.org/draft-07/schema#"
EXPORT_SCHEMA_VERSION = "20261017"


def issue_to_export(issue: Issue) -> dict[str, Any]:
    return {
        "id": issue.id,
        "title": issue.title,
        "description": issue.description,
        "author": issue.author,
        "milestone": issue.milestone,
        "labels": list(issue.labels),
        "comments": [{"author": c.author, "message": c.message} for c in issue.comments],
    }


def get_schemas() -> dict[str, Any]:
    """Return a mapping of schema name -> JSON Schema dictionary.

    Keys:
        export: Schema describing the exported issue list.
    """
    export_schema: dict[str, Any] = {
        SCHEMA_KEY: SCHEMA_URL,
        "$comment": f"vika export schema v{EXPORT_SCHEMA_VERSION}",
        "title": "IssueExport",
        "type": "array",
        "items": {
            "type": "object",
            "required": ["id", "title", "description", "labels", "comments"],
            "properties": {
                "id": {"type": "string", "minLength": 1},
                "title": {"type": "string"},
                "description": {"type": "string"},
                "author": {"type": "string"},
                "milestone": {"type": "string"},
                "labels": {"type": "array", "items": {"type": "string"}},
                "comments": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "required": ["author", "message"],
                        "properties": {
                            "author": {"type": "string"},
                            "message": {"type": "string"},
                        },
                    },
                },
            },
        },
    }
    return {"export": export_schema}


__all__ = ["EXPORT_SCHEMA_VERSION", "get_schemas", "issue_to_export"]
