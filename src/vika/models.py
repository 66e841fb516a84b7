from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Comment:
    author: str = ""
    message: str = ""


@dataclass
class Issue:
    """In-memory representation of one stored issue document.

    ``id`` is never written into the document itself; repositories derive it
    from the file name.
    """

    id: str = ""
    title: str = ""
    description: str = ""
    author: str = ""
    milestone: str = ""
    labels: list[str] = field(default_factory=list)
    comments: list[Comment] = field(default_factory=list)


__all__ = ["Comment", "Issue"]
