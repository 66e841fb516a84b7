"""vika CLI.

Subcommands:
  list      -> list stored issues
  show      -> print one issue as a markdown document
  create    -> create a new issue
  update    -> change fields of an existing issue
  comment   -> append a comment to an issue
  delete    -> remove an issue
  validate  -> parse every stored issue and report broken documents
  export    -> export all issues to JSON
  schema    -> write the JSON Schema of the export
  tokens    -> dump the lexer token stream of a document file
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from .config import VikaConfig
from .errors import IssueFormatError, RepositoryError, classify_error
from .lexer import iter_lines, lex
from .models import Comment, Issue
from .render import render_issue_document
from .repository import IssuesRepository, open_repository
from .runtime import execute_command, prepare_config, quiet_requested
from .schemas import get_schemas, issue_to_export
from .ux import Colors, colorize, print_error, print_header, print_success

_MAX_HELP_WIDTH = 100


class _HelpFormatter(argparse.HelpFormatter):
    def __init__(self, prog: str) -> None:
        super().__init__(prog, max_help_position=30, width=_MAX_HELP_WIDTH)


class _FormatterArgumentParser(argparse.ArgumentParser):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("formatter_class", _HelpFormatter)
        super().__init__(*args, **kwargs)


def _add_field_options(parser: argparse.ArgumentParser, *, title_required: bool) -> None:
    parser.add_argument("--title", required=title_required)
    parser.add_argument("--description")
    parser.add_argument("--author")
    parser.add_argument("--milestone")
    parser.add_argument(
        "--label",
        dest="labels",
        action="append",
        help="Label to attach (repeatable; replaces existing labels on update)",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Construct top-level CLI parser with subcommands.

    Keep ordering stable for help output readability.
    """
    p = _FormatterArgumentParser(prog="vika", description="Flat-file issue tracker")
    p.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress informational output (env: VIKA_QUIET=1)",
    )
    p.add_argument("--config", help="Path to vika.config.yaml")
    p.add_argument("--issues-dir", help="Override the issues directory")
    sub = p.add_subparsers(
        dest="cmd",
        required=True,
        parser_class=_FormatterArgumentParser,
        metavar="<command>",
    )

    sub.add_parser("list", help="List stored issues")

    ps = sub.add_parser("show", help="Print one issue as a markdown document")
    ps.add_argument("id")

    pc = sub.add_parser("create", help="Create a new issue")
    pc.add_argument("id")
    _add_field_options(pc, title_required=True)

    pu = sub.add_parser("update", help="Change fields of an existing issue")
    pu.add_argument("id")
    _add_field_options(pu, title_required=False)
    pu.add_argument("--new-id", help="Rename the issue (saved under the new ID)")

    pm = sub.add_parser("comment", help="Append a comment to an issue")
    pm.add_argument("id")
    pm.add_argument("--author", default="")
    pm.add_argument("--message", required=True)

    pd = sub.add_parser("delete", help="Delete an issue")
    pd.add_argument("id")

    sub.add_parser("validate", help="Parse every stored issue and report errors")

    pe = sub.add_parser("export", help="Export issues to JSON")
    pe.add_argument("--output", help="Output file ('-' for stdout)")
    pe.add_argument("--pretty", action="store_true")

    psc = sub.add_parser("schema", help="Write the export JSON Schema")
    psc.add_argument("--output")
    psc.add_argument("--stdout", action="store_true")

    pt = sub.add_parser("tokens", help="Print the token stream of a document file")
    pt.add_argument("file")

    return p


def _apply_fields(issue: Issue, args: argparse.Namespace) -> None:
    for name in ("title", "description", "author", "milestone"):
        value = getattr(args, name, None)
        if value is not None:
            setattr(issue, name, value)
    if getattr(args, "labels", None) is not None:
        issue.labels = list(args.labels)


def _cmd_list(repo: IssuesRepository, args: argparse.Namespace) -> int:
    issues = repo.get_issues()
    quiet = quiet_requested(args)
    if not quiet:
        print_header(f"Issues ({len(issues)} total)")
    else:
        print(f"Total: {len(issues)}")
    for issue in issues:
        labels = f" [{', '.join(issue.labels)}]" if issue.labels else ""
        if not quiet:
            ident = colorize(issue.id, Colors.CYAN, bold=True)
            print(f"  {ident} {issue.title[:70]}{colorize(labels, Colors.DIM)}")
        else:
            print(f"  {issue.id} {issue.title[:70]}{labels}")
    return 0


def _cmd_show(repo: IssuesRepository, args: argparse.Namespace) -> int:
    issue = repo.get_issue(args.id)
    sys.stdout.write(render_issue_document(issue))
    return 0


def _cmd_create(repo: IssuesRepository, args: argparse.Namespace) -> int:
    if args.id in repo.list_ids():
        raise RepositoryError(f"issue '{args.id}' already exists")
    issue = Issue(id=args.id)
    _apply_fields(issue, args)
    repo.save_issue(issue)
    if not quiet_requested(args):
        print_success(f"Created issue {issue.id}")
    return 0


def _cmd_update(repo: IssuesRepository, args: argparse.Namespace) -> int:
    issue = repo.get_issue(args.id)
    _apply_fields(issue, args)
    renamed = args.new_id is not None and args.new_id != args.id
    if renamed:
        if args.new_id in repo.list_ids():
            raise RepositoryError(f"issue '{args.new_id}' already exists")
        issue.id = args.new_id
    repo.save_issue(issue)
    if renamed:
        repo.delete_issue(args.id)
    if not quiet_requested(args):
        suffix = f" (renamed from {args.id})" if renamed else ""
        print_success(f"Updated issue {issue.id}{suffix}")
    return 0


def _cmd_comment(repo: IssuesRepository, args: argparse.Namespace) -> int:
    issue = repo.get_issue(args.id)
    issue.comments.append(Comment(author=args.author, message=args.message))
    repo.save_issue(issue)
    if not quiet_requested(args):
        print_success(f"Added comment #{len(issue.comments)} to {issue.id}")
    return 0


def _cmd_delete(repo: IssuesRepository, args: argparse.Namespace) -> int:
    repo.delete_issue(args.id)
    if not quiet_requested(args):
        print_success(f"Deleted issue {args.id}")
    return 0


def _cmd_validate(repo: IssuesRepository, args: argparse.Namespace) -> int:
    ids = repo.list_ids()
    failures = 0
    for issue_id in ids:
        try:
            repo.get_issue(issue_id)
        except (IssueFormatError, RepositoryError) as exc:
            failures += 1
            info = classify_error(exc)
            print_error(f"{issue_id}: [{info.category}] {info.message}")
    if failures:
        print(f"[validate] {failures} of {len(ids)} issue(s) failed")
        return 1
    if not quiet_requested(args):
        print_success(f"{len(ids)} issue(s) valid")
    else:
        print(f"[validate] {len(ids)} ok")
    return 0


def _cmd_export(repo: IssuesRepository, cfg: VikaConfig, args: argparse.Namespace) -> int:
    data = [issue_to_export(issue) for issue in repo.get_issues()]
    text = json.dumps(data, indent=2 if args.pretty else None) + "\n"
    if args.output == "-":
        sys.stdout.write(text)
        return 0
    out_path = Path(args.output or cfg.export_json)
    out_path.write_text(text, encoding="utf-8")
    if not quiet_requested(args):
        print_success(f"Exported {len(data)} issues to {out_path}")
    else:
        print(f"[export] {len(data)} issues -> {out_path}")
    return 0


def _cmd_schema(cfg: VikaConfig, args: argparse.Namespace) -> int:
    schemas = get_schemas()
    if args.stdout:
        print(json.dumps(schemas, indent=2))
        return 0
    out_path = Path(args.output or cfg.schema_file)
    out_path.write_text(json.dumps(schemas["export"], indent=2) + "\n", encoding="utf-8")
    if not quiet_requested(args):
        print_success(f"Wrote export schema to {out_path}")
    else:
        print(f"[schema] wrote {out_path}")
    return 0


def _cmd_tokens(args: argparse.Namespace) -> int:
    text = Path(args.file).read_text(encoding="utf-8")
    for number, token in enumerate(lex(iter_lines(text)), start=1):
        print(f"{number:4d}  {token.kind.name:<18} {token.text}".rstrip())
    return 0


def _build_handlers(args: argparse.Namespace, cfg: VikaConfig) -> dict[str, Any]:
    repo = open_repository(cfg)
    return {
        "list": lambda: _cmd_list(repo, args),
        "show": lambda: _cmd_show(repo, args),
        "create": lambda: _cmd_create(repo, args),
        "update": lambda: _cmd_update(repo, args),
        "comment": lambda: _cmd_comment(repo, args),
        "delete": lambda: _cmd_delete(repo, args),
        "validate": lambda: _cmd_validate(repo, args),
        "export": lambda: _cmd_export(repo, cfg, args),
        "schema": lambda: _cmd_schema(cfg, args),
        "tokens": lambda: _cmd_tokens(args),
    }


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        cfg = prepare_config(args)
        handler = _build_handlers(args, cfg).get(args.cmd)
        if handler is None:  # pragma: no cover - argparse enforces valid choices
            parser.print_help()
            return 1
        return execute_command(handler, args.cmd)
    except (ValueError, RuntimeError, OSError) as exc:
        info = classify_error(exc)
        print_error(f"[{info.category}] {info.message}")
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
