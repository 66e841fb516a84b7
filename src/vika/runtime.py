"""Runtime helpers for CLI orchestration."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol

from .config import CONFIG_DEFAULT, VikaConfig, default_config, load_config
from .errors import classify_error
from .logging import configure_logging, get_logger


class _HandlerCallable(Protocol):
    def __call__(self) -> Any: ...


def prepare_config(
    args: Any, *, loader: Callable[[str], VikaConfig] = load_config
) -> VikaConfig:
    """Load the config named by ``--config``; fall back to defaults when the
    implicit default file is absent."""
    path = getattr(args, "config", None)
    if path is None:
        if not Path(CONFIG_DEFAULT).exists():
            cfg = default_config(Path.cwd())
        else:
            cfg = loader(CONFIG_DEFAULT)
    else:
        cfg = loader(path)
    directory_override = getattr(args, "issues_dir", None)
    if directory_override:
        cfg.issues_dir = Path(directory_override)
    configure_logging(json_logging=cfg.logging_json_enabled, level=cfg.logging_level)
    return cfg


def quiet_requested(args: Any) -> bool:
    return bool(getattr(args, "quiet", False)) or os.environ.get("VIKA_QUIET") == "1"


def execute_command(handler: _HandlerCallable, command: str) -> int:
    """Run a command handler under a timed log operation.

    Exceptions are logged with their category and re-raised for the caller
    to render.
    """
    logger = get_logger()
    try:
        with logger.timed_operation(f"command_{command}"):
            result = handler()
    except Exception as exc:
        info = classify_error(exc)
        logger.debug("command failed", category=info.category, stage=info.stage)
        raise
    return int(result) if result is not None else 0


__all__ = ["execute_command", "prepare_config", "quiet_requested"]
