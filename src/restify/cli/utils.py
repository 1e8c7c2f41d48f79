"""
CLI utility helpers: service construction and error rendering.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import typer
from rich.console import Console

from restify.core.config import find_config
from restify.core.errors import RestifyError
from restify.service import Restify

console = Console()
err_console = Console(stderr=True)


def load_service(config_path: Path | None) -> Restify:
    """Build the service from ``--config`` or the discovered config file."""
    return Restify.from_file(config_path or find_config())


@contextmanager
def handle_errors() -> Iterator[None]:
    """Render Restify errors as a red message and exit with status 1."""
    try:
        yield
    except RestifyError as e:
        err_console.print(f"[bold red]Error[/bold red] ({e.__class__.__name__}): {e.message}")
        raise typer.Exit(code=1) from e


def print_json(payload: Any) -> None:
    console.print_json(json.dumps(payload, default=str))
