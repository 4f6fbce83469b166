#!/usr/bin/env python3
"""
Terminal Output
===============
Rich-based rendering for the KalaStatic CLI.

Provides:
- ConsoleMessenger: user-facing error sink printing to stderr
- render_settings / render_library / render_namespaces
- setup_logging: RichHandler-backed logging for the CLI
"""

import logging
from typing import Dict, Optional

import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich import box

from kalastatic.library import LibraryDescriptor
from kalastatic.loader import ComposedSettings


class ConsoleMessenger:
    """Messenger collaborator that prints to the terminal."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(stderr=True)

    def error(self, message: str) -> None:
        self.console.print(f"[bold red]Error:[/] {message}")


def setup_logging(verbose: bool = False, console: Optional[Console] = None) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    logging.basicConfig(level=level, format="%(message)s", handlers=[handler], force=True)


def render_settings(settings: ComposedSettings, console: Console) -> None:
    for title, data in (("kalastatic.yaml", settings.yaml),
                        ("metadata", settings.config)):
        text = yaml.safe_dump(data, sort_keys=False, default_flow_style=False) if data else "{}\n"
        console.print(Panel(Syntax(text, "yaml", theme="ansi_dark"),
                            title=title, box=box.ROUNDED))


def render_library(library: LibraryDescriptor, console: Console) -> None:
    table = Table(title=library.name, box=box.SIMPLE_HEAVY)
    table.add_column("Type", style="cyan", no_wrap=True)
    table.add_column("URL")
    for url in library.stylesheets:
        table.add_row("css", url)
    for url in library.scripts:
        table.add_row("js", url)
    console.print(table)
    console.print(f"Dependencies: {', '.join(library.dependencies) or '-'}")
    console.print(f"License: {library.license.name} ({library.license.url})")


def render_namespaces(namespaces: Dict[str, str], console: Console) -> None:
    table = Table(title="Twig namespaces", box=box.SIMPLE_HEAVY)
    table.add_column("Namespace", style="cyan", no_wrap=True)
    table.add_column("Path")
    for name, path in namespaces.items():
        table.add_row(f"@{name}", path)
    console.print(table)


__all__ = [
    "ConsoleMessenger",
    "setup_logging",
    "render_settings",
    "render_library",
    "render_namespaces",
]
