"""Helpers shared by the CLI commands."""

from __future__ import annotations

from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape

from buildwatch.bridge.openshift import clients_from_config
from buildwatch.config import BuildwatchConfig
from buildwatch.core.client import BuildClient, ImageStreamTagClient

console = Console()


def fail(title: str, detail: object = "") -> NoReturn:
    """Print a red error line and exit with status 1."""
    suffix = f" {escape(str(detail))}" if detail != "" else ""
    console.print(f"[bold red]{title}[/bold red]{suffix}")
    raise typer.Exit(code=1)


def load_clients(
    namespace: str,
    *,
    require_namespace: bool = True,
) -> tuple[BuildwatchConfig, BuildClient, ImageStreamTagClient]:
    """Resolve config and cluster clients for *namespace* (or the configured one)."""
    cfg = BuildwatchConfig()
    ns = namespace or cfg.namespace
    if require_namespace and not ns:
        fail("No namespace:", "pass --namespace or set BUILDWATCH_NAMESPACE")
    build_client, ist_client = clients_from_config(cfg, ns)
    return cfg, build_client, ist_client
