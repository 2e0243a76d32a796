"""``buildwatch exists TAG`` — check whether a pipeline image tag exists.

Exit status 0 when the tag exists, 1 when it does not, 2 on lookup errors.
"""

from __future__ import annotations

import requests
import typer
from rich.markup import escape

from buildwatch.cli.commands._common import console, load_clients
from buildwatch.core.client import ClusterAPIError
from buildwatch.core.existence import image_stream_tag_exists


def exists_cmd(
    tag: str = typer.Argument(
        ...,
        help="Tag on the pipeline image stream (e.g. 'src').",
    ),
    namespace: str = typer.Option(
        "",
        "--namespace",
        "-n",
        help="Namespace of the image stream. Defaults to $BUILDWATCH_NAMESPACE.",
    ),
) -> None:
    """Check whether pipeline:TAG exists."""
    cfg, _, ist_client = load_clients(namespace)
    ref = f"{cfg.pipeline_image_stream}:{tag}"
    try:
        found = image_stream_tag_exists(ist_client, tag, cfg.pipeline_image_stream)
    except (ClusterAPIError, requests.RequestException) as exc:
        console.print(f"[bold red]Lookup failed:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2)

    if found:
        console.print(f"[green]{ref} exists[/green]")
        return
    console.print(f"[yellow]{ref} not found[/yellow]")
    raise typer.Exit(code=1)
