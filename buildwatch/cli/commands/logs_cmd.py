"""``buildwatch logs NAME`` — print a build's logs."""

from __future__ import annotations

import contextlib
import shutil
import sys

import requests
import typer

from buildwatch.cli.commands._common import fail, load_clients
from buildwatch.core.client import ClusterAPIError
from buildwatch.models.build import LogOptions


def logs_cmd(
    name: str = typer.Argument(
        ...,
        help="Name of the build.",
    ),
    namespace: str = typer.Option(
        "",
        "--namespace",
        "-n",
        help="Namespace of the build. Defaults to $BUILDWATCH_NAMESPACE.",
    ),
    follow: bool = typer.Option(
        False,
        "--follow",
        "-F",
        help="Keep streaming until the build finishes.",
    ),
    timestamps: bool = typer.Option(
        True,
        "--timestamps/--no-timestamps",
        help="Prefix each line with its timestamp.",
    ),
) -> None:
    """Print the logs of a build to standard output."""
    _, build_client, _ = load_clients(namespace)
    options = LogOptions(no_wait=not follow, follow=follow, timestamps=timestamps)
    try:
        stream = build_client.logs(name, options)
        with contextlib.closing(stream):
            shutil.copyfileobj(stream, sys.stdout.buffer)
            sys.stdout.buffer.flush()
    except (ClusterAPIError, requests.RequestException) as exc:
        fail("Unable to retrieve logs:", exc)
