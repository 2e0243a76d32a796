"""``buildwatch wait NAME`` — block until an existing build finishes.

Exits 0 when the build completes and 1 when it fails, cannot be found,
or the optional ``--timeout`` expires.  Logs of failed builds are printed
to standard output.
"""

from __future__ import annotations

import threading

import requests
import typer

from buildwatch.cli.commands._common import console, fail, load_clients
from buildwatch.core.client import ClusterAPIError
from buildwatch.core.monitor import (
    BuildFailedError,
    BuildLookupError,
    BuildMonitor,
    BuildWaitCancelledError,
    ReconnectLimitError,
)


def wait_cmd(
    name: str = typer.Argument(
        ...,
        help="Name of the build to wait for.",
    ),
    namespace: str = typer.Option(
        "",
        "--namespace",
        "-n",
        help="Namespace of the build. Defaults to $BUILDWATCH_NAMESPACE.",
    ),
    timeout: float = typer.Option(
        0.0,
        "--timeout",
        "-t",
        help="Give up after this many seconds (0 waits forever).",
    ),
) -> None:
    """Wait for a build to reach a terminal phase."""
    cfg, build_client, _ = load_clients(namespace)
    monitor = BuildMonitor(build_client, max_reconnects=cfg.max_reconnects)

    timer: threading.Timer | None = None
    if timeout > 0:
        timer = threading.Timer(timeout, monitor.cancel)
        timer.daemon = True
        timer.start()

    try:
        monitor.wait_for_build(name)
    except BuildFailedError as exc:
        fail("Build failed:", exc)
    except BuildWaitCancelledError:
        fail("Timed out", f"waiting for build {name} after {timeout:g}s")
    except (BuildLookupError, ReconnectLimitError) as exc:
        fail("Cannot wait:", exc)
    except (ClusterAPIError, requests.RequestException) as exc:
        fail("Cluster error:", exc)
    finally:
        if timer is not None:
            timer.cancel()

    console.print(f"[bold green]Build {name} completed[/bold green]")
