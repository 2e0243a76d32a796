"""``buildwatch source`` — build the source image for a job.

Clones the refs described by the job spec on top of the ``--from`` tag and
produces the ``--to`` tag.  Skips the build when the target tag already
exists, unless ``--force``.  With ``--dry-run`` the build document is
printed as JSON and nothing is submitted.
"""

from __future__ import annotations

import requests
import typer

from buildwatch.cli.commands._common import console, fail, load_clients
from buildwatch.core.client import ClusterAPIError
from buildwatch.core.monitor import BuildMonitor
from buildwatch.models.job import JobSpec
from buildwatch.models.steps import SourceStepConfiguration
from buildwatch.steps.base import StepExecutionError
from buildwatch.steps.source import SourceStep


def source_cmd(
    from_tag: str = typer.Option(
        ...,
        "--from",
        help="Pipeline image stream tag to build on top of.",
    ),
    to_tag: str = typer.Option(
        ...,
        "--to",
        help="Pipeline image stream tag to produce.",
    ),
    job_spec: str = typer.Option(
        "",
        "--job-spec",
        envvar="JOB_SPEC",
        help="Serialized job context (JSON). Defaults to $JOB_SPEC.",
    ),
    namespace: str = typer.Option(
        "",
        "--namespace",
        "-n",
        help="Namespace to build in. Defaults to $BUILDWATCH_NAMESPACE.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Print the build as JSON instead of submitting it.",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Build even if the target tag already exists.",
    ),
) -> None:
    """Build the source image and wait for it to finish."""
    if not job_spec:
        fail("No job spec:", "pass --job-spec or set JOB_SPEC")

    cfg, build_client, ist_client = load_clients(
        namespace, require_namespace=not dry_run
    )
    try:
        spec = JobSpec.from_json(job_spec, namespace=namespace or cfg.namespace)
    except ValueError as exc:
        fail("Invalid job spec:", exc)

    step = SourceStep(
        SourceStepConfiguration(from_tag=from_tag, to_tag=to_tag),
        build_client,
        ist_client,
        spec,
        keys=cfg.metadata,
        image_stream=cfg.pipeline_image_stream,
        service_account=cfg.service_account,
        monitor=BuildMonitor(build_client, max_reconnects=cfg.max_reconnects),
    )

    if not dry_run and not force:
        try:
            exists = step.done()
        except (ClusterAPIError, requests.RequestException) as exc:
            fail("Existence check failed:", exc)
        if exists:
            console.print(
                f"[dim]{cfg.pipeline_image_stream}:{to_tag} already exists, "
                f"skipping build.[/dim]"
            )
            return

    try:
        step.run(dry=dry_run)
    except StepExecutionError as exc:
        fail("Build failed:", exc.__cause__ or exc)

    if not dry_run:
        console.print(
            f"[bold green]Built[/bold green] {cfg.pipeline_image_stream}:{to_tag}"
        )
