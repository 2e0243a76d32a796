"""Build descriptor construction — pure, no network I/O.

Maps (source tag, target tag, job context) to the immutable ``Build``
document submitted to the cluster.
"""

from __future__ import annotations

import logging

from buildwatch.models.build import (
    Build,
    BuildOutput,
    BuildSource,
    BuildSpec,
    BuildStrategy,
    DockerBuildStrategy,
    EnvVar,
    ObjectMeta,
    ObjectReference,
)
from buildwatch.models.job import JobSpec
from buildwatch.models.metadata import MetadataKeys

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_STREAM = "pipeline"
SKIP_LAYERS = "SkipLayers"


def source_dockerfile(
    from_tag: str,
    job_spec: JobSpec,
    image_stream: str = DEFAULT_IMAGE_STREAM,
) -> str:
    """Dockerfile that clones the refs under test on top of ``from_tag``."""
    refs = job_spec.refs
    return (
        f"FROM {image_stream}:{from_tag}\n"
        "ENV GIT_COMMITTER_NAME=developer GIT_COMMITTER_EMAIL=developer@redhat.com\n"
        f"ENV REPO_OWNER={refs.org} REPO_NAME={refs.repo} PULL_REFS={refs.to_pull_refs()}\n"
        "RUN umask 0002 && /usr/bin/clonerefs --src-root=/go --log=-\n"
        f"WORKDIR /go/src/github.com/{refs.org}/{refs.repo}/\n"
    )


def dockerfile_source(dockerfile: str) -> BuildSource:
    return BuildSource(type="Dockerfile", dockerfile=dockerfile)


def build_from_source(
    job_spec: JobSpec,
    from_tag: str,
    to_tag: str,
    source: BuildSource,
    *,
    keys: MetadataKeys | None = None,
    image_stream: str = DEFAULT_IMAGE_STREAM,
    service_account: str | None = "builder",
) -> Build:
    """Describe a Docker build of ``image_stream:to_tag`` from ``from_tag``.

    The build is named after the target tag, labelled with the owning job
    and build id, and annotated with the raw job context.  The job's owner
    reference, when present, is attached for garbage collection.
    """
    keys = keys or MetadataKeys()
    namespace = job_spec.namespace
    raw_spec = job_spec.serialized()
    logger.info("Creating build for %s/%s:%s", namespace, image_stream, to_tag)

    metadata = ObjectMeta(
        name=to_tag,
        namespace=namespace,
        labels={
            keys.persists_label: "false",
            keys.job_label: job_spec.job,
            keys.build_id_label: job_spec.build_id,
            keys.creates_label: to_tag,
            keys.created_by_label: "true",
        },
        annotations={keys.job_spec_annotation: raw_spec},
        owner_references=[job_spec.owner] if job_spec.owner is not None else [],
    )
    strategy = BuildStrategy(
        type="Docker",
        docker_strategy=DockerBuildStrategy(
            from_=ObjectReference(
                kind="ImageStreamTag",
                namespace=namespace,
                name=f"{image_stream}:{from_tag}",
            ),
            force_pull=True,
            no_cache=True,
            env=[EnvVar(name="JOB_SPEC", value=raw_spec)],
            image_optimization_policy=SKIP_LAYERS,
        ),
    )
    output = BuildOutput(
        to=ObjectReference(
            kind="ImageStreamTag",
            namespace=namespace,
            name=f"{image_stream}:{to_tag}",
        )
    )
    return Build(
        metadata=metadata,
        spec=BuildSpec(
            service_account=service_account,
            source=source,
            strategy=strategy,
            output=output,
        ),
    )
