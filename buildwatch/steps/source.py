"""Source step — build the ``src`` image by cloning the refs under test.

Renders a Dockerfile that runs ``clonerefs`` on top of the ``from`` tag,
submits it as a Docker build producing the ``to`` tag, and waits for the
build to finish.  In dry mode the build document is printed as JSON and
nothing is submitted.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import TextIO

from buildwatch.core.client import BuildClient, ImageStreamTagClient
from buildwatch.core.descriptor import (
    DEFAULT_IMAGE_STREAM,
    build_from_source,
    dockerfile_source,
    source_dockerfile,
)
from buildwatch.core.existence import image_stream_tag_exists
from buildwatch.core.monitor import BuildMonitor
from buildwatch.core.submitter import submit_build
from buildwatch.models.build import Build
from buildwatch.models.job import JobSpec
from buildwatch.models.metadata import MetadataKeys
from buildwatch.models.steps import (
    SourceStepConfiguration,
    StepLink,
    internal_image_link,
)
from buildwatch.steps.base import BaseStep

logger = logging.getLogger(__name__)


class SourceStep(BaseStep):
    """Step building the source image for a job."""

    def __init__(
        self,
        config: SourceStepConfiguration,
        build_client: BuildClient,
        ist_client: ImageStreamTagClient,
        job_spec: JobSpec,
        *,
        keys: MetadataKeys | None = None,
        image_stream: str = DEFAULT_IMAGE_STREAM,
        service_account: str | None = "builder",
        monitor: BuildMonitor | None = None,
        dry_output: TextIO | None = None,
    ) -> None:
        self._config = config
        self._build_client = build_client
        self._ist_client = ist_client
        self._job_spec = job_spec
        self._keys = keys or MetadataKeys()
        self._image_stream = image_stream
        self._service_account = service_account
        self._monitor = monitor or BuildMonitor(build_client)
        self._dry_output = dry_output

    @property
    def name(self) -> str:
        return self._config.to_tag

    @property
    def monitor(self) -> BuildMonitor:
        return self._monitor

    def describe(self) -> Build:
        """The build this step submits."""
        dockerfile = source_dockerfile(
            self._config.from_tag, self._job_spec, self._image_stream
        )
        return build_from_source(
            self._job_spec,
            self._config.from_tag,
            self._config.to_tag,
            dockerfile_source(dockerfile),
            keys=self._keys,
            image_stream=self._image_stream,
            service_account=self._service_account,
        )

    def execute(self, dry: bool) -> None:
        build = self.describe()
        if dry:
            out = self._dry_output or sys.stdout
            out.write(json.dumps(build.to_wire()) + "\n")
            return
        submit_build(self._build_client, build)
        self._monitor.wait_for_build(build.name)

    def done(self) -> bool:
        return image_stream_tag_exists(
            self._ist_client, self._config.to_tag, self._image_stream
        )

    def requires(self) -> list[StepLink]:
        return [internal_image_link(self._config.from_tag)]

    def creates(self) -> list[StepLink]:
        return [internal_image_link(self._config.to_tag)]
