"""Idempotent build submission."""

from __future__ import annotations

import logging

from buildwatch.core.client import AlreadyExistsError, BuildClient
from buildwatch.models.build import Build

logger = logging.getLogger(__name__)


def submit_build(client: BuildClient, build: Build) -> None:
    """Create *build*, treating "already exists" as success.

    A prior partial run (or another process) may already have created a
    build with the same name; that build is then monitored instead.  Any
    other creation error propagates unchanged.
    """
    try:
        client.create(build)
    except AlreadyExistsError:
        logger.info(
            "Build %s/%s already exists, reusing it", build.namespace, build.name
        )
        return
    logger.info("Created build %s/%s", build.namespace, build.name)
