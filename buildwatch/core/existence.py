"""Existence check for pipeline image stream tags."""

from __future__ import annotations

import logging

from buildwatch.core.client import ImageStreamTagClient, NotFoundError

logger = logging.getLogger(__name__)


def image_stream_tag_exists(
    client: ImageStreamTagClient,
    reference: str,
    image_stream: str = "pipeline",
) -> bool:
    """Return whether ``image_stream:reference`` exists.

    Not-found maps to ``False``; any other lookup error propagates.
    """
    name = f"{image_stream}:{reference}"
    logger.info("Checking for existence of %s", name)
    try:
        client.get(name)
    except NotFoundError:
        return False
    return True
