"""Build submission and lifecycle monitoring."""

from buildwatch.core.client import (
    AlreadyExistsError,
    BuildClient,
    ClusterAPIError,
    ImageStreamTagClient,
    LogStream,
    NotFoundError,
    Watch,
)
from buildwatch.core.descriptor import build_from_source, source_dockerfile
from buildwatch.core.existence import image_stream_tag_exists
from buildwatch.core.monitor import (
    BuildFailedError,
    BuildLookupError,
    BuildMonitor,
    BuildWaitCancelledError,
    ReconnectLimitError,
    print_build_logs,
)
from buildwatch.core.submitter import submit_build

__all__ = [
    "AlreadyExistsError",
    "BuildClient",
    "ClusterAPIError",
    "ImageStreamTagClient",
    "LogStream",
    "NotFoundError",
    "Watch",
    "build_from_source",
    "source_dockerfile",
    "image_stream_tag_exists",
    "BuildFailedError",
    "BuildLookupError",
    "BuildMonitor",
    "BuildWaitCancelledError",
    "ReconnectLimitError",
    "print_build_logs",
    "submit_build",
]
