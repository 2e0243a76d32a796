"""buildwatch data models — all Pydantic v2, all frozen (immutable)."""

from buildwatch.models.build import (
    FAILED_PHASES,
    SUCCEEDED_PHASES,
    Build,
    BuildOutput,
    BuildPhase,
    BuildSource,
    BuildSpec,
    BuildStatus,
    BuildStrategy,
    DockerBuildStrategy,
    EnvVar,
    EventType,
    LogOptions,
    ObjectMeta,
    ObjectReference,
    OwnerReference,
    WatchEvent,
)
from buildwatch.models.job import JobSpec, Pull, Refs
from buildwatch.models.metadata import MetadataKeys
from buildwatch.models.steps import (
    LinkKind,
    SourceStepConfiguration,
    StepLink,
    internal_image_link,
)

__all__ = [
    # build documents
    "Build",
    "BuildOutput",
    "BuildPhase",
    "BuildSource",
    "BuildSpec",
    "BuildStatus",
    "BuildStrategy",
    "DockerBuildStrategy",
    "EnvVar",
    "ObjectMeta",
    "ObjectReference",
    "OwnerReference",
    "SUCCEEDED_PHASES",
    "FAILED_PHASES",
    # streams
    "EventType",
    "LogOptions",
    "WatchEvent",
    # job context
    "JobSpec",
    "Pull",
    "Refs",
    "MetadataKeys",
    # steps
    "LinkKind",
    "SourceStepConfiguration",
    "StepLink",
    "internal_image_link",
]
