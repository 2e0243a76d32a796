"""Build documents — the remote job as the cluster build service sees it.

The models mirror the ``build.openshift.io/v1`` wire shape: fields are
snake_case in Python and camelCase on the wire.  Dump with
``model_dump(mode="json", by_alias=True, exclude_none=True)``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_WIRE_CONFIG = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
    extra="ignore",
)


class BuildPhase(str, Enum):
    """Lifecycle phase reported by the build service."""

    NEW = "New"
    PENDING = "Pending"
    RUNNING = "Running"
    COMPLETE = "Complete"
    FAILED = "Failed"
    ERROR = "Error"
    CANCELLED = "Cancelled"


# Phases from which a build never transitions again.
SUCCEEDED_PHASES: frozenset[BuildPhase] = frozenset({BuildPhase.COMPLETE})
FAILED_PHASES: frozenset[BuildPhase] = frozenset(
    {BuildPhase.FAILED, BuildPhase.CANCELLED, BuildPhase.ERROR}
)


class ObjectReference(BaseModel):
    """Reference to another object in the cluster (e.g. an image stream tag)."""

    model_config = _WIRE_CONFIG

    kind: str
    name: str
    namespace: str | None = None


class OwnerReference(BaseModel):
    """Garbage-collection link from a build to the object that owns it."""

    model_config = _WIRE_CONFIG

    api_version: str
    kind: str
    name: str
    uid: str
    controller: bool | None = None
    block_owner_deletion: bool | None = None


class ObjectMeta(BaseModel):
    model_config = _WIRE_CONFIG

    name: str
    namespace: str | None = None
    labels: dict[str, str] = {}
    annotations: dict[str, str] = {}
    owner_references: list[OwnerReference] = []


class EnvVar(BaseModel):
    model_config = _WIRE_CONFIG

    name: str
    value: str = ""


class BuildSource(BaseModel):
    """Where the build's inputs come from.  Only inline Dockerfiles are used."""

    model_config = _WIRE_CONFIG

    type: str = "Dockerfile"
    dockerfile: str | None = None


class DockerBuildStrategy(BaseModel):
    model_config = _WIRE_CONFIG

    from_: ObjectReference | None = Field(default=None, alias="from")
    force_pull: bool = False
    no_cache: bool = False
    env: list[EnvVar] = []
    image_optimization_policy: str | None = None


class BuildStrategy(BaseModel):
    model_config = _WIRE_CONFIG

    type: str = "Docker"
    docker_strategy: DockerBuildStrategy | None = None


class BuildOutput(BaseModel):
    model_config = _WIRE_CONFIG

    to: ObjectReference | None = None


class BuildSpec(BaseModel):
    model_config = _WIRE_CONFIG

    service_account: str | None = None
    source: BuildSource = BuildSource()
    strategy: BuildStrategy = BuildStrategy()
    output: BuildOutput = BuildOutput()


class BuildStatus(BaseModel):
    """Status block read back from the service.

    Unknown phases are kept as plain strings so that a newer server does
    not break decoding; they classify as still in progress.
    """

    model_config = _WIRE_CONFIG

    phase: BuildPhase | str = BuildPhase.NEW
    message: str = ""

    @field_validator("phase", mode="before")
    @classmethod
    def _coerce_phase(cls, value: Any) -> Any:
        if isinstance(value, str) and not isinstance(value, BuildPhase):
            try:
                return BuildPhase(value)
            except ValueError:
                return value
        return value


class Build(BaseModel):
    """A remote image build.  Immutable once constructed."""

    model_config = _WIRE_CONFIG

    api_version: str = "build.openshift.io/v1"
    kind: str = "Build"
    metadata: ObjectMeta
    spec: BuildSpec = BuildSpec()
    status: BuildStatus = BuildStatus()

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str:
        return self.metadata.namespace or ""

    @property
    def phase(self) -> BuildPhase | str:
        return self.status.phase

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the JSON document accepted by the build service."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class EventType(str, Enum):
    """Watch event kinds delivered by the build service."""

    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"
    ERROR = "ERROR"
    BOOKMARK = "BOOKMARK"


class WatchEvent(BaseModel):
    """One entry on a watch stream.

    ``object`` is a :class:`Build` when the payload decoded to one, and the
    raw payload otherwise (``ERROR`` events carry a ``Status`` document).
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    type: EventType | str
    object: Any = None


class LogOptions(BaseModel):
    """Query options for the build log endpoint."""

    model_config = ConfigDict(frozen=True)

    no_wait: bool = False
    timestamps: bool = False
    follow: bool = False
