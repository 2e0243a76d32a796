"""Collaborator contracts for the build service and the image registry.

The core only depends on these protocols.  ``buildwatch.bridge.openshift``
implements them over the OpenShift REST API; tests use in-memory fakes.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Protocol, runtime_checkable

from buildwatch.models.build import Build, LogOptions, WatchEvent


class ClusterAPIError(RuntimeError):
    """Raised when the cluster rejects a request.

    Attributes
    ----------
    status:
        HTTP status code of the response (0 when unknown).
    reason:
        Machine-readable reason from the ``Status`` document, e.g.
        ``"AlreadyExists"``.
    """

    def __init__(self, message: str, *, status: int = 0, reason: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.reason = reason


class AlreadyExistsError(ClusterAPIError):
    """The object being created already exists."""


class NotFoundError(ClusterAPIError):
    """The requested object does not exist."""


@runtime_checkable
class Watch(Protocol):
    """A live, ordered event stream.

    Iteration ends when the server closes the stream.  ``stop()`` closes it
    from the client side and unblocks a pending read.
    """

    def __iter__(self) -> Iterator[WatchEvent]: ...

    def stop(self) -> None: ...

    def __enter__(self) -> Watch: ...

    def __exit__(self, *exc: Any) -> None: ...


@runtime_checkable
class LogStream(Protocol):
    """A readable byte stream that must be closed."""

    def read(self, size: int = -1) -> bytes: ...

    def close(self) -> None: ...


class BuildClient(Protocol):
    """Namespace-scoped access to builds."""

    def create(self, build: Build) -> Build: ...

    def list(self, name: str) -> list[Build]: ...

    def watch(self, name: str) -> Watch: ...

    def logs(self, name: str, options: LogOptions) -> LogStream: ...


class ImageStreamTagClient(Protocol):
    """Namespace-scoped point lookups of image stream tags."""

    def get(self, name: str) -> dict[str, Any]: ...
