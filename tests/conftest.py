"""Shared test fixtures and in-memory cluster fakes for buildwatch."""

from __future__ import annotations

import io
import json
from collections.abc import Callable, Iterator
from typing import Any

import pytest

from buildwatch.core.client import AlreadyExistsError, NotFoundError
from buildwatch.models.build import (
    Build,
    BuildPhase,
    BuildStatus,
    EventType,
    LogOptions,
    ObjectMeta,
    WatchEvent,
)
from buildwatch.models.job import JobSpec

JOB_SPEC_JSON = json.dumps(
    {
        "type": "presubmit",
        "job": "pull-ci-o-r-main-unit",
        "buildid": "1001",
        "prowjobid": "abc-123",
        "refs": {
            "org": "o",
            "repo": "r",
            "base_ref": "main",
            "base_sha": "deadbeef",
            "pulls": [{"number": 42, "author": "someone", "sha": "cafebabe"}],
        },
    }
)


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeWatch:
    """Replays a fixed list of events, then ends like a closed stream."""

    def __init__(self, events: list[WatchEvent]) -> None:
        self._events = list(events)
        self.stopped = False
        self.delivered = 0

    def __iter__(self) -> Iterator[WatchEvent]:
        for event in self._events:
            if self.stopped:
                return
            self.delivered += 1
            yield event

    def stop(self) -> None:
        self.stopped = True

    def __enter__(self) -> FakeWatch:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.stop()


class BrokenLogStream:
    """A log stream that fails mid-copy."""

    def __init__(self) -> None:
        self.closed = False

    def read(self, size: int = -1) -> bytes:
        raise OSError("connection reset by peer")

    def close(self) -> None:
        self.closed = True


class UnclosableLogStream:
    """A log stream whose reads succeed but whose close fails."""

    def __init__(self, payload: bytes) -> None:
        self._buf = io.BytesIO(payload)
        self.close_calls = 0

    def read(self, size: int = -1) -> bytes:
        return self._buf.read(size)

    def close(self) -> None:
        self.close_calls += 1
        raise OSError("connection reset on close")


class FakeBuildClient:
    """In-memory ``BuildClient``.

    ``snapshots`` and ``watches`` script the results of successive ``list``
    and ``watch`` calls.  Once ``snapshots`` is exhausted, ``list`` reports
    the builds created through this client.
    """

    def __init__(self) -> None:
        self.builds: dict[str, Build] = {}
        self.snapshots: list[list[Build]] = []
        self.watches: list[list[WatchEvent]] = []
        self.log_payload = b""
        self.log_stream: Any = None
        self.log_error: Exception | None = None
        self.create_error: Exception | None = None
        self.list_error: Exception | None = None
        self.watch_error: Exception | None = None

        self.create_calls: list[Build] = []
        self.list_calls: list[str] = []
        self.watch_calls: list[str] = []
        self.log_calls: list[tuple[str, LogOptions]] = []
        self.opened_watches: list[FakeWatch] = []
        self.opened_logs: list[Any] = []

    def create(self, build: Build) -> Build:
        self.create_calls.append(build)
        if self.create_error is not None:
            raise self.create_error
        if build.name in self.builds:
            raise AlreadyExistsError(
                f'builds "{build.name}" already exists',
                status=409,
                reason="AlreadyExists",
            )
        self.builds[build.name] = build
        return build

    def list(self, name: str) -> list[Build]:
        self.list_calls.append(name)
        if self.list_error is not None:
            raise self.list_error
        if self.snapshots:
            return self.snapshots.pop(0)
        return [b for b in self.builds.values() if b.name == name]

    def watch(self, name: str) -> FakeWatch:
        self.watch_calls.append(name)
        if self.watch_error is not None:
            raise self.watch_error
        events = self.watches.pop(0) if self.watches else []
        watch = FakeWatch(events)
        self.opened_watches.append(watch)
        return watch

    def logs(self, name: str, options: LogOptions) -> Any:
        self.log_calls.append((name, options))
        if self.log_error is not None:
            raise self.log_error
        stream = self.log_stream if self.log_stream is not None else io.BytesIO(self.log_payload)
        self.opened_logs.append(stream)
        return stream


class FakeImageStreamTagClient:
    """In-memory ``ImageStreamTagClient``."""

    def __init__(self, tags: set[str] | None = None) -> None:
        self.tags = set(tags or ())
        self.error: Exception | None = None
        self.get_calls: list[str] = []

    def get(self, name: str) -> dict[str, Any]:
        self.get_calls.append(name)
        if self.error is not None:
            raise self.error
        if name not in self.tags:
            raise NotFoundError(f'imagestreamtags "{name}" not found', status=404)
        return {"kind": "ImageStreamTag", "metadata": {"name": name}}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_build_client() -> FakeBuildClient:
    return FakeBuildClient()


@pytest.fixture
def fake_ist_client() -> FakeImageStreamTagClient:
    return FakeImageStreamTagClient()


@pytest.fixture
def log_output() -> io.BytesIO:
    """Binary sink standing in for the operator's stdout."""
    return io.BytesIO()


@pytest.fixture
def job_spec_json() -> str:
    return JOB_SPEC_JSON


@pytest.fixture
def job_spec() -> JobSpec:
    """A presubmit job context for org ``o``, repo ``r``, ref ``main``."""
    return JobSpec.from_json(JOB_SPEC_JSON, namespace="ci-op-test")


@pytest.fixture
def make_build() -> Callable[..., Build]:
    """Factory fixture: a build named *name* in *phase*."""

    def _factory(
        name: str = "src",
        phase: BuildPhase | str = BuildPhase.NEW,
        namespace: str = "ci-op-test",
    ) -> Build:
        return Build(
            metadata=ObjectMeta(name=name, namespace=namespace),
            status=BuildStatus(phase=phase),
        )

    return _factory


@pytest.fixture
def make_event(make_build: Callable[..., Build]) -> Callable[..., WatchEvent]:
    """Factory fixture: a watch event carrying a build in *phase*."""

    def _factory(
        phase: BuildPhase | str,
        name: str = "src",
        event_type: EventType = EventType.MODIFIED,
    ) -> WatchEvent:
        return WatchEvent(type=event_type, object=make_build(name, phase))

    return _factory


@pytest.fixture
def broken_log_stream() -> BrokenLogStream:
    return BrokenLogStream()


@pytest.fixture
def unclosable_log_stream() -> UnclosableLogStream:
    return UnclosableLogStream(b"step 3/5 failed\n")
