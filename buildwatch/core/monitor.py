"""Build lifecycle monitor — block until a remote build is terminal.

Each observation cycle is:

    snapshot (list by name) -> classify -> watch -> classify each event

A watch that ends without a terminal event is a routine disconnect
(server-side timeout, network blip): the watch is released and the cycle
restarts from a fresh snapshot.  The snapshot always precedes the next
watch, so a transition that happened while no watch was open is still
observed.

Exactly one terminal classification is made per ``wait_for_build`` call.
"""

from __future__ import annotations

import contextlib
import enum
import logging
import shutil
import sys
import threading
from typing import BinaryIO

from buildwatch.core.client import BuildClient, Watch
from buildwatch.models.build import (
    FAILED_PHASES,
    SUCCEEDED_PHASES,
    Build,
    BuildPhase,
    LogOptions,
)

logger = logging.getLogger(__name__)


class BuildLookupError(RuntimeError):
    """Raised when a snapshot does not return exactly one build for a name."""


class BuildFailedError(RuntimeError):
    """Raised when a build reaches a failed terminal phase."""

    def __init__(self, namespace: str, name: str, phase: BuildPhase | str) -> None:
        self.namespace = namespace
        self.name = name
        self.phase = phase
        phase_value = phase.value if isinstance(phase, BuildPhase) else phase
        super().__init__(
            f"the build {namespace}/{name} failed with status {phase_value!r}"
        )


class ReconnectLimitError(RuntimeError):
    """Raised when the watch dropped more often than ``max_reconnects``."""


class BuildWaitCancelledError(RuntimeError):
    """Raised when ``BuildMonitor.cancel()`` interrupted a wait."""


class Outcome(str, enum.Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    IN_PROGRESS = "in_progress"


def classify(build: Build) -> Outcome:
    """Classify a build's phase as succeeded, failed or still in progress."""
    phase = build.phase
    if phase in SUCCEEDED_PHASES:
        return Outcome.SUCCEEDED
    if phase in FAILED_PHASES:
        return Outcome.FAILED
    return Outcome.IN_PROGRESS


def print_build_logs(
    client: BuildClient,
    name: str,
    output: BinaryIO | None = None,
) -> None:
    """Copy a finished build's logs to *output* (default: stdout).

    Best effort: failures to open, copy or close the stream are logged and
    swallowed, the caller already knows the build failed.
    """
    try:
        if output is None:
            output = sys.stdout.buffer
        stream = client.logs(name, LogOptions(no_wait=True, timestamps=True))
    except Exception as exc:
        logger.error("Unable to retrieve logs from failed build %s: %s", name, exc)
        return
    try:
        with contextlib.closing(stream):
            shutil.copyfileobj(stream, output)
            output.flush()
    except Exception as exc:
        logger.error("Unable to copy log output from failed build %s: %s", name, exc)


class BuildMonitor:
    """Waits for one build at a time to reach a terminal phase.

    Parameters
    ----------
    client:
        Build client scoped to the build's namespace.
    output:
        Binary stream that receives the logs of failed builds.  Defaults to
        the process's standard output.
    max_reconnects:
        Ceiling on watch reconnects per wait.  ``None`` reconnects forever;
        an external deadline should then call :meth:`cancel`.
    """

    def __init__(
        self,
        client: BuildClient,
        *,
        output: BinaryIO | None = None,
        max_reconnects: int | None = None,
    ) -> None:
        self._client = client
        self._output = output
        self._max_reconnects = max_reconnects
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._watch: Watch | None = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def wait_for_build(self, name: str) -> None:
        """Block until build *name* completes.

        Returns on ``Complete``.  Raises ``BuildFailedError`` on
        ``Failed``/``Cancelled``/``Error`` (after printing the logs),
        ``BuildLookupError`` when the name does not resolve to exactly one
        build, and lets cluster errors from the snapshot or watch open
        propagate.
        """
        logger.info("Waiting for build %s to finish", name)
        reconnects = 0
        while True:
            if self._cancelled.is_set():
                raise BuildWaitCancelledError(f"wait for build {name} was cancelled")
            if self._observe_once(name):
                return
            if self._cancelled.is_set():
                raise BuildWaitCancelledError(f"wait for build {name} was cancelled")
            reconnects += 1
            if self._max_reconnects is not None and reconnects > self._max_reconnects:
                raise ReconnectLimitError(
                    f"watch for build {name} closed {reconnects} times "
                    f"without reaching a terminal phase"
                )
            logger.debug("Watch for build %s closed, reconnecting (%d)", name, reconnects)

    def cancel(self) -> None:
        """Interrupt a running ``wait_for_build`` from another thread.

        Stops the open watch, if any, so the blocked read returns.
        """
        self._cancelled.set()
        with self._lock:
            watch = self._watch
        if watch is not None:
            watch.stop()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    # ------------------------------------------------------------------
    # Internal: one snapshot + watch cycle
    # ------------------------------------------------------------------

    def _observe_once(self, name: str) -> bool:
        """Run one cycle.  True when the build completed, False to retry."""
        build = self._snapshot(name)
        if self._settle(build):
            return True

        with self._open_watch(name) as watch:
            for event in watch:
                if not isinstance(event.object, Build):
                    continue
                if self._settle(event.object):
                    return True
        return False

    def _snapshot(self, name: str) -> Build:
        builds = self._client.list(name)
        if len(builds) != 1:
            raise BuildLookupError(
                f"could not find build {name} (found {len(builds)} matches)"
            )
        return builds[0]

    def _settle(self, build: Build) -> bool:
        """True on success, raises on failure, False while in progress."""
        outcome = classify(build)
        if outcome is Outcome.SUCCEEDED:
            logger.info("Build %s/%s succeeded", build.namespace, build.name)
            return True
        if outcome is Outcome.FAILED:
            logger.warning(
                "Build %s/%s failed, printing logs:", build.namespace, build.name
            )
            print_build_logs(self._client, build.name, self._output)
            raise BuildFailedError(build.namespace, build.name, build.phase)
        return False

    @contextlib.contextmanager
    def _open_watch(self, name: str):
        watch = self._client.watch(name)
        with self._lock:
            self._watch = watch
        if self._cancelled.is_set():
            watch.stop()
        try:
            with watch:
                yield watch
        finally:
            with self._lock:
                self._watch = None
