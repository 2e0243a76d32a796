"""OpenShift REST bridge — concrete build and image stream tag clients.

Bridge boundary
---------------
The core depends only on the protocols in ``buildwatch.core.client``.
This module implements them with ``requests`` against the cluster API:

* builds:            ``/apis/build.openshift.io/v1/namespaces/{ns}/builds``
* build logs:        ``.../builds/{name}/log``
* image stream tags: ``/apis/image.openshift.io/v1/namespaces/{ns}/imagestreamtags``

Watches are newline-delimited JSON streams.  The server ends a watch after
``timeoutSeconds``; that, or a dropped connection, simply ends iteration.
"""

from __future__ import annotations

import json
import logging
import socket
import threading
from collections.abc import Iterator
from typing import Any

import requests
from pydantic import ValidationError

from buildwatch.config import BuildwatchConfig
from buildwatch.core.client import AlreadyExistsError, ClusterAPIError, NotFoundError
from buildwatch.models.build import Build, LogOptions, WatchEvent

logger = logging.getLogger(__name__)

BUILD_API = "/apis/build.openshift.io/v1"
IMAGE_API = "/apis/image.openshift.io/v1"


def open_session(config: BuildwatchConfig) -> requests.Session:
    """Create an authenticated session for the configured cluster."""
    session = requests.Session()
    token = config.bearer_token()
    if token:
        session.headers["Authorization"] = f"Bearer {token}"
    session.headers["Accept"] = "application/json"
    if config.ca_file is not None:
        session.verify = str(config.ca_file)
    else:
        session.verify = config.verify_tls
    return session


def raise_for_status(response: Any) -> None:
    """Map an error response to the ``ClusterAPIError`` hierarchy."""
    status = response.status_code
    if status < 400:
        return
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    reason = body.get("reason", "") or ""
    message = body.get("message") or response.text or f"HTTP {status}"
    if reason == "AlreadyExists" or (status == 409 and not reason):
        raise AlreadyExistsError(message, status=status, reason=reason or "AlreadyExists")
    if status == 404:
        raise NotFoundError(message, status=status, reason=reason or "NotFound")
    raise ClusterAPIError(message, status=status, reason=reason)


def decode_event(line: bytes | str) -> WatchEvent | None:
    """Decode one watch line.  Returns None for lines that are not JSON."""
    try:
        raw = json.loads(line)
    except ValueError:
        logger.debug("Ignoring undecodable watch line: %r", line)
        return None
    if not isinstance(raw, dict):
        return None
    payload = raw.get("object")
    if isinstance(payload, dict) and payload.get("kind") == "Build":
        try:
            payload = Build.model_validate(payload)
        except ValidationError as exc:
            logger.debug("Ignoring malformed build in watch event: %s", exc)
    return WatchEvent(type=raw.get("type", ""), object=payload)


class _NamespacedClient:
    """Shared URL and request handling for namespace-scoped resources."""

    def __init__(
        self,
        session: requests.Session,
        api_server: str,
        namespace: str,
        *,
        timeout: float = 30.0,
    ) -> None:
        self._session = session
        self._api_server = api_server.rstrip("/")
        self._namespace = namespace
        self._timeout = timeout

    @property
    def namespace(self) -> str:
        return self._namespace

    def _url(self, api: str, resource: str, name: str = "", sub: str = "") -> str:
        url = f"{self._api_server}{api}/namespaces/{self._namespace}/{resource}"
        if name:
            url += f"/{name}"
        if sub:
            url += f"/{sub}"
        return url


def _stream_socket(response: Any) -> socket.socket | None:
    """The socket a streaming response reads from, when it can be reached."""
    raw = getattr(response, "raw", None)
    sock = getattr(getattr(raw, "connection", None), "sock", None)
    if sock is None:
        # http.client hands the socket over to the response object when the
        # server announced it closes the connection after the body.
        fp = getattr(getattr(raw, "_fp", None), "fp", None)
        sock = getattr(getattr(fp, "raw", None), "_sock", None)
    return sock if isinstance(sock, socket.socket) else None


class HttpWatch:
    """Iterates the events of one streaming watch response.

    ``stop()`` may be called from another thread while ``__iter__`` is
    blocked reading.  Closing the response alone would wait for that read
    to release the buffered reader's lock, so the connection socket is shut
    down first to make the pending read return.
    """

    def __init__(self, response: Any) -> None:
        self._response = response
        self._socket = _stream_socket(response)
        self._stopped = threading.Event()
        self._reading = False

    def __iter__(self) -> Iterator[WatchEvent]:
        self._reading = True
        try:
            for line in self._response.iter_lines():
                if self._stopped.is_set():
                    return
                if not line:
                    continue
                event = decode_event(line)
                if event is not None:
                    yield event
        except (requests.ConnectionError, requests.exceptions.ChunkedEncodingError) as exc:
            if not self._stopped.is_set():
                logger.debug("Watch stream dropped: %s", exc)
        except (AttributeError, ValueError, OSError):
            # Reading from a response shut down by stop() on another thread.
            if not self._stopped.is_set():
                raise
        finally:
            self._reading = False

    def stop(self) -> None:
        self._stopped.set()
        # A finished stream may already have returned its connection to
        # the pool, so only a read in progress gets its socket shut down.
        if self._reading and self._socket is not None:
            try:
                self._socket.shutdown(socket.SHUT_RDWR)
            except OSError as exc:
                # Already shut down, or the peer closed first.
                logger.debug("Watch socket shutdown: %s", exc)
        self._response.close()

    def __enter__(self) -> HttpWatch:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.stop()


class HttpLogStream:
    """Byte stream over a streaming log response."""

    def __init__(self, response: Any) -> None:
        self._response = response

    def read(self, size: int = -1) -> bytes:
        amount = None if size is None or size < 0 else size
        return self._response.raw.read(amount, decode_content=True)

    def close(self) -> None:
        self._response.close()


class OpenShiftBuildClient(_NamespacedClient):
    """``BuildClient`` over the OpenShift build API."""

    def __init__(
        self,
        session: requests.Session,
        api_server: str,
        namespace: str,
        *,
        timeout: float = 30.0,
        watch_timeout_seconds: int = 300,
    ) -> None:
        super().__init__(session, api_server, namespace, timeout=timeout)
        self._watch_timeout = watch_timeout_seconds

    def create(self, build: Build) -> Build:
        response = self._session.post(
            self._url(BUILD_API, "builds"),
            json=build.to_wire(),
            timeout=self._timeout,
        )
        raise_for_status(response)
        return Build.model_validate(response.json())

    def list(self, name: str) -> list[Build]:
        response = self._session.get(
            self._url(BUILD_API, "builds"),
            params={"fieldSelector": f"metadata.name={name}"},
            timeout=self._timeout,
        )
        raise_for_status(response)
        items = response.json().get("items") or []
        return [Build.model_validate(item) for item in items]

    def watch(self, name: str) -> HttpWatch:
        response = self._session.get(
            self._url(BUILD_API, "builds"),
            params={
                "fieldSelector": f"metadata.name={name}",
                "watch": "true",
                "timeoutSeconds": str(self._watch_timeout),
            },
            stream=True,
            timeout=(self._timeout, self._watch_timeout + self._timeout),
        )
        try:
            raise_for_status(response)
        except ClusterAPIError:
            response.close()
            raise
        logger.debug("Opened watch for build %s/%s", self._namespace, name)
        return HttpWatch(response)

    def logs(self, name: str, options: LogOptions) -> HttpLogStream:
        params = {}
        if options.no_wait:
            params["nowait"] = "true"
        if options.timestamps:
            params["timestamps"] = "true"
        if options.follow:
            params["follow"] = "true"
        response = self._session.get(
            self._url(BUILD_API, "builds", name, "log"),
            params=params,
            headers={"Accept": "*/*"},
            stream=True,
            timeout=self._timeout,
        )
        try:
            raise_for_status(response)
        except ClusterAPIError:
            response.close()
            raise
        return HttpLogStream(response)


class OpenShiftImageStreamTagClient(_NamespacedClient):
    """``ImageStreamTagClient`` over the OpenShift image API."""

    def get(self, name: str) -> dict[str, Any]:
        response = self._session.get(
            self._url(IMAGE_API, "imagestreamtags", name),
            timeout=self._timeout,
        )
        raise_for_status(response)
        return response.json()


def clients_from_config(
    config: BuildwatchConfig,
    namespace: str | None = None,
    session: requests.Session | None = None,
) -> tuple[OpenShiftBuildClient, OpenShiftImageStreamTagClient]:
    """Build and image stream tag clients for *namespace* (default: config)."""
    session = session or open_session(config)
    ns = namespace or config.namespace
    builds = OpenShiftBuildClient(
        session,
        config.api_server,
        ns,
        timeout=config.request_timeout_seconds,
        watch_timeout_seconds=config.watch_timeout_seconds,
    )
    tags = OpenShiftImageStreamTagClient(
        session,
        config.api_server,
        ns,
        timeout=config.request_timeout_seconds,
    )
    return builds, tags
