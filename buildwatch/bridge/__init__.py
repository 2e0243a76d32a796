"""Bridges to external systems — the OpenShift cluster API."""

from buildwatch.bridge.openshift import (
    HttpLogStream,
    HttpWatch,
    OpenShiftBuildClient,
    OpenShiftImageStreamTagClient,
    clients_from_config,
    open_session,
)

__all__ = [
    "HttpLogStream",
    "HttpWatch",
    "OpenShiftBuildClient",
    "OpenShiftImageStreamTagClient",
    "clients_from_config",
    "open_session",
]
