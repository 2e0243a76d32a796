"""Runtime configuration — env-driven.

Centralized config using pydantic-settings.  Reads from a .env file and
BUILDWATCH_* environment variables; nested metadata keys use ``__``
(e.g. ``BUILDWATCH_METADATA__ANNOTATION_PREFIX``).
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from buildwatch.models.metadata import MetadataKeys


class BuildwatchConfig(BaseSettings):
    """Cluster connection and build settings with environment overrides.

    Examples
    --------
    Override via environment::

        export BUILDWATCH_API_SERVER=https://api.build01.example.com:6443
        export BUILDWATCH_NAMESPACE=ci-op-1234
        export BUILDWATCH_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="BUILDWATCH_",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    # Cluster connection
    api_server: str = "https://kubernetes.default.svc"
    token: str = ""
    token_file: Path | None = None
    namespace: str = ""
    verify_tls: bool = True
    ca_file: Path | None = None
    request_timeout_seconds: float = 30.0

    # Watch behaviour. The server closes a watch after this many seconds;
    # the monitor reconnects transparently.
    watch_timeout_seconds: int = 300
    # None: reconnect forever.
    max_reconnects: int | None = None

    # Build settings
    pipeline_image_stream: str = "pipeline"
    service_account: str = "builder"
    metadata: MetadataKeys = MetadataKeys()

    # Observability
    log_level: str = "INFO"

    def bearer_token(self) -> str:
        """The token to authenticate with, read from ``token_file`` if unset."""
        if self.token:
            return self.token
        if self.token_file is not None and self.token_file.exists():
            return self.token_file.read_text(encoding="utf-8").strip()
        return ""

