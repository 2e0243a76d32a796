"""Job context — the CI job on whose behalf builds are created.

The context arrives as a JSON blob (usually the ``JOB_SPEC`` environment
variable).  The blob is kept verbatim for lineage: it is stamped onto
every build as an annotation and an environment variable.
"""

from __future__ import annotations

import json

from pydantic import BaseModel, ConfigDict, Field

from buildwatch.models.build import OwnerReference


class Pull(BaseModel):
    """A pull request merged on top of the base ref."""

    model_config = ConfigDict(frozen=True)

    number: int
    author: str = ""
    sha: str = ""


class Refs(BaseModel):
    """Organization, repository and refs under test."""

    model_config = ConfigDict(frozen=True)

    org: str
    repo: str
    base_ref: str = ""
    base_sha: str = ""
    pulls: list[Pull] = []

    def to_pull_refs(self) -> str:
        """Render the ``PULL_REFS`` form: ``base_ref:base_sha,number:sha,...``."""
        parts = [f"{self.base_ref}:{self.base_sha}"]
        parts.extend(f"{pull.number}:{pull.sha}" for pull in self.pulls)
        return ",".join(parts)


class JobSpec(BaseModel):
    """Read-only job context.

    ``namespace``, ``raw_spec`` and ``owner`` are local bookkeeping and are
    never part of the serialized blob.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: str = ""
    job: str
    build_id: str = Field(default="", alias="buildid")
    prow_job_id: str = Field(default="", alias="prowjobid")
    refs: Refs

    namespace: str = Field(default="", exclude=True)
    raw_spec: str = Field(default="", exclude=True)
    owner: OwnerReference | None = Field(default=None, exclude=True)

    @classmethod
    def from_json(
        cls,
        raw: str,
        *,
        namespace: str = "",
        owner: OwnerReference | None = None,
    ) -> JobSpec:
        """Parse a serialized job context, keeping *raw* verbatim."""
        data = json.loads(raw)
        return cls.model_validate(
            {**data, "namespace": namespace, "raw_spec": raw, "owner": owner}
        )

    def serialized(self) -> str:
        """The lineage blob: the original JSON when known, else a fresh dump."""
        if self.raw_spec:
            return self.raw_spec
        return self.model_dump_json(by_alias=True)
