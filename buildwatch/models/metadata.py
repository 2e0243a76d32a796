"""Label and annotation keys stamped onto every build."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class MetadataKeys(BaseModel):
    """Names of the ownership and lineage keys applied to builds.

    Passed into the descriptor builder so that different target clusters
    can use their own key scheme.
    """

    model_config = ConfigDict(frozen=True)

    annotation_prefix: str = "ci.openshift.io"
    persists_label: str = "persists-between-builds"
    job_label: str = "job"
    build_id_label: str = "build-id"
    creates_label: str = "creates"
    created_by_label: str = "created-by-ci"
    job_spec_annotation_name: str = "job-spec"

    @property
    def job_spec_annotation(self) -> str:
        return f"{self.annotation_prefix}/{self.job_spec_annotation_name}"
