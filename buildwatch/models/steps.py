"""Step configuration and dependency tokens."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class LinkKind(str, Enum):
    INTERNAL_IMAGE = "internal_image"


class StepLink(BaseModel):
    """A dependency token: something a step requires or creates.

    Links compare by value: a requirement is met by an equal link.
    """

    model_config = ConfigDict(frozen=True)

    kind: LinkKind
    name: str


def internal_image_link(tag: str) -> StepLink:
    """Link for a tag on the pipeline's own image stream."""
    return StepLink(kind=LinkKind.INTERNAL_IMAGE, name=tag)


class SourceStepConfiguration(BaseModel):
    """Build the ``to`` tag by cloning the refs under test onto ``from``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_tag: str = Field(alias="from")
    to_tag: str = Field(alias="to")
