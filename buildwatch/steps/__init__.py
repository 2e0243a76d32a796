"""Pipeline steps exposed to the orchestrator.

Usage::

    from buildwatch.steps import SourceStep

    step = SourceStep(config, build_client, ist_client, job_spec)
    if not step.done():
        step.run(dry=False)
"""

from __future__ import annotations

from buildwatch.steps.base import BaseStep, StepExecutionError
from buildwatch.steps.source import SourceStep

__all__ = ["BaseStep", "SourceStep", "StepExecutionError"]
