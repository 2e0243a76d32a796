"""Abstract base step with an enforced run wrapper.

Every concrete step inherits from BaseStep and implements ``execute()``,
``done()``, ``requires()`` and ``creates()``.  The ``run()`` wrapper is
**not overridable** — it logs the step boundary and wraps failures in
``StepExecutionError`` with the original error chained as ``__cause__``.
"""

from __future__ import annotations

import abc
import logging
from typing import final

from buildwatch.models.steps import StepLink

logger = logging.getLogger(__name__)


class StepExecutionError(RuntimeError):
    """Raised when a step's execute() method fails."""

    def __init__(self, step_name: str, cause: BaseException) -> None:
        self.step_name = step_name
        super().__init__(f"Step {step_name} failed: {cause}")


class BaseStep(abc.ABC):
    """Abstract base for pipeline steps.

    Subclasses **must** implement:
        * ``name`` — identifier shown in logs.
        * ``execute(dry)`` — the step's core logic.
        * ``done()`` — whether the step's output already exists.
        * ``requires()`` / ``creates()`` — dependency tokens.

    Subclasses **must not** override ``run()``.
    """

    # ------------------------------------------------------------------
    # Abstract interface: subclasses implement these
    # ------------------------------------------------------------------

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Step identifier (e.g. ``'src'``)."""
        ...

    @abc.abstractmethod
    def execute(self, dry: bool) -> None:
        """Run the step.  In dry mode nothing may be created remotely."""
        ...

    @abc.abstractmethod
    def done(self) -> bool:
        """Return True when the step's output already exists."""
        ...

    @abc.abstractmethod
    def requires(self) -> list[StepLink]:
        ...

    @abc.abstractmethod
    def creates(self) -> list[StepLink]:
        ...

    # ------------------------------------------------------------------
    # Lifecycle: NOT overridable
    # ------------------------------------------------------------------

    @final
    def run(self, dry: bool = False) -> None:
        """Execute the step.  **Do not override.**"""
        logger.info("Executing step %s%s", self.name, " (dry run)" if dry else "")
        try:
            self.execute(dry)
        except Exception as exc:
            logger.error("Step %s failed: %s", self.name, exc)
            raise StepExecutionError(self.name, exc) from exc
        logger.info("Step %s succeeded", self.name)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"
