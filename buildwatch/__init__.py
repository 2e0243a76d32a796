"""buildwatch: submit remote image builds and follow them to completion.

One pipeline step at a time:
  - Describe a Docker build of a pipeline image stream tag
  - Submit it idempotently ("already exists" is success)
  - Follow it with a snapshot + watch loop that reconnects on disconnect
  - Print the build's logs when it fails
"""

__version__ = "0.1.0"
__description__ = "Submit remote image builds and wait for them to finish"

from buildwatch.core.monitor import BuildMonitor
from buildwatch.steps.source import SourceStep
from buildwatch.cli.app import app as cli

__all__ = ["BuildMonitor", "SourceStep", "cli", "__version__"]
