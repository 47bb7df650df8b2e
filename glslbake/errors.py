"""
The exceptions raised while building a shader variant.

Each of these is fatal for the one request being built, and is turned
into a ``BuildFailure`` record by the scheduler. None of them abort a run.
"""


class BuildError(Exception):
    """Base class for errors that fail a single build request."""

    kind = "internal"


class ConfigurationDefect(BuildError):
    """A named source fragment could not be resolved.

    Re-running with the same inputs reproduces it, so it is never retried.
    """

    kind = "configuration"


class OptimizationFailure(BuildError):
    """The optimizer rejected the vertex or fragment source."""

    kind = "optimization"

    def __init__(self, stage, log):
        super().__init__(f"{stage} shader failed to optimize:\n{log}")
        self.stage = stage
        self.log = log


class OutputWriteError(BuildError):
    """An optimized shader could not be written to the output directory."""

    kind = "io"

    def __init__(self, path, message):
        super().__init__(f"Cannot write {path}: {message}")
        self.path = path
