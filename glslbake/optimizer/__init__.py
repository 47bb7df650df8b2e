"""
The interface to the GLSL optimizer, and the available back-ends.

.. currentmodule:: glslbake.optimizer

.. autosummary::
    :toctree: optimizer/

    ShaderStage
    OptimizeResult
    OptimizerContext
    get_optimizer

An optimizer context is created for a specific target dialect, and is used
by exactly one build task. Contexts are not safe to share between threads.
"""

import enum
import functools


__all__ = [
    "OPTIMIZERS",
    "OptimizeResult",
    "OptimizerContext",
    "ShaderStage",
    "get_optimizer",
]


class ShaderStage(enum.Enum):
    """The shader stages that are optimized."""

    vertex = "vertex"
    fragment = "fragment"

    def __str__(self):
        return self.value

    @property
    def extension(self):
        """The file extension for this stage, e.g. "vert"."""
        return self.value[:4]


class OptimizeResult:
    """The result of optimizing the source of one shader stage."""

    __slots__ = ["log", "output", "status"]

    def __init__(self, status, output="", log=""):
        self.status = bool(status)
        self.output = output
        self.log = log

    def __repr__(self):
        state = "ok" if self.status else "failed"
        return f"<OptimizeResult {state}, {len(self.output)} chars>"


class OptimizerContext:
    """Base class for optimizer back-ends.

    Subclasses implement ``_optimize()``, and ``close()`` if they hold on
    to resources.
    """

    def __init__(self, target):
        if not isinstance(target, str):
            raise TypeError(f"Optimizer target must be a str, not {target!r}")
        self._target = target
        self._closed = False

    def __repr__(self):
        return f"<{self.__class__.__name__} for {self._target}>"

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    @property
    def target(self):
        """The target dialect, e.g. "opengl" or "opengles30"."""
        return self._target

    @property
    def closed(self):
        """Whether this context has been closed."""
        return self._closed

    def optimize(self, stage, source):
        """Optimize the GLSL for the given stage. Returns an ``OptimizeResult``."""
        if self._closed:
            raise RuntimeError("Cannot use a closed optimizer context.")
        stage = ShaderStage(stage)
        return self._optimize(stage, source)

    def _optimize(self, stage, source):
        raise NotImplementedError()

    def close(self):
        """Release the resources of this context."""
        self._closed = True


from ._minify import MinifyOptimizer  # noqa: E402
from ._external import SpirvCrossOptimizer, CommandOptimizer  # noqa: E402


OPTIMIZERS = {
    "minify": MinifyOptimizer,
    "spirv-cross": SpirvCrossOptimizer,
    "command": CommandOptimizer,
}


def get_optimizer(name, **options):
    """Get a factory that creates optimizer contexts for a target.

    Parameters
    ----------
    name : str
        The back-end: "minify", "spirv-cross", or "command".
    options : dict
        Passed to the context on creation, e.g. ``command`` for the
        "command" back-end.
    """
    try:
        cls = OPTIMIZERS[name]
    except KeyError:
        options = ", ".join(repr(key) for key in OPTIMIZERS)
        raise ValueError(f"Unknown optimizer {name!r}, expected one of {options}") from None
    return functools.partial(cls, **options)
