"""
The optimization task: optimize the assembled source of one build request.

A task owns its optimizer context, and shares no mutable state with other
tasks, so any number of them can run in parallel.
"""

import os

from .digest import compute_digest
from .errors import BuildError, OptimizationFailure
from .utils import logger


__all__ = ["BuildFailure", "OptimizedVariant", "optimize_variant", "variant_paths"]


def variant_paths(output_dir, name, platform):
    """Get the (vertex_path, fragment_path) for a variant.

    The two files share a stem, e.g. ``brush_solid_Gl.vert`` and ``brush_solid_Gl.frag``.
    """
    stem = os.path.join(output_dir, f"{name}_{platform.name}")
    return stem + ".vert", stem + ".frag"


class OptimizedVariant:
    """Describes a successfully optimized variant."""

    __slots__ = [
        "digest",
        "fragment_path",
        "platform",
        "request",
        "variant_name",
        "vertex_path",
    ]

    def __init__(self, request, vertex_path, fragment_path, digest):
        self.request = request
        self.variant_name = request.variant_name
        self.platform = request.platform
        self.vertex_path = vertex_path
        self.fragment_path = fragment_path
        self.digest = digest

    def __repr__(self):
        return f"<OptimizedVariant {self.variant_name} {self.platform.name} {self.digest}>"


class BuildFailure:
    """Describes a build request that failed.

    The ``kind`` is "configuration", "optimization", "io", or "internal".
    The ``stage`` is "vertex" or "fragment" for optimization failures.
    """

    __slots__ = ["kind", "message", "request", "stage"]

    def __init__(self, request, message, kind="internal", stage=None):
        self.request = request
        self.message = message
        self.kind = kind
        self.stage = stage

    def __repr__(self):
        return f"<BuildFailure {self.request!r} ({self.kind})>"

    @classmethod
    def from_exception(cls, request, err):
        """Create a failure from an exception raised while building the request."""
        if isinstance(err, BuildError):
            return cls(request, str(err), err.kind, getattr(err, "stage", None))
        return cls(request, f"{err.__class__.__name__}: {err}", "internal")


def optimize_variant(request, sources, optimizer_factory, output_dir):
    """Optimize the assembled sources of a build request.

    A new optimizer context is created for this call, and closed when done.
    The vertex code is optimized first; if it fails, the fragment code is
    not attempted.

    Returns either a ``BuildFailure``, or a tuple
    ``(OptimizedVariant, vertex_bytes, fragment_bytes)``.
    """
    with optimizer_factory(request.platform.optimizer_target) as optimizer:
        vert = optimizer.optimize("vertex", sources.vertex_text)
        if not vert.status:
            err = OptimizationFailure("vertex", vert.log)
            return BuildFailure.from_exception(request, err)
        frag = optimizer.optimize("fragment", sources.fragment_text)
        if not frag.status:
            err = OptimizationFailure("fragment", frag.log)
            return BuildFailure.from_exception(request, err)

    vertex_bytes = vert.output.encode()
    fragment_bytes = frag.output.encode()

    # Store the digest alongside the code, so that the runtime does not
    # need to hash large strings.
    digest = compute_digest(vertex_bytes, fragment_bytes)

    vertex_path, fragment_path = variant_paths(
        output_dir, request.variant_name, request.platform
    )
    variant = OptimizedVariant(request, vertex_path, fragment_path, digest)
    logger.debug(f"Optimized {variant.variant_name} for {variant.platform.name}.")
    return variant, vertex_bytes, fragment_bytes
