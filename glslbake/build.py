"""
The build pipeline: enumerate the requests, then assemble, optimize and
write each one on a pool of worker threads, and report the outcome.

.. currentmodule:: glslbake.build

.. autosummary::
    :toctree: build/

    BuildConfig
    BuildReport
    build_shaders

"""

import os

from .errors import OutputWriteError
from .features import FeatureRegistry, default_registry
from .optimizer import get_optimizer
from .permutations import TargetPlatform, enumerate_permutations
from .scheduler import run_all
from .source import assemble_sources, make_resolver
from .task import BuildFailure, optimize_variant
from .utils import logger, get_output_dir
from .writer import OutputWriter


__all__ = ["BuildConfig", "BuildReport", "build_shaders"]


class BuildConfig:
    """The configuration of a build. Immutable.

    Parameters
    ----------
    shader_dir : str | None
        The directory with the ``<name>.glsl`` source fragments. Can be None
        if a resolver is passed to ``build_shaders()``.
    output_dir : str | None
        Where to write the optimized shaders. Default from ``get_output_dir()``.
    platforms : list
        The target platforms (``TargetPlatform`` or names). Default ``["gl"]``.
    optimizer : str | callable
        The name of the optimizer back-end, or a function that accepts a
        target and returns an ``OptimizerContext``. Default "minify".
    optimizer_options : dict | None
        Options for the named optimizer back-end.
    registry : FeatureRegistry | str | None
        The feature registry, or the filename of a JSON registry. Default
        the builtin registry.
    max_workers : int | None
        The number of worker threads. Default the hardware concurrency.
    write_manifest : bool
        Whether to write a manifest with the digests. Default True.
    """

    __slots__ = [
        "_max_workers",
        "_optimizer",
        "_optimizer_options",
        "_output_dir",
        "_platforms",
        "_registry",
        "_shader_dir",
        "_write_manifest",
    ]

    def __init__(
        self,
        shader_dir=None,
        output_dir=None,
        platforms=("gl",),
        optimizer="minify",
        optimizer_options=None,
        registry=None,
        max_workers=None,
        write_manifest=True,
    ):
        platforms = tuple(TargetPlatform.from_name(p) for p in platforms)
        if not platforms:
            raise ValueError("BuildConfig needs at least one platform.")
        if not (isinstance(optimizer, str) or callable(optimizer)):
            raise TypeError(f"Optimizer must be a name or a callable, not {optimizer!r}")
        if max_workers is not None and int(max_workers) < 1:
            raise ValueError(f"max_workers must be at least 1, not {max_workers}")
        self._shader_dir = os.fspath(shader_dir) if shader_dir else None
        self._output_dir = os.fspath(output_dir) if output_dir else get_output_dir()
        self._platforms = platforms
        self._optimizer = optimizer
        self._optimizer_options = dict(optimizer_options or {})
        self._registry = registry
        self._max_workers = None if max_workers is None else int(max_workers)
        self._write_manifest = bool(write_manifest)

    def __repr__(self):
        platforms = ", ".join(p.name for p in self._platforms)
        return f"<BuildConfig {self._shader_dir!r} -> {self._output_dir!r} [{platforms}]>"

    @property
    def shader_dir(self):
        return self._shader_dir

    @property
    def output_dir(self):
        return self._output_dir

    @property
    def platforms(self):
        return self._platforms

    @property
    def max_workers(self):
        return self._max_workers

    @property
    def write_manifest(self):
        return self._write_manifest

    def get_registry(self):
        """Get the feature registry to use."""
        if self._registry is None:
            return default_registry()
        elif isinstance(self._registry, (str, os.PathLike)):
            return FeatureRegistry.from_file(self._registry)
        return self._registry

    def get_optimizer_factory(self):
        """Get the function that creates an optimizer context for a target."""
        if isinstance(self._optimizer, str):
            return get_optimizer(self._optimizer, **self._optimizer_options)
        return self._optimizer


class BuildReport:
    """The outcome of a build.

    The variants and failures are sorted by name and platform, regardless
    of the order in which the tasks finished.
    """

    def __init__(self, results, manifest_path=None, manifest_error=None):
        self.variants = []
        self.failures = []
        for _, outcome in results:
            if isinstance(outcome, BuildFailure):
                self.failures.append(outcome)
            else:
                self.variants.append(outcome)
        self.variants.sort(key=lambda v: (v.variant_name, v.platform.name))
        self.failures.sort(
            key=lambda f: (f.request.variant_name, f.request.platform.name)
        )
        self.manifest_path = manifest_path
        self.manifest_error = manifest_error

    def __repr__(self):
        return f"<BuildReport {len(self.variants)} ok, {len(self.failures)} failed>"

    @property
    def ok(self):
        """Whether all requests were built and written."""
        return not self.failures and not self.manifest_error

    @property
    def exit_code(self):
        """The process exit code: 0 when ok, 1 otherwise."""
        return 0 if self.ok else 1

    def summary(self):
        """Get a human readable summary."""
        total = len(self.variants) + len(self.failures)
        lines = [f"Optimized {len(self.variants)} of {total} shader variants."]
        for failure in self.failures:
            request = failure.request
            stage = f" {failure.stage}" if failure.stage else ""
            lines.append(
                f"  FAILED {request.variant_name} ({request.platform.name}): {failure.kind}{stage}"
            )
        if self.manifest_error:
            lines.append(f"  FAILED to write manifest: {self.manifest_error}")
        elif self.manifest_path:
            lines.append(f"Digests written to {self.manifest_path}")
        return "\n".join(lines)


def build_shaders(config, resolver=None, progress=None):
    """Build all shader variants described by the given config.

    Parameters
    ----------
    config : BuildConfig
        The configuration of this build.
    resolver : str | dict | callable | None
        Where to get the GLSL fragments from, see ``make_resolver()``. Default
        ``config.shader_dir``.
    progress : callable | None
        Called as ``progress(request, outcome)`` after each task.

    A failing request does not stop the build, and the files of requests
    that succeeded are kept. Returns a ``BuildReport``.
    """
    if resolver is None:
        if not config.shader_dir:
            raise ValueError("Need a shader_dir or a resolver to build shaders.")
        resolver = config.shader_dir
    resolver = make_resolver(resolver)

    requests = enumerate_permutations(config.platforms, config.get_registry())
    optimizer_factory = config.get_optimizer_factory()
    writer = OutputWriter(config.output_dir)
    output_dir = config.output_dir

    def build_one(request):
        sources = assemble_sources(request, resolver)
        result = optimize_variant(request, sources, optimizer_factory, output_dir)
        if isinstance(result, BuildFailure):
            return result
        variant, vertex_bytes, fragment_bytes = result
        writer.write(variant, vertex_bytes, fragment_bytes)
        return variant

    results = run_all(requests, build_one, config.max_workers, progress)

    manifest_path = manifest_error = None
    if config.write_manifest:
        variants = [o for _, o in results if not isinstance(o, BuildFailure)]
        try:
            manifest_path = writer.write_manifest(variants)
        except OutputWriteError as err:
            logger.error(str(err))
            manifest_error = str(err)

    report = BuildReport(results, manifest_path, manifest_error)
    if report.ok:
        logger.info(report.summary())
    else:
        logger.warning(report.summary())
    return report
