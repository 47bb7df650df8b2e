"""Glslbake: precompile and optimize every shader variant of the engine."""

# ruff: noqa: F401

from ._version import __version__, version_info
from . import utils
from .utils import logger

from .errors import BuildError, ConfigurationDefect, OptimizationFailure, OutputWriteError
from .features import Capability, FeatureRegistry, default_registry
from .permutations import (
    TargetPlatform,
    BuildRequest,
    build_capability_mask,
    enumerate_permutations,
    variant_name,
)
from .source import AssembledSource, assemble_sources, make_resolver
from .optimizer import ShaderStage, OptimizeResult, OptimizerContext, get_optimizer
from .digest import Digest, compute_digest
from .task import OptimizedVariant, BuildFailure, optimize_variant
from .scheduler import run_all
from .writer import OutputWriter
from .build import BuildConfig, BuildReport, build_shaders
