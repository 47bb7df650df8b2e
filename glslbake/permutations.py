"""
Enumerate the build requests: every legal (shader, features, platform)
combination that is to be precompiled.
"""

import enum

from .features import Capability
from .utils import logger


__all__ = [
    "TargetPlatform",
    "BuildRequest",
    "DENIED_CAPABILITIES",
    "build_capability_mask",
    "enumerate_permutations",
    "variant_name",
]


# Experimental or runtime-only capabilities that are never precompiled.
DENIED_CAPABILITIES = Capability.DITHERING | Capability.PIXEL_LOCAL_STORAGE


class TargetPlatform(enum.Enum):
    """The graphics API dialects that shaders are optimized for.

    The member name is used in output filenames, e.g. ``brush_solid_Gl.vert``.
    """

    Gl = "gl"  #: Desktop OpenGL, GLSL 1.50.
    Gles = "gles"  #: OpenGL ES 3.0, ESSL 3.00.

    @classmethod
    def from_name(cls, name):
        """Get a platform by (case-insensitive) name, e.g. "gl" or "GLES"."""
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower()
        for platform in cls:
            if platform.value == key:
                return platform
        options = ", ".join(repr(p.value) for p in cls)
        raise ValueError(f"Unknown platform {name!r}, expected one of {options}")

    @property
    def version_line(self):
        """The ``#version`` directive that starts each shader for this platform."""
        return _VERSION_LINES[self]

    @property
    def optimizer_target(self):
        """The name of the optimizer target dialect for this platform."""
        return _OPTIMIZER_TARGETS[self]

    @property
    def exclusive_capabilities(self):
        """The capabilities that are only legal on this platform."""
        return _EXCLUSIVE_CAPABILITIES[self]


_VERSION_LINES = {
    TargetPlatform.Gl: "#version 150",
    TargetPlatform.Gles: "#version 300 es",
}

_OPTIMIZER_TARGETS = {
    TargetPlatform.Gl: "opengl",
    TargetPlatform.Gles: "opengles30",
}

_EXCLUSIVE_CAPABILITIES = {
    TargetPlatform.Gl: Capability.GL | Capability.TEXTURE_RECT,
    TargetPlatform.Gles: Capability.GLES
    | Capability.TEXTURE_EXTERNAL
    | Capability.TEXTURE_EXTERNAL_ESSL1,
}


def variant_name(shader_id, feature_config):
    """Get the name of a variant, e.g. "brush_solid_ALPHA_PASS_DEBUG_OVERDRAW"."""
    if not feature_config:
        return shader_id
    return shader_id + "_" + feature_config.replace(",", "_")


class BuildRequest:
    """One variant to build: a shader id, a feature config, and a platform.

    The feature config is the canonical comma-joined string of feature
    tokens, and may be empty. Requests are immutable and hashable; the
    identity is the full tuple.
    """

    __slots__ = ["_key"]

    def __init__(self, shader_id, feature_config, platform):
        if not (isinstance(shader_id, str) and shader_id):
            raise TypeError(f"Shader id must be a non-empty str, not {shader_id!r}")
        if not isinstance(feature_config, str):
            raise TypeError(f"Feature config must be a str, not {feature_config!r}")
        platform = TargetPlatform.from_name(platform)
        object.__setattr__(self, "_key", (shader_id, feature_config, platform))

    def __setattr__(self, name, value):
        raise AttributeError("Cannot modify BuildRequest")

    def __repr__(self):
        shader_id, feature_config, platform = self._key
        return f"<BuildRequest {shader_id} [{feature_config}] {platform.name}>"

    def __eq__(self, other):
        if not isinstance(other, BuildRequest):
            return NotImplemented
        return self._key == other._key

    def __hash__(self):
        return hash(self._key)

    @property
    def shader_id(self):
        return self._key[0]

    @property
    def feature_config(self):
        return self._key[1]

    @property
    def platform(self):
        return self._key[2]

    @property
    def features(self):
        """The feature tokens as a tuple. An empty config has zero tokens."""
        return tuple(f for f in self.feature_config.split(",") if f)

    @property
    def variant_name(self):
        return variant_name(self.shader_id, self.feature_config)


def build_capability_mask(platform):
    """Get the capability mask for a platform.

    Starts with all capabilities enabled, then disables the ones that are
    exclusive to other platforms, and the ones that are never precompiled.
    """
    platform = TargetPlatform.from_name(platform)
    mask = Capability.all()
    for other in TargetPlatform:
        if other is not platform:
            mask &= ~other.exclusive_capabilities
    mask &= ~DENIED_CAPABILITIES
    return mask


def enumerate_permutations(platforms, registry):
    """Get the list of build requests for the given platforms.

    Parameters
    ----------
    platforms : list
        The ``TargetPlatform`` values (or names) to build for.
    registry : FeatureRegistry
        Any object with a ``get_configs(mask)`` method that returns a dict
        mapping shader id to a list of config strings.

    Two requests that would write to the same output files indicate a defect
    in the registry, and raise a ``ValueError``.
    """
    requests = []
    seen_platforms = []
    stems = {}

    for platform in platforms:
        platform = TargetPlatform.from_name(platform)
        if platform in seen_platforms:
            continue
        seen_platforms.append(platform)

        mask = build_capability_mask(platform)
        count = 0
        for shader_id, configs in registry.get_configs(mask).items():
            for config in configs:
                request = BuildRequest(shader_id, config, platform)
                stem = (request.variant_name, platform)
                if stem in stems:
                    raise ValueError(
                        f"{request!r} collides with {stems[stem]!r}: both would be written as "
                        f"'{request.variant_name}_{platform.name}'."
                    )
                stems[stem] = request
                requests.append(request)
                count += 1

        if count:
            logger.info(f"Enumerated {count} shader variants for {platform.name}.")
        else:
            logger.warning(f"No shader variants to build for {platform.name}.")

    return requests
