"""
The shader feature registry: which feature configurations exist for which
shader, given the capabilities that are enabled for a build.

.. currentmodule:: glslbake.features

.. autosummary::
    :toctree: features/

    Capability
    FeatureRegistry
    default_registry

A registry declares each shader as a list of *axes*. Each axis is a list of
alternatives, and an alternative is either the empty string or a group of
comma-separated feature tokens. The configurations of a shader are the
cartesian product of its axes. For example::

    "brush_solid": [["", "ALPHA_PASS"], ["", "DEBUG_OVERDRAW"]]

produces ``""``, ``"DEBUG_OVERDRAW"``, ``"ALPHA_PASS"`` and
``"ALPHA_PASS,DEBUG_OVERDRAW"``. A configuration is only produced when the
capabilities required by all of its tokens are enabled.
"""

import enum
import json
import itertools


__all__ = ["Capability", "FeatureRegistry", "default_registry"]


class Capability(enum.Flag):
    """The engine-wide capability tokens. A combination is a capability mask."""

    GL = enum.auto()  #: Desktop OpenGL only.
    GLES = enum.auto()  #: OpenGL ES only.
    TEXTURE_RECT = enum.auto()  #: Rectangle textures (desktop GL).
    TEXTURE_EXTERNAL = enum.auto()  #: External (EGLImage) textures (GLES).
    TEXTURE_EXTERNAL_ESSL1 = enum.auto()  #: External textures in ESSL1 (GLES).
    ADVANCED_BLEND_EQUATION = enum.auto()  #: KHR_blend_equation_advanced.
    DUAL_SOURCE_BLENDING = enum.auto()  #: Dual source blending.
    DITHERING = enum.auto()  #: Gradient dithering.
    DEBUG = enum.auto()  #: Debug display variants such as overdraw.
    PIXEL_LOCAL_STORAGE = enum.auto()  #: EXT_shader_pixel_local_storage.

    @classmethod
    def all(cls):
        """Get the mask with every capability enabled."""
        mask = cls(0)
        for member in cls:
            mask |= member
        return mask

    @classmethod
    def from_names(cls, names):
        """Get a mask from an iterable of capability names."""
        mask = cls(0)
        for name in names:
            try:
                mask |= cls[name]
            except KeyError:
                raise ValueError(f"Unknown capability {name!r}") from None
        return mask


# The capabilities that a feature token needs. Tokens not listed need nothing.
DEFAULT_REQUIREMENTS = {
    "TEXTURE_RECT": Capability.TEXTURE_RECT,
    "TEXTURE_EXTERNAL": Capability.TEXTURE_EXTERNAL,
    "TEXTURE_EXTERNAL_ESSL1": Capability.TEXTURE_EXTERNAL_ESSL1,
    "ADVANCED_BLEND_EQUATION": Capability.ADVANCED_BLEND_EQUATION,
    "DUAL_SOURCE_BLENDING": Capability.DUAL_SOURCE_BLENDING,
    "DITHERING": Capability.DITHERING,
    "DEBUG_OVERDRAW": Capability.DEBUG,
    "PIXEL_LOCAL_STORAGE": Capability.PIXEL_LOCAL_STORAGE,
}

_TEXTURE_TYPES = ["TEXTURE_2D", "TEXTURE_RECT", "TEXTURE_EXTERNAL"]
_ALPHA = ["", "ALPHA_PASS"]
_OVERDRAW = ["", "DEBUG_OVERDRAW"]

DEFAULT_SHADERS = {
    # Clip shaders
    "cs_clip_rectangle": [["", "FAST_PATH"]],
    "cs_clip_box_shadow": [["TEXTURE_2D"]],
    # Cache shaders
    "cs_blur": [["ALPHA_TARGET", "COLOR_TARGET"]],
    "cs_border_segment": [[""]],
    "cs_border_solid": [[""]],
    "cs_line_decoration": [[""]],
    "cs_fast_linear_gradient": [[""]],
    "cs_linear_gradient": [["", "DITHERING"]],
    "cs_radial_gradient": [["", "DITHERING"]],
    "cs_conic_gradient": [["", "DITHERING"]],
    "cs_svg_filter": [[""]],
    "cs_scale": [_TEXTURE_TYPES],
    # Brush shaders
    "brush_solid": [_ALPHA, _OVERDRAW],
    "brush_blend": [_ALPHA, _OVERDRAW],
    "brush_mix_blend": [_ALPHA, _OVERDRAW],
    "brush_opacity": [["", "ANTIALIASING"], _ALPHA, _OVERDRAW],
    "brush_linear_gradient": [["", "DITHERING"], _ALPHA, _OVERDRAW],
    "brush_image": [
        _TEXTURE_TYPES,
        ["", "ALPHA_PASS", "ALPHA_PASS,ANTIALIASING,REPETITION"],
        ["", "ADVANCED_BLEND_EQUATION", "DUAL_SOURCE_BLENDING"],
        _OVERDRAW,
    ],
    "brush_yuv_image": [["YUV"], _TEXTURE_TYPES, _ALPHA, _OVERDRAW],
    # Primitive shaders
    "ps_quad_textured": [[""]],
    "ps_split_composite": [[""]],
    "ps_clear": [["", "PIXEL_LOCAL_STORAGE"]],
    "ps_copy": [[""]],
    "ps_text_run": [
        ["", "GLYPH_TRANSFORM"],
        ["", "DUAL_SOURCE_BLENDING"],
        _ALPHA,
        _OVERDRAW,
    ],
    # Native compositor shaders
    "composite": [_TEXTURE_TYPES, ["", "YUV", "FAST_PATH"]],
    # Debug shaders
    "debug_color": [[""]],
    "debug_font": [[""]],
}


def _join_tokens(parts):
    tokens = []
    for part in parts:
        for token in part.split(","):
            token = token.strip()
            if token and token not in tokens:
                tokens.append(token)
    return ",".join(tokens)


class FeatureRegistry:
    """Maps shader ids to their legal feature configurations.

    Parameters
    ----------
    shaders : dict
        Maps a shader id to a list of axes. Each axis is a list of
        alternatives (str). See the module docs.
    requirements : dict | None
        Maps a feature token to the ``Capability`` it needs. Default
        ``DEFAULT_REQUIREMENTS``.
    """

    def __init__(self, shaders, requirements=None):
        if not isinstance(shaders, dict):
            raise TypeError(f"Shaders must be a dict, not {shaders!r}")
        self._shaders = {}
        for shader_id, axes in shaders.items():
            if not (isinstance(shader_id, str) and shader_id):
                raise TypeError(f"Shader id must be a non-empty str, not {shader_id!r}")
            axes = [list(axis) for axis in axes]
            for axis in axes:
                if not axis or not all(isinstance(alt, str) for alt in axis):
                    raise TypeError(
                        f"Each axis of {shader_id!r} must be a non-empty list of str."
                    )
            self._shaders[shader_id] = axes

        if requirements is None:
            requirements = DEFAULT_REQUIREMENTS
        self._requirements = dict(requirements)

    def __repr__(self):
        return f"<FeatureRegistry with {len(self._shaders)} shaders>"

    @classmethod
    def from_file(cls, filename):
        """Load a registry from a JSON file.

        The file holds an object with a "shaders" field (as for the
        constructor) and an optional "requirements" field that maps a
        token to a list of capability names.
        """
        with open(filename, "rb") as f:
            data = json.loads(f.read().decode())
        requirements = None
        if "requirements" in data:
            requirements = {
                token: Capability.from_names(names)
                for token, names in data["requirements"].items()
            }
        return cls(data["shaders"], requirements)

    @property
    def shader_ids(self):
        """The shader ids, in declaration order."""
        return tuple(self._shaders)

    def is_legal(self, config, mask):
        """Get whether all tokens of the given config are allowed by the mask."""
        for token in config.split(","):
            required = self._requirements.get(token)
            if required is not None and (required & mask) != required:
                return False
        return True

    def get_configs(self, mask):
        """Get the legal configurations per shader for the given capability mask.

        Returns a dict that maps shader id to a list of unique config strings.
        Shaders without a legal configuration are omitted.
        """
        result = {}
        for shader_id, axes in self._shaders.items():
            configs = []
            for parts in itertools.product(*axes):
                config = _join_tokens(parts)
                if config not in configs and self.is_legal(config, mask):
                    configs.append(config)
            if configs:
                result[shader_id] = configs
        return result


def default_registry():
    """Get the registry with the builtin shaders of the engine."""
    return FeatureRegistry(DEFAULT_SHADERS, DEFAULT_REQUIREMENTS)
