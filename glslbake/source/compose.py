"""
Compose the full vertex and fragment source of a shader variant.
"""

from ..optimizer import ShaderStage
from .resolve import resolve_includes
from .templating import render_prefix


class AssembledSource:
    """The vertex and fragment GLSL of a single build request."""

    __slots__ = ["fragment_text", "vertex_text"]

    def __init__(self, vertex_text, fragment_text):
        self.vertex_text = vertex_text
        self.fragment_text = fragment_text

    def __repr__(self):
        return f"<AssembledSource {len(self.vertex_text)} + {len(self.fragment_text)} chars>"

    def __eq__(self, other):
        if not isinstance(other, AssembledSource):
            return NotImplemented
        return (self.vertex_text, self.fragment_text) == (
            other.vertex_text,
            other.fragment_text,
        )


def build_shader_main_string(shader_id, resolver):
    """Get the code of the named shader with all includes resolved."""
    code = resolve_includes(resolver(shader_id), resolver, {shader_id})
    if not code.endswith("\n"):
        code += "\n"
    return code


def build_shader_strings(platform, features, shader_id, resolver):
    """Get the (vertex, fragment) source for a shader.

    Each stage consists of a prefix with the version directive and the
    defines for the stage and features, followed by the shared main code.
    """
    main = build_shader_main_string(shader_id, resolver)
    vertex = render_prefix(platform, ShaderStage.vertex, shader_id, features)
    fragment = render_prefix(platform, ShaderStage.fragment, shader_id, features)
    return vertex + main, fragment + main


def assemble_sources(request, resolver):
    """Assemble the vertex and fragment source for a build request.

    Errors raised by the resolver (e.g. a missing fragment) propagate.
    """
    features = [f for f in request.feature_config.split(",") if f]
    vertex_text, fragment_text = build_shader_strings(
        request.platform, features, request.shader_id, resolver
    )
    return AssembledSource(vertex_text, fragment_text)
