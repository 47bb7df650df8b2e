"""
Turn a build request into GLSL text, by composing a version/define prefix
with the named source fragments.

.. currentmodule:: glslbake.source

.. autosummary::
    :toctree: source/

    AssembledSource
    assemble_sources
    build_shader_strings
    make_resolver
    resolve_includes

"""

from .compose import AssembledSource, assemble_sources, build_shader_strings
from .loaders import make_resolver
from .resolve import resolve_includes

__all__ = [
    "AssembledSource",
    "assemble_sources",
    "build_shader_strings",
    "make_resolver",
    "resolve_includes",
]
