import os

from glslbake.digest import compute_digest
from glslbake.errors import ConfigurationDefect, OptimizationFailure, OutputWriteError
from glslbake.permutations import BuildRequest
from glslbake.source import AssembledSource
from glslbake.task import BuildFailure, OptimizedVariant, optimize_variant, variant_paths


def test_optimize_variant(fake_optimizer, tmp_path):
    request = BuildRequest("brush_solid", "", "gl")
    sources = AssembledSource("vertex code", "fragment code")

    result = optimize_variant(request, sources, fake_optimizer, str(tmp_path))

    variant, vertex_bytes, fragment_bytes = result
    assert isinstance(variant, OptimizedVariant)
    assert variant.request == request
    assert variant.variant_name == "brush_solid"
    assert variant.vertex_path == os.path.join(str(tmp_path), "brush_solid_Gl.vert")
    assert variant.fragment_path == os.path.join(str(tmp_path), "brush_solid_Gl.frag")
    assert vertex_bytes == b"// opengl vertex\nVERTEX CODE"
    assert fragment_bytes == b"// opengl fragment\nFRAGMENT CODE"
    assert variant.digest == compute_digest(vertex_bytes, fragment_bytes)

    # The task does not write anything itself
    assert os.listdir(tmp_path) == []


def test_optimize_variant_owns_its_context(fake_optimizer, tmp_path):
    request = BuildRequest("brush_solid", "ALPHA_PASS", "gles")
    sources = AssembledSource("vertex code", "fragment code")

    optimize_variant(request, sources, fake_optimizer, str(tmp_path))
    optimize_variant(request, sources, fake_optimizer, str(tmp_path))

    assert len(fake_optimizer.instances) == 2
    for ctx in fake_optimizer.instances:
        assert ctx.target == "opengles30"
        assert ctx.calls == ["vertex", "fragment"]
        assert ctx.closed


def test_optimize_variant_vertex_failure(fake_optimizer, tmp_path):
    request = BuildRequest("brush_solid", "", "gl")
    sources = AssembledSource("#error in vertex", "#error in fragment")

    result = optimize_variant(request, sources, fake_optimizer, str(tmp_path))

    assert isinstance(result, BuildFailure)
    assert result.request == request
    assert result.kind == "optimization"
    assert result.stage == "vertex"
    assert "vertex" in result.message
    # The fragment shader is not attempted
    ctx = fake_optimizer.instances[0]
    assert ctx.calls == ["vertex"]
    assert ctx.closed


def test_optimize_variant_fragment_failure(fake_optimizer, tmp_path):
    request = BuildRequest("brush_solid", "", "gl")
    sources = AssembledSource("vertex code", "#error in fragment")

    result = optimize_variant(request, sources, fake_optimizer, str(tmp_path))

    assert isinstance(result, BuildFailure)
    assert result.stage == "fragment"
    assert fake_optimizer.instances[0].calls == ["vertex", "fragment"]
    assert fake_optimizer.instances[0].closed


def test_variant_paths(tmp_path):
    request = BuildRequest("brush_solid", "ALPHA_PASS,DEBUG_OVERDRAW", "gles")
    vertex_path, fragment_path = variant_paths(
        "out", request.variant_name, request.platform
    )
    assert vertex_path == os.path.join("out", "brush_solid_ALPHA_PASS_DEBUG_OVERDRAW_Gles.vert")
    assert fragment_path == os.path.join("out", "brush_solid_ALPHA_PASS_DEBUG_OVERDRAW_Gles.frag")


def test_build_failure_from_exception():
    request = BuildRequest("brush_solid", "", "gl")

    failure = BuildFailure.from_exception(request, ConfigurationDefect("no shared.glsl"))
    assert failure.kind == "configuration"
    assert failure.message == "no shared.glsl"
    assert failure.stage is None

    failure = BuildFailure.from_exception(request, OptimizationFailure("vertex", "0:1: error"))
    assert failure.kind == "optimization"
    assert failure.stage == "vertex"
    assert "0:1: error" in failure.message

    failure = BuildFailure.from_exception(request, OutputWriteError("x.vert", "disk full"))
    assert failure.kind == "io"
    assert "x.vert" in failure.message

    failure = BuildFailure.from_exception(request, ValueError("oops"))
    assert failure.kind == "internal"
    assert failure.message == "ValueError: oops"
    assert failure.request is request
