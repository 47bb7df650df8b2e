import logging

from pytest import raises

from glslbake.features import Capability, FeatureRegistry, default_registry
from glslbake.permutations import (
    BuildRequest,
    TargetPlatform,
    build_capability_mask,
    enumerate_permutations,
    variant_name,
)


# Tokens that must never show up for a platform.
FORBIDDEN_TOKENS = {
    TargetPlatform.Gl: {
        "TEXTURE_EXTERNAL",
        "TEXTURE_EXTERNAL_ESSL1",
        "DITHERING",
        "PIXEL_LOCAL_STORAGE",
    },
    TargetPlatform.Gles: {"TEXTURE_RECT", "DITHERING", "PIXEL_LOCAL_STORAGE"},
}


class StaticRegistry:
    def __init__(self, configs):
        self.configs = configs
        self.masks = []

    def get_configs(self, mask):
        self.masks.append(mask)
        return self.configs


def test_platform_from_name():
    assert TargetPlatform.from_name("gl") is TargetPlatform.Gl
    assert TargetPlatform.from_name("GLES") is TargetPlatform.Gles
    assert TargetPlatform.from_name(TargetPlatform.Gles) is TargetPlatform.Gles
    with raises(ValueError):
        TargetPlatform.from_name("vulkan")


def test_platform_properties():
    assert TargetPlatform.Gl.version_line == "#version 150"
    assert TargetPlatform.Gles.version_line == "#version 300 es"
    assert TargetPlatform.Gl.optimizer_target == "opengl"
    assert TargetPlatform.Gles.optimizer_target == "opengles30"
    assert Capability.GL in TargetPlatform.Gl.exclusive_capabilities
    assert Capability.TEXTURE_EXTERNAL in TargetPlatform.Gles.exclusive_capabilities


def test_capability_mask_gl():
    mask = build_capability_mask(TargetPlatform.Gl)
    assert Capability.GL in mask
    assert Capability.TEXTURE_RECT in mask
    assert Capability.DEBUG in mask
    assert Capability.DUAL_SOURCE_BLENDING in mask
    for cap in [
        Capability.GLES,
        Capability.TEXTURE_EXTERNAL,
        Capability.TEXTURE_EXTERNAL_ESSL1,
        Capability.DITHERING,
        Capability.PIXEL_LOCAL_STORAGE,
    ]:
        assert cap not in mask


def test_capability_mask_gles():
    mask = build_capability_mask("gles")
    assert Capability.GLES in mask
    assert Capability.TEXTURE_EXTERNAL in mask
    for cap in [
        Capability.GL,
        Capability.TEXTURE_RECT,
        Capability.DITHERING,
        Capability.PIXEL_LOCAL_STORAGE,
    ]:
        assert cap not in mask


def test_build_request():
    request = BuildRequest("brush_solid", "ALPHA_PASS,DEBUG_OVERDRAW", "gl")
    assert request.shader_id == "brush_solid"
    assert request.feature_config == "ALPHA_PASS,DEBUG_OVERDRAW"
    assert request.platform is TargetPlatform.Gl
    assert request.features == ("ALPHA_PASS", "DEBUG_OVERDRAW")
    assert request.variant_name == "brush_solid_ALPHA_PASS_DEBUG_OVERDRAW"

    empty = BuildRequest("brush_solid", "", TargetPlatform.Gl)
    assert empty.features == ()
    assert empty.variant_name == "brush_solid"

    with raises(AttributeError):
        request.shader_id = "foo"
    with raises(AttributeError):
        request.foo = 1

    with raises(TypeError):
        BuildRequest("", "", "gl")
    with raises(TypeError):
        BuildRequest("brush_solid", None, "gl")


def test_build_request_identity():
    r1 = BuildRequest("brush_solid", "ALPHA_PASS", "gl")
    r2 = BuildRequest("brush_solid", "ALPHA_PASS", TargetPlatform.Gl)
    r3 = BuildRequest("brush_solid", "ALPHA_PASS", "gles")
    r4 = BuildRequest("brush_solid", "", "gl")

    assert r1 == r2
    assert hash(r1) == hash(r2)
    assert r1 != r3
    assert r1 != r4
    assert len({r1, r2, r3, r4}) == 3


def test_variant_name():
    assert variant_name("brush_solid", "") == "brush_solid"
    assert variant_name("brush_solid", "ALPHA_PASS") == "brush_solid_ALPHA_PASS"
    assert (
        variant_name("brush_solid", "ALPHA_PASS,DEBUG_OVERDRAW")
        == "brush_solid_ALPHA_PASS_DEBUG_OVERDRAW"
    )


def test_enumerate_uses_platform_mask():
    registry = StaticRegistry({"brush_solid": ["", "ALPHA_PASS"]})
    requests = enumerate_permutations(["gl", "gles"], registry)

    assert registry.masks == [
        build_capability_mask(TargetPlatform.Gl),
        build_capability_mask(TargetPlatform.Gles),
    ]
    assert requests == [
        BuildRequest("brush_solid", "", "gl"),
        BuildRequest("brush_solid", "ALPHA_PASS", "gl"),
        BuildRequest("brush_solid", "", "gles"),
        BuildRequest("brush_solid", "ALPHA_PASS", "gles"),
    ]


def test_enumerate_platform_legality():
    registry = default_registry()
    for platform in TargetPlatform:
        requests = enumerate_permutations([platform], registry)
        assert requests
        for request in requests:
            assert request.platform is platform
            assert not set(request.features) & FORBIDDEN_TOKENS[platform]

    gl_tokens = {t for r in enumerate_permutations(["gl"], registry) for t in r.features}
    gles_tokens = {t for r in enumerate_permutations(["gles"], registry) for t in r.features}
    assert "TEXTURE_RECT" in gl_tokens
    assert "TEXTURE_EXTERNAL" in gles_tokens
    assert "DEBUG_OVERDRAW" in gl_tokens


def test_enumerate_uniqueness():
    requests = enumerate_permutations(["gl", "gles"], default_registry())
    assert len(set(requests)) == len(requests)

    for platform in TargetPlatform:
        names = [r.variant_name for r in requests if r.platform is platform]
        assert len(set(names)) == len(names)

    stems = [(r.variant_name, r.platform) for r in requests]
    assert len(set(stems)) == len(stems)


def test_enumerate_ignores_duplicate_platforms():
    registry = StaticRegistry({"debug_color": [""]})
    requests = enumerate_permutations(["gl", TargetPlatform.Gl], registry)
    assert requests == [BuildRequest("debug_color", "", "gl")]
    assert len(registry.masks) == 1


def test_enumerate_empty_platform_is_reported(caplog):
    registry = FeatureRegistry({"composite": [["TEXTURE_EXTERNAL"]]})

    with caplog.at_level(logging.WARNING, logger="glslbake"):
        requests = enumerate_permutations(["gl"], registry)

    assert requests == []
    assert "No shader variants to build for Gl" in caplog.text


def test_enumerate_detects_colliding_names():
    registry = StaticRegistry({"brush_image": ["ALPHA"], "brush": ["image,ALPHA"]})
    with raises(ValueError):
        enumerate_permutations(["gl"], registry)

    registry = StaticRegistry({"brush_solid": ["", ""]})
    with raises(ValueError):
        enumerate_permutations(["gl"], registry)


if __name__ == "__main__":
    test_capability_mask_gl()
    test_capability_mask_gles()
    test_build_request()
    test_enumerate_platform_legality()
    test_enumerate_uniqueness()
