"""Global configuration for pytest"""

import numpy as np
import pytest

from glslbake.optimizer import OptimizerContext, OptimizeResult


@pytest.fixture(autouse=True, scope="session")
def numerical_exceptions():
    """
    Ensure any numerical errors raise in our test suite
    The point is that we enforce such cases to be handled explicitly in our code
    Preferably using local `with np.errstate(...)` constructs
    """
    np.seterr(all="raise")


class FakeOptimizer(OptimizerContext):
    """An optimizer that upper-cases the code, and rejects code containing "#error".

    Records each created context, so tests can check their lifetime.
    """

    instances = []

    def __init__(self, target):
        super().__init__(target)
        self.calls = []
        FakeOptimizer.instances.append(self)

    def _optimize(self, stage, source):
        self.calls.append(str(stage))
        if "#error" in source:
            return OptimizeResult(False, "", f"{stage}: #error found")
        return OptimizeResult(True, f"// {self.target} {stage}\n" + source.upper(), "")


@pytest.fixture
def fake_optimizer():
    FakeOptimizer.instances = []
    return FakeOptimizer


SHADER_SOURCES = {
    "shared": "precision highp float;\nvec4 shared_color() { return vec4(1.0); }",
    "prim_shared": "#include shared\nvec4 prim() { return shared_color(); }",
    "brush_solid": "#include shared,prim_shared\nvoid main() { gl_Position = prim(); }",
    "brush_blend": "#include prim_shared\nvoid main() { gl_Position = prim() * 2.0; }",
    "broken": "#include shared\n#error broken\nvoid main() { }",
}


@pytest.fixture
def shader_dir(tmp_path):
    dir = tmp_path / "res"
    dir.mkdir()
    for name, code in SHADER_SOURCES.items():
        (dir / f"{name}.glsl").write_text(code + "\n", encoding="utf-8")
    return dir
