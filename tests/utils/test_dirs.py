import os

from pytest import raises

from glslbake.utils import get_env_int, get_output_dir, get_shader_dir


def test_get_output_dir(monkeypatch, tmp_path):
    monkeypatch.delenv("GLSLBAKE_OUT_DIR", raising=False)
    monkeypatch.delenv("OUT_DIR", raising=False)
    assert get_output_dir() == os.path.abspath("out")
    assert get_output_dir("build") == os.path.abspath("build")

    monkeypatch.setenv("OUT_DIR", str(tmp_path / "a"))
    assert get_output_dir() == str(tmp_path / "a")

    # Our own variable wins
    monkeypatch.setenv("GLSLBAKE_OUT_DIR", str(tmp_path / "b"))
    assert get_output_dir() == str(tmp_path / "b")


def test_get_shader_dir(monkeypatch, tmp_path):
    monkeypatch.delenv("GLSLBAKE_SHADER_DIR", raising=False)
    assert get_shader_dir() is None
    assert get_shader_dir("res") == os.path.abspath("res")

    monkeypatch.setenv("GLSLBAKE_SHADER_DIR", str(tmp_path))
    assert get_shader_dir() == str(tmp_path)


def test_get_env_int(monkeypatch):
    monkeypatch.delenv("GLSLBAKE_TEST_INT", raising=False)
    assert get_env_int("GLSLBAKE_TEST_INT") is None
    assert get_env_int("GLSLBAKE_TEST_INT", 3) == 3

    monkeypatch.setenv("GLSLBAKE_TEST_INT", " 8 ")
    assert get_env_int("GLSLBAKE_TEST_INT") == 8

    for value in ["eight", "0", "-2"]:
        monkeypatch.setenv("GLSLBAKE_TEST_INT", value)
        with raises(ValueError):
            get_env_int("GLSLBAKE_TEST_INT")
