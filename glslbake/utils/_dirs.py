import os


def get_output_dir(default="out"):
    """Get the directory to write optimized shaders to.

    Set by ``GLSLBAKE_OUT_DIR``, or by ``OUT_DIR`` as build systems tend to
    provide it. Falls back to ``default`` relative to the working directory.
    """
    dir = os.getenv("GLSLBAKE_OUT_DIR") or os.getenv("OUT_DIR") or default
    return os.path.abspath(dir)


def get_shader_dir(default=None):
    """Get the directory holding the GLSL source fragments, or None."""
    dir = os.getenv("GLSLBAKE_SHADER_DIR") or default
    if not dir:
        return None
    return os.path.abspath(dir)


def get_env_int(name, default=None):
    """Get a positive int from the environment."""
    value = os.getenv(name, "").strip()
    if not value:
        return default
    try:
        result = int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, not {value!r}") from None
    if result < 1:
        raise ValueError(f"{name} must be at least 1, not {result}")
    return result
