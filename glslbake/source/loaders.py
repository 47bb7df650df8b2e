import os

import jinja2

from ..errors import ConfigurationDefect
from .templating import jinja_env


def make_resolver(source):
    """Create a resolver that maps a fragment name to its GLSL text.

    Parameters
    ----------
    source : str | os.PathLike | dict | jinja2.BaseLoader | callable
        A directory (``<name>.glsl`` files are looked up in it), a jinja2
        loader (``<name>.glsl`` templates are looked up in it), a dict that
        maps names to code, or a function that accepts a name and returns
        the code (or None if it does not exist).

    The returned resolver raises ``ConfigurationDefect`` when a fragment
    cannot be found.
    """
    suffix = ".glsl"
    if isinstance(source, (str, os.PathLike)):
        loader = jinja2.FileSystemLoader(os.fspath(source), encoding="utf-8")
    elif isinstance(source, jinja2.BaseLoader):
        loader = source
    elif isinstance(source, dict):
        loader = jinja2.DictLoader(source)
        suffix = ""
    elif callable(source):
        loader = jinja2.FunctionLoader(source)
        suffix = ""
    else:
        raise TypeError(
            f"The shader source must be a directory, jinja2.BaseLoader, function, or dict. Not {source!r}"
        )

    def resolve(name):
        try:
            code, _, _ = loader.get_source(jinja_env, name + suffix)
        except jinja2.TemplateNotFound:
            raise ConfigurationDefect(
                f"Shader source fragment '{name}' not found."
            ) from None
        return code

    return resolve
