import re


re_include = re.compile(r"^(\s*)#include\s+(.+?)\s*$")


def iter_include_names(line):
    """Get the fragment names referenced by an include line, or nothing."""
    match = re_include.match(line)
    if match is None:
        return []
    names = []
    for name in match.group(2).split(","):
        name = name.strip().strip('"').strip()
        if name:
            names.append(name)
    return names


def resolve_includes(code, load_func, included=None):
    """Resolve ``#include name1,name2`` lines in the given GLSL.

    The code of each named fragment (obtained with ``load_func(name)``) is
    inserted above the include line, which is kept as a comment. Includes
    are resolved recursively, and each fragment is inserted only once, so
    diamond-shaped and circular includes are fine.
    """
    if not isinstance(code, str):
        raise TypeError(f"Shader code must be a str, not {code!r}")
    if included is None:
        included = set()

    lines = []
    for line in code.splitlines():
        match = re_include.match(line)
        if match is None:
            lines.append(line)
            continue
        for name in iter_include_names(line):
            if name in included:
                continue
            included.add(name)
            lines.append(resolve_includes(load_func(name), load_func, included))
        lines.append(match.group(1) + "// " + line.lstrip())

    return "\n".join(lines)
