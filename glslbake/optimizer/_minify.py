import re

from . import OptimizerContext, OptimizeResult


# Matched left to right, so a "/*" inside a line comment (or "//" inside
# a block comment) is part of that comment.
re_comment = re.compile(r"//[^\n]*|/\*.*?\*/", re.DOTALL)
re_whitespace = re.compile(r"\s+")
# Only punctuation that never forms a multi-character token with its neighbours.
re_punct_space = re.compile(r" ?([{}()\[\];,]) ?")


def strip_comments(code, keep_lines=False):
    """Remove line and block comments from GLSL in a single pass.

    A block comment becomes a space. With ``keep_lines``, the newlines
    inside it are kept, so that line numbers do not change.
    """

    def replace(match):
        text = match.group(0)
        if text.startswith("//"):
            return ""
        elif keep_lines:
            return " " + "\n" * text.count("\n")
        return " "

    return re_comment.sub(replace, code)


def minify_glsl(code):
    """Remove comments and redundant whitespace from GLSL.

    Preprocessor lines are kept on a line of their own, with only their
    whitespace collapsed, so that e.g. function-like macros keep their meaning.
    """
    code = code.replace("\\\n", "")
    code = strip_comments(code)

    out = []
    pending = []
    for line in code.splitlines():
        line = line.strip()
        if not line:
            continue
        if line.startswith("#"):
            if pending:
                out.append(_minify_code(" ".join(pending)))
                pending = []
            out.append(re_whitespace.sub(" ", line))
        else:
            pending.append(line)
    if pending:
        out.append(_minify_code(" ".join(pending)))

    return "\n".join(out) + "\n"


def _minify_code(code):
    code = re_whitespace.sub(" ", code)
    return re_punct_space.sub(r"\1", code).strip()


def check_balanced(code):
    """Get a message describing the first unbalanced bracket, or None.

    Brackets in comments and preprocessor lines are ignored.
    """
    code = strip_comments(code, keep_lines=True)
    pairs = {")": "(", "]": "[", "}": "{"}
    stack = []
    for linenr, line in enumerate(code.splitlines(), 1):
        if line.lstrip().startswith("#"):
            continue
        for c in line:
            if c in "([{":
                stack.append((c, linenr))
            elif c in pairs:
                if not stack or stack[-1][0] != pairs[c]:
                    return f"0:{linenr}: error: unexpected '{c}'"
                stack.pop()
    if stack:
        c, linenr = stack[-1]
        return f"0:{linenr}: error: unclosed '{c}'"
    return None


class MinifyOptimizer(OptimizerContext):
    """A pure-Python back-end that strips comments and whitespace.

    It does not change the semantics of the code, so it works for any target.
    Sources with unbalanced brackets are rejected.
    """

    def _optimize(self, stage, source):
        if not source.strip():
            return OptimizeResult(False, "", f"{stage} shader: empty source")
        error = check_balanced(source)
        if error:
            return OptimizeResult(False, "", f"{stage} shader: {error}")
        return OptimizeResult(True, minify_glsl(source), "")
