import os
import shlex
import shutil
import tempfile
import subprocess

from ..utils import logger
from . import OptimizerContext, OptimizeResult


SPIRV_CROSS_DIALECTS = {
    "opengl": ["--version", "150", "--no-es"],
    "opengles30": ["--version", "300", "--es"],
}


def run_exe(args, cwd=None):
    """Run an executable. Returns (success, output)."""
    logger.debug(f"Executing command: {' '.join(args)}")
    try:
        p = subprocess.run(
            args,
            cwd=cwd,
            text=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
        )
    except OSError as err:
        return False, f"Cannot run {args[0]}: {err}"
    return p.returncode == 0, p.stdout or ""


class _TempDirOptimizer(OptimizerContext):
    """Base for back-ends that exchange files with external tools.

    Each context owns a private temporary directory, removed on close.
    """

    def __init__(self, target):
        super().__init__(target)
        self._tempdir = tempfile.mkdtemp(prefix="glslbake-")

    def close(self):
        if not self._closed:
            shutil.rmtree(self._tempdir, ignore_errors=True)
        super().close()

    def _write_input(self, stage, source):
        filename = os.path.join(self._tempdir, "input." + stage.extension)
        with open(filename, "wb") as f:
            f.write(source.encode())
        return filename

    def _read_output(self, filename):
        with open(filename, "rb") as f:
            return f.read().decode()


class SpirvCrossOptimizer(_TempDirOptimizer):
    """Optimize by compiling to SPIR-V and cross-compiling back to GLSL.

    Uses ``glslangValidator`` with size optimizations, and ``spirv-cross``
    to produce GLSL for the target dialect. The executables can be set with
    ``GLSLBAKE_GLSLANG`` and ``GLSLBAKE_SPIRV_CROSS``.
    """

    def __init__(self, target, glslang=None, spirv_cross=None):
        if target not in SPIRV_CROSS_DIALECTS:
            raise ValueError(f"spirv-cross optimizer does not support target {target!r}")
        super().__init__(target)
        self._glslang = glslang or os.getenv("GLSLBAKE_GLSLANG", "glslangValidator")
        self._spirv_cross = spirv_cross or os.getenv(
            "GLSLBAKE_SPIRV_CROSS", "spirv-cross"
        )

    def _optimize(self, stage, source):
        in_filename = self._write_input(stage, source)
        spv_filename = os.path.join(self._tempdir, stage.extension + ".spv")
        out_filename = os.path.join(self._tempdir, "output." + stage.extension)

        args = [self._glslang, "-G", "-Os", "--auto-map-locations"]
        args += ["--auto-map-bindings", "-S", stage.extension]
        args += ["-o", spv_filename, in_filename]
        ok, log = run_exe(args, self._tempdir)
        if not ok:
            return OptimizeResult(False, "", log)

        args = [self._spirv_cross, *SPIRV_CROSS_DIALECTS[self.target]]
        args += ["--output", out_filename, spv_filename]
        ok, log2 = run_exe(args, self._tempdir)
        if not ok:
            return OptimizeResult(False, "", log + log2)

        return OptimizeResult(True, self._read_output(out_filename), log + log2)


class CommandOptimizer(_TempDirOptimizer):
    """Optimize using an arbitrary command.

    The command is a string with the placeholders ``{stage}``, ``{target}``,
    ``{input}`` and ``{output}``, e.g. "glslopt -{stage} {target} {input} {output}".
    It must write the optimized code to the output file and exit with zero.
    When not given, it is read from ``GLSLBAKE_OPTIMIZER_COMMAND``.
    """

    def __init__(self, target, command=None):
        super().__init__(target)
        command = command or os.getenv("GLSLBAKE_OPTIMIZER_COMMAND", "")
        if not command.strip():
            self.close()
            raise ValueError("The command optimizer needs a command.")
        self._command = shlex.split(command)

    def _optimize(self, stage, source):
        in_filename = self._write_input(stage, source)
        out_filename = os.path.join(self._tempdir, "output." + stage.extension)
        if os.path.isfile(out_filename):
            os.remove(out_filename)

        fields = {
            "stage": str(stage),
            "target": self.target,
            "input": in_filename,
            "output": out_filename,
        }
        args = [arg.format(**fields) for arg in self._command]
        ok, log = run_exe(args, self._tempdir)
        if not ok:
            return OptimizeResult(False, "", log)
        if not os.path.isfile(out_filename):
            return OptimizeResult(False, "", log + "\nThe command wrote no output.")
        return OptimizeResult(True, self._read_output(out_filename), log)
