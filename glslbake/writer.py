"""
Write optimized shaders to the output directory.

Files are first written to a uniquely named sibling, and then moved into
place with ``os.replace()``, which is atomic. Other processes therefore see
either the old or the new file, never a partially written one.
"""

import os
import json
import time
import errno
import secrets

from .errors import OutputWriteError
from .utils import logger


MANIFEST_FILENAME = "optimized_shaders.json"

# Errors that may go away when we try again.
TRANSIENT_ERRNOS = {
    errno.EAGAIN,
    errno.EBUSY,
    errno.EINTR,
    errno.ENOSPC,
}


def is_transient(err):
    """Get whether an OSError may succeed on a retry."""
    if isinstance(err, (PermissionError, IsADirectoryError, NotADirectoryError)):
        return False
    return err.errno in TRANSIENT_ERRNOS


class OutputWriter:
    """Writes optimized variants to a directory.

    Parameters
    ----------
    output_dir : str
        The root directory for the output. Created when needed.
    retries : int
        How many times to retry a write that failed with a transient error.
    retry_delay : float
        The number of seconds to wait before a retry.
    """

    def __init__(self, output_dir, retries=3, retry_delay=0.1):
        self._output_dir = os.fspath(output_dir)
        self._retries = max(0, int(retries))
        self._retry_delay = float(retry_delay)

    def __repr__(self):
        return f"<OutputWriter {self._output_dir!r}>"

    @property
    def output_dir(self):
        return self._output_dir

    def write(self, variant, vertex_bytes, fragment_bytes):
        """Write the vertex and fragment code of an optimized variant."""
        self.write_bytes(variant.vertex_path, vertex_bytes)
        self.write_bytes(variant.fragment_path, fragment_bytes)

    def write_bytes(self, filename, data):
        """Atomically write bytes to a file, replacing it if it exists.

        Raises ``OutputWriteError`` on failure.
        """
        attempt = 0
        while True:
            try:
                self._write_once(filename, data)
            except OSError as err:
                if attempt < self._retries and is_transient(err):
                    attempt += 1
                    logger.warning(
                        f"Writing {filename} failed ({err}), retry {attempt}/{self._retries}."
                    )
                    time.sleep(self._retry_delay)
                    continue
                raise OutputWriteError(filename, str(err)) from err
            else:
                return

    def _write_once(self, filename, data):
        dirname = os.path.dirname(filename)
        if dirname:
            os.makedirs(dirname, exist_ok=True)
        filename2 = filename + ".part." + secrets.token_urlsafe(4)
        try:
            with open(filename2, "wb") as f:
                f.write(data)
            os.replace(filename2, filename)
        except OSError:
            try:
                os.remove(filename2)
            except OSError:
                pass
            raise

    def write_manifest(self, variants):
        """Write a JSON file that lists the variants and their digests.

        The entries are sorted, so the same variants produce the same file.
        Returns the filename.
        """
        entries = []
        for variant in variants:
            entries.append(
                {
                    "name": variant.variant_name,
                    "platform": variant.platform.name,
                    "shader": variant.request.shader_id,
                    "features": list(variant.request.features),
                    "vert": os.path.basename(variant.vertex_path),
                    "frag": os.path.basename(variant.fragment_path),
                    "digest": str(variant.digest),
                }
            )
        entries.sort(key=lambda e: (e["name"], e["platform"]))
        text = json.dumps({"shaders": entries}, indent=2) + "\n"
        filename = os.path.join(self._output_dir, MANIFEST_FILENAME)
        self.write_bytes(filename, text.encode())
        return filename
