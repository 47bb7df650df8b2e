"""
Utility functions for glslbake.

.. currentmodule:: glslbake.utils

.. autosummary::
    :toctree: utils/

    logger
    get_output_dir
    get_shader_dir

"""

import os
import logging

from ._dirs import get_output_dir, get_shader_dir, get_env_int  # noqa: F401

logger = logging.getLogger("glslbake")


def _set_log_level():
    # Set default level
    logger.setLevel(logging.WARN)
    # Set user-specified level
    level = os.getenv("GLSLBAKE_LOG_LEVEL", "")
    if level:
        try:
            if level.isnumeric():
                logger.setLevel(int(level))
            else:
                logger.setLevel(level.upper())
        except Exception:
            logger.warning(f"Invalid glslbake log level: {level}")


_set_log_level()
