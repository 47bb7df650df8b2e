"""
Versioning for glslbake. We use a hard-coded version number, because it's
simple and always works.
"""

# This is the reference version number, to be bumped before each release.
# setup.py reads this definition when building a distribution.
__version__ = "0.3.0"

version_info = tuple(int(i) if i.isnumeric() else i for i in __version__.split("."))
