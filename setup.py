import re

from setuptools import find_packages, setup


with open("glslbake/_version.py", "rb") as fh:
    init_text = fh.read().decode()
    VERSION = re.search(r"__version__ = \"(.*?)\"", init_text).group(1)


runtime_deps = [
    "numpy",
    "Jinja2",
]

extras_require = {
    "tests": [
        "pytest",
    ],
    "dev": [
        "black",
        "flake8",
        "flake8-black",
        "pep8-naming",
        "pytest",
        "setuptools",
        "wheel",
        "twine",
    ],
}


setup(
    name="glslbake",
    version=VERSION,
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8.0",
    install_requires=runtime_deps,
    extras_require=extras_require,
    license="BSD 2-Clause",
    description="Offline precompilation and optimization of GLSL shader variants",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    zip_safe=True,
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: BSD License",
        "Programming Language :: Python :: 3",
        "Topic :: Software Development :: Build Tools",
        "Topic :: Multimedia :: Graphics :: 3D Rendering",
    ],
    entry_points={
        "console_scripts": [
            "glslbake = glslbake.__main__:main",
        ],
    },
)
