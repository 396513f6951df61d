import codecs
import os
import re

from setuptools import setup, find_packages

here = os.path.abspath(os.path.dirname(__file__))


def read(*parts):
    return codecs.open(os.path.join(here, *parts), 'r').read()


def read_requirements(*parts):
    return [line.strip() for line in read(*parts).splitlines() if line.strip() and not line.startswith("#")]


def find_version(*file_paths):
    version_file = read(*file_paths)
    version_match = re.search(r"^__version__ = ['\"]([^'\"]*)['\"]", version_file, re.M)
    if version_match:
        return version_match.group(1)
    raise RuntimeError("Unable to find version string.")


setup(
    name="sampler_comparison",
    version=find_version("sampler_comparison", "__init__.py"),
    packages=find_packages(exclude=("test", "test.*")),
    include_package_data=True,
    description="Compares the sampling interval and the sampled stacks of execution profilers",
    long_description=read("README.md"),
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "Development Status :: 4 - Beta",
        "Topic :: Software Development :: Debuggers",
        "Topic :: Utilities"
    ],

    python_requires='>=3.7',
    install_requires=read_requirements("requirements.txt"),
    extras_require={
        "test": read_requirements("requirements-test.txt")
    },
    entry_points={
        "console_scripts": [
            "sampler-comparison=sampler_comparison.__main__:main"
        ]
    }
)
