import sys

from setuptools import find_packages, setup

VERSION = "0.1.0"

try:
    long_description = open("README.rst", encoding="utf-8").read()
except Exception as e:
    sys.stderr.write("Failed to read README: {}\n".format(e))
    sys.stderr.flush()
    long_description = ""

setup(
    name="fstweight",
    version=VERSION,
    description="Semiring weights for weighted finite-state transducers",
    long_description=long_description,
    packages=find_packages(include=["fstweight", "fstweight.*"]),
    install_requires=[
        "torch>=1.12",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-cov",
            "pytest-xdist",
            "mypy",
            "black",
            "flake8",
            "isort",
        ],
    },
    python_requires=">=3.8",
    keywords="finite-state transducers semirings weights automata",
    license="Apache 2.0",
    classifiers=[
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: POSIX :: Linux",
        "Operating System :: MacOS :: MacOS X",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
