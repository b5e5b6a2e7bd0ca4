#!/usr/bin/env python

from setuptools import setup


VERSION = "0.1a1"

setup(
    name="saxflow",
    version=VERSION,
    description=(
        "Flow-controlled and lazily advanced streams of markup tokenizer events."
    ),
    license="AGPL-3.0-or-later",
    python_requires=">=3.10",
    packages=["_saxflow", "_saxflow.plugins", "saxflow", "saxflow.plugins"],
    install_requires=["typing_extensions; python_version < '3.11'"],
    extras_require={
        "web-loader": ["httpx"],
        "http2": ["httpx[http2]"],
        "tests": ["httpx", "pytest", "pytest-httpx"],
        "benchmarks": ["pytest-benchmark"],
    },
)
