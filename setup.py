#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

import itertools
import re

from setuptools import find_packages, setup  # type: ignore

with open("requirements.txt") as req_file:
    requirements = req_file.read().splitlines()

with open("README.md", "r") as f:
    long_description = f.read()

with open("fernvale_spi/__version__.py") as f:
    version = re.search(r'__version__ = "(.+)"', f.read()).group(1)  # type: ignore

extras_require = {
    "test": ["pytest>=7", "importlib_metadata"],
}
# specify all option that contains all extras
extras_require["all"] = list(itertools.chain.from_iterable(extras_require.values()))

setup(
    name="fernvale-spi",
    version=version,
    description="Host driver for SPI flash behind a Fernvale serial bridge",
    author="NXP",
    license="BSD-3-Clause",
    long_description=long_description,
    long_description_content_type="text/markdown",
    platforms="Linux, Mac OSX",
    python_requires=">=3.9",
    install_requires=requirements,
    include_package_data=True,
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Programming Language :: Python :: 3 :: Only",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: POSIX :: Linux",
        "Operating System :: MacOS :: MacOS X",
        "License :: OSI Approved :: BSD License",
        "Topic :: Software Development :: Embedded Systems",
        "Topic :: System :: Hardware",
        "Topic :: Utilities",
    ],
    packages=find_packages(exclude=["tests.*", "tests"]),
    entry_points={
        "console_scripts": [
            "fvspi=fernvale_spi.apps.fvspi:safe_main",
        ],
    },
    extras_require=extras_require,
)
