#!/usr/bin/env python

# Copyright the gpgpipe contributors
# SPDX-License-Identifier: Apache-2.0

"""
<Program Name>
  setup.py

<Copyright>
  See LICENSE for licensing information.

<Purpose>
  setup.py script to install the gpgpipe library and the gpgpipe command line
  tool.

  gpgpipe runs the gpg command line tool, which must be installed separately.

"""
import io
import os
import re

from setuptools import find_packages, setup

base_dir = os.path.dirname(os.path.abspath(__file__))


def get_version(filename="gpgpipe/__init__.py"):
    """
    Gather version number from specified file.

    This is done through regex processing, so the file is not imported or
    otherwise executed.

    No format verification of the resulting version number is done.
    """
    with io.open(os.path.join(base_dir, filename), encoding="utf-8") as initfile:
        for line in initfile.readlines():
            m = re.match("__version__ *= *['\"](.*)['\"]", line)
            if m:
                return m.group(1)


with open(os.path.join(base_dir, "README.md"), encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="gpgpipe",
    description=(
        "Run the gpg command line tool on payloads and streams from asyncio"
        " code"
    ),
    long_description_content_type="text/markdown",
    long_description=long_description,
    license="Apache-2.0",
    keywords="gpg gnupg openpgp subprocess asyncio",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Framework :: AsyncIO",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: Apache Software License",
        "Natural Language :: English",
        "Operating System :: POSIX",
        "Operating System :: POSIX :: Linux",
        "Operating System :: MacOS :: MacOS X",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3 :: Only",
        "Programming Language :: Python :: Implementation :: CPython",
        "Topic :: Security :: Cryptography",
        "Topic :: Software Development :: Libraries",
    ],
    python_requires=">=3.8, <4",
    packages=find_packages(exclude=["*.tests", "*.tests.*", "tests.*", "tests"]),
    install_requires=["securesystemslib>=0.18.0", "attrs"],
    test_suite="tests.runtests",
    entry_points={
        "console_scripts": ["gpgpipe = gpgpipe.gpgpipe_cli:main"],
    },
    version=get_version(),
)
