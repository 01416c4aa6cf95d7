#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Fernvale SPI - host driver for SPI flash behind a Fernvale serial bridge.

The host talks to the bridge over a plain byte-oriented serial link. After a
short handshake every SPI transaction travels as a length-prefixed frame and
the bridge answers with exactly the requested number of bytes.
"""

import os
from typing import Optional, Union

from packaging.version import Version, parse
from platformdirs import PlatformDirs


def get_fernvale_version() -> Version:
    """Get package version information.

    :return: Parsed version object of the package.
    """
    from .__version__ import __version__ as fernvale_version

    return parse(fernvale_version)


def value_to_bool(value: Optional[Union[bool, int, str]]) -> bool:
    """Convert value to boolean from various input formats.

    Supports conversion from string representations like "True", "true", "T", "1"
    and standard Python truthy/falsy values for other types.

    :param value: Value to convert to boolean (string, int, bool, or None).
    :return: Boolean representation of the input value.
    """
    if isinstance(value, str):
        return value in ("True", "true", "T", "1")
    return bool(value)


version = get_fernvale_version()

__author__ = "NXP"
__license__ = "BSD-3-Clause"
__version__ = str(version)

FERNVALE_PLATFORM_DIRS = PlatformDirs(
    appauthor="nxp",
    appname="fernvale_spi",
    version=version.base_version,
)

FERNVALE_DEBUG_LOGGING_DISABLED = value_to_bool(
    os.environ.get("FERNVALE_DEBUG_LOGGING_DISABLED")
)
FERNVALE_DEBUG_LOG_FILE = os.environ.get(
    "FERNVALE_DEBUG_LOG_FILE", os.path.join(FERNVALE_PLATFORM_DIRS.user_log_dir, "debug.log")
)
