#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Programmer parameter strings.

Parameters use the usual programmer syntax ``name:key=value,key=value``,
for example ``fernvale_spi:dev=/dev/ttyUSB0,baud=921600``. A backend
extracts every key it understands; keys left over afterwards are an error.
"""

import logging
from typing import Optional

from fernvale_spi.exceptions import FernvaleValueError

logger = logging.getLogger(__name__)


class ProgrammerParams:
    """Key/value parameters passed to a programmer backend."""

    def __init__(self, params: str = "") -> None:
        """Parse the parameter string.

        :param params: Comma separated ``key=value`` pairs.
        :raises FernvaleValueError: Malformed or duplicated parameter.
        """
        self._params: dict[str, str] = {}
        for item in params.split(","):
            item = item.strip()
            if not item:
                continue
            key, sep, value = item.partition("=")
            key = key.strip()
            if not sep or not key:
                raise FernvaleValueError(f"Invalid programmer parameter '{item}', use key=value")
            if key in self._params:
                raise FernvaleValueError(f"Programmer parameter '{key}' specified more than once")
            self._params[key] = value.strip()

    def extract(self, key: str) -> Optional[str]:
        """Remove a parameter and return its value.

        An empty value is treated as if the parameter was not given.

        :param key: Parameter name.
        :return: Parameter value or None.
        """
        value = self._params.pop(key, None)
        return value or None

    def extract_int(self, key: str, default: int) -> int:
        """Remove an integer parameter and return its value.

        :param key: Parameter name.
        :param default: Value used when the parameter is not given.
        :return: Parameter value.
        :raises FernvaleValueError: The value is not an integer.
        """
        value = self.extract(key)
        if value is None:
            return default
        try:
            return int(value, 0)
        except ValueError as exc:
            raise FernvaleValueError(f"Programmer parameter '{key}={value}' is not an integer") from exc

    def check_unhandled(self) -> None:
        """Make sure every parameter has been consumed.

        :raises FernvaleValueError: Some parameters were not recognized.
        """
        if self._params:
            raise FernvaleValueError(
                f"Unhandled programmer parameters: {', '.join(sorted(self._params))}"
            )

    def __len__(self) -> int:
        return len(self._params)

    def __str__(self) -> str:
        return ",".join(f"{key}={value}" for key, value in self._params.items())


def split_programmer_spec(spec: str) -> tuple[str, ProgrammerParams]:
    """Split ``name:params`` into the programmer name and its parameters.

    :param spec: Programmer specification.
    :return: Programmer name and parsed parameters.
    """
    name, _, params = spec.partition(":")
    return name.strip(), ProgrammerParams(params)
