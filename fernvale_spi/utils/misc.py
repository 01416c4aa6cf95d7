#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Miscellaneous helpers shared by the transport and the applications."""

import time
from math import ceil
from typing import Iterable, Optional

from fernvale_spi.exceptions import FernvaleTimeoutError, FernvaleValueError


class Timeout:
    """Deadline tracker for blocking operations.

    A zero timeout disables the deadline: the timer never overflows and
    :meth:`get_rest_time` reports ``None``.

    :cvar UNITS: Supported time units and their conversion factors to microseconds.
    """

    UNITS = {
        "s": 1000000,
        "ms": 1000,
        "us": 1,
    }

    def __init__(self, timeout: int, units: str = "ms") -> None:
        """Initialize timeout class with specified timeout value and units.

        :param timeout: Timeout value in specified units, 0 disables the deadline.
        :param units: Timeout units (MUST be from the UNITS list).
        :raises FernvaleValueError: Invalid input value.
        """
        if units not in self.UNITS:
            raise FernvaleValueError("Units are not in supported units.")
        if timeout < 0:
            raise FernvaleValueError("Timeout must not be negative.")
        self.enabled = timeout != 0
        self.timeout_us = timeout * self.UNITS[units]
        self.start_time_us = self._get_current_time_us()
        self.end_time = self.start_time_us + self.timeout_us
        self.units = units

    @staticmethod
    def _get_current_time_us() -> int:
        """Get monotonic clock value in microseconds.

        :return: Current time in microseconds as integer.
        """
        return ceil(time.monotonic() * 1_000_000)

    def get_consumed_time_ms(self) -> int:
        """Get consumed time since start of timed operation in milliseconds.

        :return: Consumed time in milliseconds.
        """
        return (self._get_current_time_us() - self.start_time_us) // 1000

    def get_rest_time(self) -> Optional[float]:
        """Get remaining time in seconds, the unit used by ``select``.

        :return: Remaining seconds (never negative) or None when the deadline is disabled.
        """
        if not self.enabled:
            return None
        return max(self.end_time - self._get_current_time_us(), 0) / 1_000_000

    def overflow(self, raise_exc: bool = False) -> bool:
        """Check if the timer has overflowed.

        :param raise_exc: If True, raises FernvaleTimeoutError when overflow occurs.
        :return: True if timeout has overflowed, False otherwise.
        :raises FernvaleTimeoutError: When overflow occurs and raise_exc is True.
        """
        overflow = self.enabled and self._get_current_time_us() > self.end_time
        if overflow and raise_exc:
            raise FernvaleTimeoutError("Timeout of operation.")
        return overflow

    def __str__(self) -> str:
        return f"{self.timeout_us // self.UNITS[self.units]}{self.units}" if self.enabled else "none"


def format_bytes(data: Iterable[int]) -> str:
    """Format bytes as space separated hex pairs for trace logs.

    :param data: Bytes to format.
    :return: String like ``"9f 00 01"``.
    """
    return " ".join(f"{b:02x}" for b in data)
