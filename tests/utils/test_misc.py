#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Tests of miscellaneous utilities."""

import time

import pytest

from fernvale_spi.exceptions import FernvaleTimeoutError, FernvaleValueError
from fernvale_spi.utils.misc import Timeout, format_bytes


def test_timeout_overflow() -> None:
    timeout = Timeout(20)
    assert not timeout.overflow()
    time.sleep(0.03)
    assert timeout.overflow()
    with pytest.raises(FernvaleTimeoutError):
        timeout.overflow(raise_exc=True)
    assert timeout.get_rest_time() == 0
    assert timeout.get_consumed_time_ms() >= 20


def test_timeout_disabled() -> None:
    timeout = Timeout(0)
    assert timeout.get_rest_time() is None
    assert not timeout.overflow()
    assert str(timeout) == "none"


def test_timeout_units() -> None:
    assert str(Timeout(1000)) == "1000ms"
    assert str(Timeout(2, "s")) == "2s"
    rest = Timeout(2, "s").get_rest_time()
    assert rest is not None and 1.5 < rest <= 2


@pytest.mark.parametrize("timeout,units", [(-1, "ms"), (10, "min")])
def test_timeout_invalid(timeout: int, units: str) -> None:
    with pytest.raises(FernvaleValueError):
        Timeout(timeout, units)


def test_format_bytes() -> None:
    assert format_bytes(b"\x9f\x00\x01") == "9f 00 01"
    assert format_bytes(b"") == ""
