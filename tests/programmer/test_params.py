#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Tests of programmer parameter parsing."""

import pytest

from fernvale_spi.exceptions import FernvaleValueError
from fernvale_spi.programmer.params import ProgrammerParams, split_programmer_spec


def test_extract_once() -> None:
    params = ProgrammerParams("dev=/dev/ttyUSB0, baud=0x38400")
    assert len(params) == 2
    assert params.extract("dev") == "/dev/ttyUSB0"
    assert params.extract("dev") is None
    assert params.extract_int("baud", 115200) == 230400
    params.check_unhandled()


def test_empty_value_means_default() -> None:
    params = ProgrammerParams("dev=,timeout=")
    assert params.extract("dev") is None
    assert params.extract_int("timeout", 1000) == 1000


def test_unhandled_parameters() -> None:
    params = ProgrammerParams("dev=/dev/ttyACM0,speed=1")
    params.extract("dev")
    with pytest.raises(FernvaleValueError, match="speed"):
        params.check_unhandled()
    assert str(params) == "speed=1"


@pytest.mark.parametrize("text", ["dev", "=x", "dev=a,dev=b"])
def test_invalid_syntax(text: str) -> None:
    with pytest.raises(FernvaleValueError):
        ProgrammerParams(text)


def test_not_an_integer() -> None:
    with pytest.raises(FernvaleValueError):
        ProgrammerParams("baud=fast").extract_int("baud", 0)


def test_split_programmer_spec() -> None:
    name, params = split_programmer_spec("fernvale_spi:dev=/dev/ttyUSB0")
    assert name == "fernvale_spi"
    assert params.extract("dev") == "/dev/ttyUSB0"
    name, params = split_programmer_spec("fernvale_spi")
    assert name == "fernvale_spi"
    assert not params
