#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Tests of the tag/label enumeration."""

import pytest

from fernvale_spi.exceptions import FernvaleValueError
from fernvale_spi.transport.link import BaudRate
from fernvale_spi.transport.session import SessionState
from fernvale_spi.utils.fernvale_enum import FernvaleEnum


class Phase(FernvaleEnum):
    """Test enumeration."""

    HEADER = (1, "header", "Frame header")
    PAYLOAD = (2, "payload")


def test_equality() -> None:
    assert Phase.HEADER == 1
    assert Phase.HEADER == "header"
    assert Phase.HEADER != Phase.PAYLOAD
    assert Phase.PAYLOAD.description is None
    assert len({Phase.HEADER, Phase.HEADER, Phase.PAYLOAD}) == 2


def test_lookup() -> None:
    assert Phase.tags() == [1, 2]
    assert Phase.labels() == ["header", "payload"]
    assert Phase.from_tag(2) is Phase.PAYLOAD
    assert Phase.from_label("HEADER") is Phase.HEADER
    with pytest.raises(FernvaleValueError):
        Phase.from_tag(3)
    with pytest.raises(FernvaleValueError):
        Phase.from_label("reply")


def test_transport_enums() -> None:
    assert BaudRate.from_label("921600").tag == 921600
    assert 230400 in BaudRate.tags()
    assert SessionState.from_tag(4) is SessionState.FAULTED
