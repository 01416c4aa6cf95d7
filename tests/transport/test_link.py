#!/usr/bin/env python
# -*- coding: UTF-8 -*-
#
# Copyright 2025 NXP
#
# SPDX-License-Identifier: BSD-3-Clause

"""Tests of the link initializer."""

import sys
from unittest.mock import patch

import pytest
from serial import SerialException

from fernvale_spi.exceptions import (
    ConfigureError,
    FernvaleValueError,
    OpenError,
    SessionStateError,
    SyncTimeout,
)
from fernvale_spi.transport.link import (
    DEFAULT_PORT,
    BaudRate,
    LinkConfig,
    default_baudrate,
    open_and_sync,
    open_serial_port,
)
from fernvale_spi.transport.session import SessionState, TransportSession
from fernvale_spi.utils.serial_proxy import SerialProxy


def test_link_config_defaults() -> None:
    config = LinkConfig()
    assert config.port == DEFAULT_PORT
    assert config.baudrate == default_baudrate()
    assert config.sync_timeout == 5000
    assert config.transaction_timeout == 1000
    assert LinkConfig(port="").port == DEFAULT_PORT


def test_default_baudrate_per_platform() -> None:
    with patch.object(sys, "platform", "linux"):
        assert default_baudrate() == 921600
    with patch.object(sys, "platform", "darwin"):
        assert default_baudrate() == 230400
    with patch.object(sys, "platform", "win32"):
        assert default_baudrate() == 115200


def test_link_config_validation() -> None:
    with pytest.raises(FernvaleValueError):
        LinkConfig(baudrate=9600)
    with pytest.raises(FernvaleValueError):
        LinkConfig(sync_timeout=-1)
    assert LinkConfig(baudrate=460800).baudrate == BaudRate.B460800.tag


def test_open_and_sync(simulated_serial: type[SerialProxy]) -> None:
    session = open_and_sync(LinkConfig(port="/dev/ttyUSB0", baudrate=921600))
    assert session.is_active
    assert session.name == "/dev/ttyUSB0"
    simulator = simulated_serial.last_simulator
    assert simulator is not None and simulator.greeted

    assert session.send_command(b"\x9f", 3) == b"\xbf\x25\x41"
    session.shutdown()
    simulator.join()
    assert simulator.shutdown_received
    assert simulator.frames == [(b"\x9f", 3)]


def test_serial_settings(simulated_serial: type[SerialProxy]) -> None:
    port = open_serial_port(LinkConfig(port="/dev/ttyUSB1", baudrate=230400))
    try:
        assert port.port == "/dev/ttyUSB1"
        assert port.baudrate == 230400
        assert port.exclusive
        assert port.timeout == 0
    finally:
        port.close()


def test_open_missing_device() -> None:
    with patch("fernvale_spi.transport.link.Serial", SerialProxy.init_proxy(available=False)):
        with pytest.raises(OpenError):
            open_and_sync(LinkConfig(port="/dev/missing"))
    assert TransportSession.get_active() is None


def test_open_real_missing_device() -> None:
    with pytest.raises(OpenError):
        open_serial_port(LinkConfig(port="/dev/this-device-does-not-exist"))


def test_configure_failure() -> None:
    with patch.object(
        SerialProxy, "open", side_effect=SerialException("Could not configure port")
    ):
        with patch("fernvale_spi.transport.link.Serial", SerialProxy.init_proxy()):
            with pytest.raises(ConfigureError):
                open_serial_port(LinkConfig())


def test_sync_timeout_releases_link() -> None:
    proxy = SerialProxy.init_proxy(send_ready=False)
    with patch("fernvale_spi.transport.link.Serial", proxy):
        with pytest.raises(SyncTimeout):
            open_and_sync(LinkConfig(sync_timeout=100))
    assert TransportSession.get_active() is None
    assert proxy.last_simulator is not None and proxy.last_simulator.greeted


def test_second_session_rejected(simulated_serial: type[SerialProxy]) -> None:
    session = open_and_sync(LinkConfig())
    with pytest.raises(SessionStateError):
        open_and_sync(LinkConfig())
    assert session.state == SessionState.ACTIVE
